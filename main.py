#!/usr/bin/env python3
"""
Site Mapper
Crawl service that screenshots a website's pages and rebuilds its site tree
"""

import logging
import sys
from aiohttp import web
from sitemapper.config import Settings
from sitemapper.monitoring import LogManager
from sitemapper.server import build_orchestrator, create_app

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the crawl service"""
    settings = Settings.from_env()
    LogManager.from_config(settings.log)

    orchestrator = build_orchestrator(settings)
    app = create_app(orchestrator, allowed_origins=settings.server.allowed_origins)

    logger.info(f"Server listening at http://{settings.server.host}:{settings.server.port}")
    web.run_app(app, host=settings.server.host, port=settings.server.port, print=None)


if __name__ == "__main__":
    print("🌿 Site Mapper Starting...")
    try:
        main()
    except KeyboardInterrupt:
        print("\n🛑 Server stopped by user")
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

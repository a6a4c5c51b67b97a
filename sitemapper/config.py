"""
Service configuration - dataclass settings, overridable from the environment
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv


@dataclass
class OrchestratorConfig:
    """Task queue behavior"""
    max_attempts: int = 3
    retry_delay: float = 2.0
    retention_seconds: float = 3600.0
    sweep_interval: float = 60.0


@dataclass
class CrawlerConfig:
    """Browser crawl limits"""
    max_pages: int = 20
    headless: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080
    navigation_timeout: float = 30.0
    max_crawl_seconds: float = 600.0
    full_page_screenshots: bool = False
    user_agent: str = 'Mozilla/5.0 (compatible; SiteMapper/1.0 Webkit) AppleWebKit/537.36'


@dataclass
class StorageConfig:
    """Where screenshots and finished trees are written"""
    base_path: str = 'crawl_data'
    thumbnail_dir: str = 'thumbnail'
    records_dir: str = 'crawl_data'
    compress: bool = False


@dataclass
class ServerConfig:
    """HTTP service binding"""
    host: str = '0.0.0.0'
    port: int = 8000
    allowed_origins: List[str] = None

    def __post_init__(self):
        if self.allowed_origins is None:
            self.allowed_origins = ['http://localhost:3000']


@dataclass
class LogConfig:
    log_dir: str = 'crawl_data/logs'
    log_level: str = 'INFO'


@dataclass
class Settings:
    """All service settings"""
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'Settings':
        """Build settings from SITEMAPPER_* environment variables

        ``.env.local`` and ``.env`` are loaded first when present; variables
        already set in the process environment win.
        """
        for path in ([env_file] if env_file else ['.env.local', '.env']):
            load_dotenv(path, override=False)

        return cls(
            orchestrator=OrchestratorConfig(
                max_attempts=_int('SITEMAPPER_MAX_ATTEMPTS', 3),
                retry_delay=_float('SITEMAPPER_RETRY_DELAY', 2.0),
                retention_seconds=_float('SITEMAPPER_RETENTION_SECONDS', 3600.0),
                sweep_interval=_float('SITEMAPPER_SWEEP_INTERVAL', 60.0)
            ),
            crawler=CrawlerConfig(
                max_pages=_int('SITEMAPPER_MAX_PAGES', 20),
                headless=_bool('SITEMAPPER_HEADLESS', True),
                navigation_timeout=_float('SITEMAPPER_NAVIGATION_TIMEOUT', 30.0),
                max_crawl_seconds=_float('SITEMAPPER_MAX_CRAWL_SECONDS', 600.0),
                full_page_screenshots=_bool('SITEMAPPER_FULL_PAGE_SCREENSHOTS', False)
            ),
            storage=StorageConfig(
                base_path=os.environ.get('SITEMAPPER_DATA_DIR', 'crawl_data'),
                compress=_bool('SITEMAPPER_COMPRESS_THUMBNAILS', False)
            ),
            server=ServerConfig(
                host=os.environ.get('SITEMAPPER_HOST', '0.0.0.0'),
                port=_int('SITEMAPPER_PORT', 8000),
                allowed_origins=_list('SITEMAPPER_ALLOWED_ORIGINS')
            ),
            log=LogConfig(
                log_dir=os.environ.get('SITEMAPPER_LOG_DIR', 'crawl_data/logs'),
                log_level=os.environ.get('SITEMAPPER_LOG_LEVEL', 'INFO')
            )
        )


def _int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


def _bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if not value:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _list(name: str) -> Optional[List[str]]:
    value = os.environ.get(name)
    if not value:
        return None
    return [item.strip() for item in value.split(',') if item.strip()]

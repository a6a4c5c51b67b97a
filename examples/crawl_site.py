#!/usr/bin/env python3
"""
Crawl example
Runs one crawl task through the orchestrator with the Playwright runner
"""

import asyncio
import json
import sys
from sitemapper.config import CrawlerConfig, OrchestratorConfig
from sitemapper.crawler import PlaywrightCrawlRunner
from sitemapper.orchestrator import TaskOrchestrator, TaskStatus
from sitemapper.storage import FileObjectStore, JsonFileRecordSink


async def main(site_url: str):
    print("🌿 Crawl Example")
    print("="*50)

    runner = PlaywrightCrawlRunner(
        FileObjectStore(base_path='example_data/thumbnail'),
        CrawlerConfig(max_pages=5)
    )
    orchestrator = TaskOrchestrator(
        runner,
        record_sink=JsonFileRecordSink(base_path='example_data/crawl_data'),
        config=OrchestratorConfig(sweep_interval=0)
    )

    await orchestrator.start()
    task_id = orchestrator.submit('demo', site_url)
    print(f"📋 Submitted task {task_id}")

    await orchestrator.join()
    task = orchestrator.status(task_id)
    await orchestrator.stop()

    if task.status == TaskStatus.COMPLETED:
        print(json.dumps(task.result, indent=2))
        print("\n✅ Crawl example completed!")
    else:
        print(f"\n❌ Crawl failed: {task.error}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else 'https://example.com/'))

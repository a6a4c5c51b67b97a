"""
Log Manager - Console, daily file and task event logging for the service
"""

import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional
from ..config import LogConfig

TASK_EVENTS_LOGGER = 'sitemapper.task_events'

# Libraries that log every request or frame at INFO
NOISY_LOGGERS = ('aiohttp.access', 'asyncio', 'PIL')


def log_task_event(event_type: str, task_id: str, **fields):
    """Write one JSON line describing a task lifecycle event"""
    event = {
        'timestamp': datetime.now().isoformat(),
        'event_type': event_type,
        'task_id': task_id,
        **fields
    }
    logging.getLogger(TASK_EVENTS_LOGGER).info(json.dumps(event, default=str))


class LogManager:
    """Routes service logs to the console and to dated files

    Everything at DEBUG and above goes to ``sitemapper_YYYYMMDD.log``,
    warnings and errors additionally to ``errors_YYYYMMDD.log``. Task
    lifecycle events are kept apart in ``tasks_YYYYMMDD.log`` as JSON lines.
    """

    def __init__(self, log_dir: str = "crawl_data/logs", log_level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_level = log_level.upper()
        self.task_events_file: Optional[Path] = None

        self.setup_logging()

    @classmethod
    def from_config(cls, config: LogConfig) -> 'LogManager':
        return cls(log_dir=config.log_dir, log_level=config.log_level)

    def setup_logging(self):
        detailed = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self.log_level, logging.INFO))
        root_logger.handlers.clear()

        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(console)

        root_logger.addHandler(self._file_handler('sitemapper', logging.DEBUG, detailed))
        root_logger.addHandler(self._file_handler('errors', logging.WARNING, detailed))

        events_handler = self._file_handler('tasks', logging.INFO, logging.Formatter('%(message)s'))
        self.task_events_file = Path(events_handler.baseFilename)
        events_logger = logging.getLogger(TASK_EVENTS_LOGGER)
        events_logger.handlers.clear()
        events_logger.addHandler(events_handler)
        events_logger.setLevel(logging.INFO)
        events_logger.propagate = False

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def _file_handler(self, prefix: str, level: int, formatter: logging.Formatter) -> logging.FileHandler:
        path = self.log_dir / f"{prefix}_{datetime.now().strftime('%Y%m%d')}.log"
        handler = logging.FileHandler(path, encoding='utf-8')
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler

    def close(self):
        """Flush and detach the file handlers"""
        for logger in (logging.getLogger(), logging.getLogger(TASK_EVENTS_LOGGER)):
            for handler in list(logger.handlers):
                if isinstance(handler, logging.FileHandler):
                    handler.close()
                    logger.removeHandler(handler)

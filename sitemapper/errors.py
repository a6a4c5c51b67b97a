"""
Exception hierarchy shared by the orchestrator, crawler and storage layers
"""


class SiteMapperError(Exception):
    """Base class for all site mapper errors"""


class ValidationError(SiteMapperError):
    """Submission input is missing or malformed"""


class NotFound(SiteMapperError):
    """Unknown task id"""

    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class CrawlError(SiteMapperError):
    """The crawl engine failed to navigate or render"""


class StorageError(CrawlError):
    """Uploading a crawl artifact failed"""


class PersistenceError(SiteMapperError):
    """Persisting a finished site tree failed"""

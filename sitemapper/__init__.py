"""
Site mapper - crawls a website, screenshots its pages and rebuilds its site tree
"""

from .errors import (
    SiteMapperError,
    ValidationError,
    NotFound,
    CrawlError,
    StorageError,
    PersistenceError
)

__version__ = "1.0.0"

__all__ = [
    'SiteMapperError',
    'ValidationError',
    'NotFound',
    'CrawlError',
    'StorageError',
    'PersistenceError'
]

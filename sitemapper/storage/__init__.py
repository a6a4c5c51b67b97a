"""
Storage collaborators for screenshots and finished site trees
"""

from .object_store import ObjectStore, FileObjectStore
from .record_sink import RecordSink, JsonFileRecordSink

__all__ = [
    'ObjectStore',
    'FileObjectStore',
    'RecordSink',
    'JsonFileRecordSink'
]

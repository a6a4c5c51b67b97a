"""
Page Record - Metadata captured for a single crawled page
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PageRecord:
    """One crawled page: its final URL, title and uploaded screenshot reference"""
    url: str
    title: str = ""
    thumbnail_ref: str = ""

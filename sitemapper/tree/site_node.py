from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Union
from ..crawler.page_record import PageRecord


@dataclass
class PageNode:
    """A crawled page placed in the site tree (may have pages beneath it)"""
    url: str
    title: str
    thumbnail_ref: str
    level: int
    children: Dict[str, 'SiteTreeNode'] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'url': self.url,
            'title': self.title,
            'thumbnailRef': self.thumbnail_ref,
            'level': self.level
        }
        return _with_children(data, self.children)


@dataclass
class SegmentNode:
    """Synthetic container for a path segment no page was crawled for yet"""
    title: str
    url: str
    level: int
    children: Dict[str, 'SiteTreeNode'] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'title': self.title,
            'url': self.url,
            'level': self.level
        }
        return _with_children(data, self.children)


@dataclass
class RootNode:
    """A "top" container; only the tree root ever holds the home page's metadata"""
    page: Optional[PageRecord] = None
    children: Dict[str, 'SiteTreeNode'] = field(default_factory=dict)

    @property
    def level(self) -> int:
        return 0

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.page is not None:
            data = {
                'url': self.page.url,
                'title': self.page.title,
                'thumbnailRef': self.page.thumbnail_ref,
                'level': self.level
            }
        return _with_children(data, self.children)


SiteTreeNode = Union[RootNode, PageNode, SegmentNode]


def _with_children(data: Dict[str, Any], children: Dict[str, SiteTreeNode]) -> Dict[str, Any]:
    if children:
        data['children'] = {key: child.to_dict() for key, child in children.items()}
    return data

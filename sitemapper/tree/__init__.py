"""
Site tree construction from flat crawl output
"""

from .site_node import RootNode, PageNode, SegmentNode, SiteTreeNode
from .builder import SiteTree, SiteTreeBuilder, build_site_tree, ROOT_KEY

__all__ = [
    'RootNode',
    'PageNode',
    'SegmentNode',
    'SiteTreeNode',
    'SiteTree',
    'SiteTreeBuilder',
    'build_site_tree',
    'ROOT_KEY'
]

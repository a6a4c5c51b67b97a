"""
Site Tree Builder - Rebuilds a site's navigation hierarchy from flat page records
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence
from ..crawler.page_record import PageRecord
from .site_node import RootNode, PageNode, SegmentNode, SiteTreeNode

logger = logging.getLogger(__name__)

ROOT_KEY = "top"


class SiteTree:
    """Result of a build: a mapping whose only key is "top" """

    def __init__(self):
        self.nodes: Dict[str, SiteTreeNode] = {}

    @property
    def root(self) -> RootNode:
        return self.nodes.setdefault(ROOT_KEY, RootNode())

    def find(self, path: Sequence[str]) -> Optional[SiteTreeNode]:
        """Look up a node by its canonical path, e.g. ["top", "en", "about"]"""
        children = self.nodes
        node = None
        for part in path:
            node = children.get(part)
            if node is None:
                return None
            children = node.children
        return node

    def to_dict(self) -> Dict[str, dict]:
        return {ROOT_KEY: self.root.to_dict()}

    def first_thumbnail_ref(self) -> Optional[str]:
        """Depth-first search for the first node carrying a screenshot reference"""
        return _first_thumbnail(self.root)


class SiteTreeBuilder:
    """Builds a SiteTree from page records of one crawl

    Records are deduplicated by URL, ordered shallow-first and inserted
    top-down so that every ancestor exists before its descendants.
    """

    def __init__(self, base_url: str):
        self.base_url = base_url

    def build(self, records: Iterable[PageRecord]) -> SiteTree:
        unique = self._deduplicate(records)
        ordered = self._sort(unique)

        tree = SiteTree()
        for record in ordered:
            parts = self._canonicalize(self.path_parts(record.url))
            self._insert(tree, record, parts)

        # Every tree has a root, even when nothing was crawled
        tree.nodes.setdefault(ROOT_KEY, RootNode())
        logger.debug(f"Built site tree for {self.base_url} from {len(ordered)} pages")
        return tree

    def path_parts(self, url: str) -> List[str]:
        """Split a URL into path segments relative to the base URL"""
        path = url
        if self.base_url and path.startswith(self.base_url):
            path = path[len(self.base_url):]
        if path.endswith('#'):
            path = path[:-1]
        return [part for part in path.split('/') if part]

    @staticmethod
    def _deduplicate(records: Iterable[PageRecord]) -> List[PageRecord]:
        seen = set()
        unique = []
        for record in records:
            if record.url in seen:
                continue
            seen.add(record.url)
            unique.append(record)
        return unique

    @staticmethod
    def _sort(records: List[PageRecord]) -> List[PageRecord]:
        # Two stable passes: the segment count dominates, URL length breaks ties
        by_length = sorted(records, key=lambda record: len(record.url))
        return sorted(by_length, key=lambda record: len(record.url.split('/')))

    @staticmethod
    def _canonicalize(parts: List[str]) -> List[str]:
        if not parts:
            return [ROOT_KEY]
        if parts[0] != ROOT_KEY:
            return [ROOT_KEY] + parts
        return parts

    def _insert(self, tree: SiteTree, record: PageRecord, parts: List[str]):
        children = tree.nodes
        last = len(parts) - 1

        for index, part in enumerate(parts):
            node = children.get(part)
            if node is None:
                node = self._create_node(record, parts, index)
                children[part] = node
            elif index == last == 0 and isinstance(node, RootNode) and node.page is None:
                # Home page arriving after the root container already exists
                node.page = record
            children = node.children

    @staticmethod
    def _create_node(record: PageRecord, parts: List[str], index: int) -> SiteTreeNode:
        is_last = index == len(parts) - 1

        if is_last and index == 0:
            return RootNode(page=record)

        if is_last:
            return PageNode(
                url=record.url,
                title=record.title,
                thumbnail_ref=record.thumbnail_ref,
                level=len(parts) - 1
            )

        # A "top" segment on the way down is a bare container at any depth
        if parts[index] == ROOT_KEY:
            return RootNode()

        return SegmentNode(
            title=parts[index],
            url='/'.join(parts[:index + 1]),
            level=len(parts) - 2
        )


def build_site_tree(base_url: str, records: Iterable[PageRecord]) -> SiteTree:
    """Build the site tree for records crawled from base_url"""
    return SiteTreeBuilder(base_url).build(records)


def _first_thumbnail(node: SiteTreeNode) -> Optional[str]:
    if isinstance(node, RootNode) and node.page is not None and node.page.thumbnail_ref:
        return node.page.thumbnail_ref
    if isinstance(node, PageNode) and node.thumbnail_ref:
        return node.thumbnail_ref

    for child in node.children.values():
        found = _first_thumbnail(child)
        if found is not None:
            return found
    return None

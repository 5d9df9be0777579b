"""
Pipeline - Tree Builder

Flat parent-referencing page lists to a rooted forest, plus the lookup,
ancestor, descendant and search helpers the sitemap view relies on.
"""

from typing import Dict, Iterable, List, Optional
from dataclasses import dataclass, field

from mapmyfirm_server.schemas.page import SiteNode, SiteTreeNode


# WordPress reports top-level pages with parent 0
ROOT_PARENT_IDS = {None, "", "0"}


@dataclass
class TreeFilterResult:
    """Search outcome for a collapsed tree view."""
    matched_node_ids: List[str] = field(default_factory=list)
    expanded_ids: List[str] = field(default_factory=list)


def build_tree(nodes: List[SiteNode]) -> List[SiteTreeNode]:
    """
    Build a forest from a flat list of nodes.

    Every node appears exactly once. A node whose parent is not in the
    collection is promoted to a root. Roots and siblings keep collection
    order. The input nodes are not modified.

    Args:
        nodes: Flat page list

    Returns:
        Root tree nodes
    """
    node_map: Dict[str, SiteTreeNode] = {}
    for node in nodes:
        node_map[node.id] = SiteTreeNode(
            **node.model_dump(exclude={"children"}), children=[]
        )

    roots: List[SiteTreeNode] = []
    for tree_node in node_map.values():
        parent = None
        if tree_node.parent_id not in ROOT_PARENT_IDS:
            parent = node_map.get(tree_node.parent_id)

        if parent is None or _creates_cycle(node_map, tree_node.id, parent.id):
            roots.append(tree_node)
        else:
            parent.children.append(tree_node)

    return roots


def _creates_cycle(
    node_map: Dict[str, SiteTreeNode], node_id: str, parent_id: str
) -> bool:
    """True when node_id is reachable from parent_id by parent links."""
    seen = set()
    current: Optional[str] = parent_id
    while current not in ROOT_PARENT_IDS and current not in seen:
        if current == node_id:
            return True
        seen.add(current)
        parent = node_map.get(current)
        current = parent.parent_id if parent else None
    return False


def find_node(tree: List[SiteTreeNode], node_id: str) -> Optional[SiteTreeNode]:
    """Depth-first lookup in a built tree."""
    for node in tree:
        if node.id == node_id:
            return node
        found = find_node(node.children, node_id)
        if found:
            return found
    return None


def find_node_in_list(nodes: List[SiteNode], node_id: str) -> Optional[SiteNode]:
    """Linear lookup in a flat list; first match wins."""
    for node in nodes:
        if node.id == node_id:
            return node
    return None


def get_ancestor_ids(nodes: List[SiteNode], node_id: str) -> List[str]:
    """
    Parent chain of a node, nearest first.

    Used to auto-expand a tree so that the node becomes visible. The walk
    stops at a root, at a parent that is not in the collection, or when a
    parent cycle is detected.
    """
    ancestors: List[str] = []
    seen = {node_id}
    current = find_node_in_list(nodes, node_id)

    while current and current.parent_id not in ROOT_PARENT_IDS:
        parent_id = current.parent_id
        if parent_id in seen:
            break
        ancestors.append(parent_id)
        seen.add(parent_id)
        current = find_node_in_list(nodes, parent_id)

    return ancestors


def get_descendants(nodes: List[SiteNode], node_id: str) -> List[SiteNode]:
    """All strict descendants in pre-order, siblings in collection order."""
    descendants: List[SiteNode] = []
    _collect_descendants(nodes, node_id, descendants, {node_id})
    return descendants


def _collect_descendants(
    nodes: List[SiteNode],
    node_id: str,
    out: List[SiteNode],
    visited: set,
) -> None:
    for child in nodes:
        if child.parent_id != node_id or child.id in visited:
            continue
        visited.add(child.id)
        out.append(child)
        _collect_descendants(nodes, child.id, out, visited)


def flatten_tree(tree: Iterable[SiteTreeNode]) -> List[SiteNode]:
    """Inverse of build_tree: pre-order list with children stripped."""
    flattened: List[SiteNode] = []

    def traverse(level: Iterable[SiteTreeNode]) -> None:
        for node in level:
            flattened.append(node.to_site_node())
            if node.children:
                traverse(node.children)

    traverse(tree)
    return flattened


def filter_tree(
    nodes: List[SiteNode],
    search_term: str,
    types: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
) -> TreeFilterResult:
    """
    Search the page list and compute what to expand.

    A node matches when the term is a case-insensitive substring of its
    title, slug or URL and it passes every active filter: its type is one
    of ``types`` and it carries at least one of ``tags``. An empty term
    with no filters matches nothing.

    Args:
        nodes: Flat page list
        search_term: Free-text term
        types: Optional content type filter
        tags: Optional manual tag filter

    Returns:
        TreeFilterResult with matched ids and the ancestor ids to expand
    """
    term = search_term.lower().strip()

    if not term and not types and not tags:
        return TreeFilterResult()

    matched: List[str] = []
    for node in nodes:
        if term and not (
            term in node.title.lower()
            or term in node.slug.lower()
            or term in node.url.lower()
        ):
            continue
        if types and node.type not in types:
            continue
        if tags and not any(tag in node.manual_tags for tag in tags):
            continue
        matched.append(node.id)

    # Ordered set of ancestors across all matches
    expanded: Dict[str, None] = {}
    for node_id in matched:
        for ancestor_id in get_ancestor_ids(nodes, node_id):
            expanded[ancestor_id] = None

    return TreeFilterResult(
        matched_node_ids=matched,
        expanded_ids=list(expanded),
    )


def group_by_type(nodes: List[SiteNode]) -> Dict[str, List[SiteNode]]:
    """Group nodes by content type, for non-hierarchical post types."""
    groups: Dict[str, List[SiteNode]] = {}
    for node in nodes:
        groups.setdefault(node.type, []).append(node)
    return groups

"""Tree navigation: breadcrumbs, siblings, children and the focused path."""

from collections.abc import Mapping, Sequence

from harada_pillars.config import BLOCKING_LEVEL, CHECKLIST_LEVEL, MAX_LEVEL
from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.core.tree.progress import annotate_tree
from harada_pillars.errors import NodeNotFoundError
from harada_pillars.models.node import (
    Breadcrumb,
    ChecklistItem,
    FocusedPath,
    Node,
)


def _require(index: TreeIndex, node_id: str) -> Node:
    node = index.get(node_id)
    if node is None:
        msg = f"Node not found: {node_id}"
        raise NodeNotFoundError(msg)
    return node


def get_breadcrumbs(index: TreeIndex, node_id: str) -> tuple[Breadcrumb, ...]:
    """Get ancestor breadcrumbs for a node.

    Returns breadcrumbs in order from root to immediate parent (excludes the node itself).
    """
    node = _require(index, node_id)
    return tuple(
        Breadcrumb(node_id=a.id, title=a.title, level=a.level) for a in index.ancestors_of(node)
    )


def get_siblings(
    index: TreeIndex,
    node_id: str,
    *,
    count: int = 3,
) -> tuple[tuple[Node, ...], tuple[Node, ...]]:
    """Get siblings before and after a node.

    Returns (siblings_before, siblings_after) tuples, nearest sibling last
    and first respectively.
    """
    node = _require(index, node_id)
    if node.parent_id is None:
        return (), ()

    siblings = index.children_of(node.parent_id)
    before = [s for s in siblings if s.index_in_parent < node.index_in_parent]
    after = [s for s in siblings if s.index_in_parent > node.index_in_parent]
    return tuple(before[-count:]) if count else (), tuple(after[:count])


def get_children(index: TreeIndex, node_id: str) -> tuple[Node, ...]:
    """Get direct children of a node, ordered by index_in_parent."""
    _require(index, node_id)
    return index.children_of(node_id)


def get_focused_path(
    nodes: Sequence[Node],
    focused_node_id: str,
    checklist_by_node: Mapping[str, Sequence[ChecklistItem]] | None = None,
    *,
    checklist_level: int = CHECKLIST_LEVEL,
    max_level: int = MAX_LEVEL,
    blocking_level: int = BLOCKING_LEVEL,
) -> FocusedPath:
    """Build the data for a focus view of one node.

    The path runs from the root to the focused node. For each level on the
    path the node's siblings are included (the root is its own only sibling),
    and the focused node's children are added one level below when they have
    been generated. Progress is computed over the whole node set, so values
    match a full-tree pass.
    """
    index = TreeIndex(nodes)
    focused = _require(index, focused_node_id)
    annotated = annotate_tree(
        index.nodes,
        checklist_by_node,
        checklist_level=checklist_level,
        max_level=max_level,
        blocking_level=blocking_level,
    )

    path_nodes = [*index.ancestors_of(focused), focused]
    siblings_by_level = {}
    for node in path_nodes:
        siblings = index.children_of(node.parent_id) if node.parent_id else (node,)
        siblings_by_level[node.level] = tuple(annotated[s.id] for s in siblings)

    children = index.children_of(focused.id)
    if children:
        siblings_by_level[focused.level + 1] = tuple(annotated[c.id] for c in children)

    return FocusedPath(
        path=tuple(annotated[n.id] for n in path_nodes),
        siblings_by_level=siblings_by_level,
    )

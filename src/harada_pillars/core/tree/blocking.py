"""Inherited blocking: a blocked node at the blocking level locks its subtree."""

from collections.abc import Iterable, Sequence

from harada_pillars.config import BLOCKING_LEVEL
from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.models.node import Node, NodeStatus


def _designated_ancestor(ancestors: Sequence[Node], blocking_level: int) -> Node | None:
    return next((a for a in ancestors if a.level == blocking_level), None)


def is_inherited_blocked(
    node: Node,
    ancestors: Sequence[Node],
    *,
    blocking_level: int = BLOCKING_LEVEL,
) -> bool:
    """Return whether a node is forced into the blocked state by an ancestor.

    Only the ancestor at ``blocking_level`` can pass its blocked status down.
    Blocked ancestors at any other level are ignored, and so is the node's
    own status. A chain that does not reach ``blocking_level`` yields False.

    Args:
        node: The node to check. Only its level matters.
        ancestors: Ancestor chain ordered from root to immediate parent.
        blocking_level: The one level whose blocked status is inherited.
    """
    if node.level <= blocking_level:
        return False
    ancestor = _designated_ancestor(ancestors, blocking_level)
    return ancestor is not None and ancestor.status == NodeStatus.BLOCKED


def get_blocking_ancestor(
    ancestors: Sequence[Node],
    *,
    blocking_level: int = BLOCKING_LEVEL,
) -> Node | None:
    """Return the blocked ancestor that locks this chain, if any."""
    ancestor = _designated_ancestor(ancestors, blocking_level)
    if ancestor is not None and ancestor.status == NodeStatus.BLOCKED:
        return ancestor
    return None


def compute_inherited_blocked_status(
    nodes: Iterable[Node],
    *,
    blocking_level: int = BLOCKING_LEVEL,
) -> dict[str, bool]:
    """Compute the inherited-blocked flag for every node in a flat set."""
    index = TreeIndex(nodes)
    return {
        node.id: is_inherited_blocked(
            node, index.ancestors_of(node), blocking_level=blocking_level
        )
        for node in index.nodes
    }

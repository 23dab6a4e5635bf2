"""Progress aggregation over a goal tree.

Progress is a float in [0, 1] derived for every node on each read:

1. A node that is inherited-blocked has progress 0.
2. A node at the checklist level with checklist items takes the mean
   weight of its items.
3. A leaf (at the maximum level, or with no children yet) takes the weight
   of its own status.
4. Any other node takes the plain mean of its children's progress.

Whole-tree evaluation runs from the deepest level up to the root so that
children are always final before their parent is computed. Values are not
rounded here.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence

from loguru import logger

from harada_pillars.config import BLOCKING_LEVEL, CHECKLIST_LEVEL, MAX_LEVEL
from harada_pillars.core.tree.blocking import is_inherited_blocked
from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.models.node import (
    ChecklistItem,
    ChecklistStatus,
    Node,
    NodeStatus,
    NodeWithProgress,
)

BlockedFn = Callable[[Node, Sequence[Node]], bool]

STATUS_PROGRESS: dict[NodeStatus, float] = {
    NodeStatus.DONE: 1.0,
    NodeStatus.IN_PROGRESS: 0.5,
    NodeStatus.BLOCKED: 0.0,
}

CHECKLIST_STATUS_PROGRESS: dict[ChecklistStatus, float] = {
    ChecklistStatus.DONE: 1.0,
    ChecklistStatus.IN_PROGRESS: 0.5,
    ChecklistStatus.TODO: 0.0,
    ChecklistStatus.BLOCKED: 0.0,
}


def compute_leaf_progress(status: NodeStatus) -> float:
    """Return the progress weight of a leaf node's status."""
    return STATUS_PROGRESS[status]


def compute_checklist_progress(items: Sequence[ChecklistItem]) -> float | None:
    """Return the mean weight of checklist items, or None when there are none."""
    if not items:
        return None
    return sum(CHECKLIST_STATUS_PROGRESS[item.status] for item in items) / len(items)


def compute_progress(
    node: Node,
    children_progress: Sequence[float],
    inherited_blocked: bool,
    checklist_items: Sequence[ChecklistItem] | None = None,
    *,
    checklist_level: int = CHECKLIST_LEVEL,
    max_level: int = MAX_LEVEL,
) -> float:
    """Compute the progress of a single node.

    Args:
        node: The node. Its level and status are read.
        children_progress: Already computed progress of each direct child.
        inherited_blocked: Whether an ancestor locks this node.
        checklist_items: Items attached to the node, if it has any.
        checklist_level: Level at which checklist items override progress.
        max_level: Deepest level of the tree.

    Returns:
        Progress value from 0 to 1.
    """
    if inherited_blocked:
        return 0.0

    if node.level == checklist_level and checklist_items:
        checklist_progress = compute_checklist_progress(checklist_items)
        if checklist_progress is not None:
            return checklist_progress

    if node.level >= max_level or not children_progress:
        return compute_leaf_progress(node.status)

    return sum(children_progress) / len(children_progress)


def _evaluate(
    index: TreeIndex,
    is_blocked_fn: BlockedFn,
    checklist_by_node: Mapping[str, Sequence[ChecklistItem]] | None,
    *,
    checklist_level: int,
    max_level: int,
) -> dict[str, tuple[float, bool]]:
    """Run the deepest-first pass and return (progress, inherited_blocked) per node."""
    results: dict[str, tuple[float, bool]] = {}
    levels = index.by_level()
    for level in sorted(levels, reverse=True):
        for node in levels[level]:
            blocked = is_blocked_fn(node, index.ancestors_of(node))
            children_progress = [
                results[child.id][0]
                for child in index.children_of(node.id)
                if child.id in results
            ]
            items = None
            if checklist_by_node is not None and node.level == checklist_level:
                items = checklist_by_node.get(node.id)
            progress = compute_progress(
                node,
                children_progress,
                blocked,
                items,
                checklist_level=checklist_level,
                max_level=max_level,
            )
            results[node.id] = (progress, blocked)
    logger.debug("Computed progress for {} nodes across {} levels", len(results), len(levels))
    return results


def _default_blocked_fn(blocking_level: int) -> BlockedFn:
    def blocked(node: Node, ancestors: Sequence[Node]) -> bool:
        return is_inherited_blocked(node, ancestors, blocking_level=blocking_level)

    return blocked


def compute_tree_progress(
    nodes: Iterable[Node],
    is_blocked_fn: BlockedFn | None = None,
    checklist_by_node: Mapping[str, Sequence[ChecklistItem]] | None = None,
    *,
    checklist_level: int = CHECKLIST_LEVEL,
    max_level: int = MAX_LEVEL,
    blocking_level: int = BLOCKING_LEVEL,
) -> dict[str, float]:
    """Compute progress for every node of a flat node set.

    Args:
        nodes: All nodes of the tree (or of a partial subtree).
        is_blocked_fn: Decides inherited blocking from a node and its ancestor
            chain. Defaults to is_inherited_blocked at ``blocking_level``.
        checklist_by_node: Checklist items keyed by node id.
        checklist_level: Level at which checklist items override progress.
        max_level: Deepest level of the tree.
        blocking_level: Used only when ``is_blocked_fn`` is not given.

    Returns:
        Mapping of node id to progress.
    """
    fn = is_blocked_fn or _default_blocked_fn(blocking_level)
    results = _evaluate(
        TreeIndex(nodes),
        fn,
        checklist_by_node,
        checklist_level=checklist_level,
        max_level=max_level,
    )
    return {node_id: progress for node_id, (progress, _blocked) in results.items()}


def annotate_tree(
    nodes: Iterable[Node],
    checklist_by_node: Mapping[str, Sequence[ChecklistItem]] | None = None,
    *,
    checklist_level: int = CHECKLIST_LEVEL,
    max_level: int = MAX_LEVEL,
    blocking_level: int = BLOCKING_LEVEL,
) -> dict[str, NodeWithProgress]:
    """Attach progress, inherited blocking and child counts to every node."""
    index = TreeIndex(nodes)
    results = _evaluate(
        index,
        _default_blocked_fn(blocking_level),
        checklist_by_node,
        checklist_level=checklist_level,
        max_level=max_level,
    )
    return {
        node.id: NodeWithProgress(
            node=node,
            progress=results[node.id][0],
            inherited_blocked=results[node.id][1],
            children_count=len(index.children_of(node.id)),
            max_level=max_level,
        )
        for node in index.nodes
    }

"""Structural invariant checks for a flat node set."""

from collections.abc import Iterable

from harada_pillars.config import FANOUT, MAX_LEVEL
from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.errors import TreeStructureError
from harada_pillars.models.node import Node


def find_structure_problems(
    nodes: Iterable[Node],
    *,
    fanout: int = FANOUT,
    max_level: int = MAX_LEVEL,
) -> list[str]:
    """Return a description of every invariant violation in a single tree.

    Checked: exactly one root at level 1, known parents one level up, levels
    within bounds, no children below ``max_level``, and expanded nodes with
    exactly ``fanout`` children indexed 0..fanout-1.
    """
    index = TreeIndex(nodes)
    problems: list[str] = []

    roots = index.roots()
    if len(roots) != 1:
        problems.append(f"expected exactly one root, found {len(roots)}")
    for root in roots:
        if root.level != 1:
            problems.append(f"root {root.id} has level {root.level}, expected 1")
        if root.index_in_parent != 0:
            problems.append(f"root {root.id} has index {root.index_in_parent}, expected 0")

    tree_ids = {n.tree_id for n in index.nodes}
    if len(tree_ids) > 1:
        problems.append(f"nodes span {len(tree_ids)} trees: {sorted(tree_ids)!r}")

    for node in index.nodes:
        if not 1 <= node.level <= max_level:
            problems.append(f"node {node.id} has level {node.level} outside 1..{max_level}")

        if node.parent_id is not None:
            parent = index.get(node.parent_id)
            if parent is None:
                problems.append(f"node {node.id} references missing parent {node.parent_id}")
            elif parent.level != node.level - 1:
                problems.append(
                    f"node {node.id} at level {node.level} has parent at level {parent.level}"
                )

        children = index.children_of(node.id)
        if not children:
            continue
        if node.level >= max_level:
            problems.append(f"leaf-level node {node.id} has {len(children)} children")
            continue
        indices = [c.index_in_parent for c in children]
        if indices != list(range(fanout)):
            problems.append(
                f"node {node.id} has child indices {indices!r}, expected 0..{fanout - 1}"
            )

    return problems


def validate_tree(
    nodes: Iterable[Node],
    *,
    fanout: int = FANOUT,
    max_level: int = MAX_LEVEL,
) -> None:
    """Raise TreeStructureError if the node set violates any invariant."""
    problems = find_structure_problems(nodes, fanout=fanout, max_level=max_level)
    if problems:
        raise TreeStructureError(problems)

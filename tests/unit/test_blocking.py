"""Tests for inherited blocking."""

import pytest

from harada_pillars.core.tree.blocking import (
    compute_inherited_blocked_status,
    get_blocking_ancestor,
    is_inherited_blocked,
)
from harada_pillars.models.node import Node, NodeStatus
from tests.unit.fakes import make_children, make_node


def _chain(*statuses: NodeStatus) -> list[Node]:
    """Ancestor chain root -> parent with the given statuses, one per level."""
    chain: list[Node] = []
    parent_id = None
    for level, status in enumerate(statuses, start=1):
        node = make_node(f"a{level}", level=level, parent_id=parent_id, status=status)
        chain.append(node)
        parent_id = node.id
    return chain


def test_blocked_level_two_ancestor_blocks_node() -> None:
    ancestors = _chain(NodeStatus.IN_PROGRESS, NodeStatus.BLOCKED)
    node = make_node("n", level=3, parent_id="a2", status=NodeStatus.DONE)
    assert is_inherited_blocked(node, ancestors) is True


@pytest.mark.parametrize("depth", [3, 4, 5, 6, 7])
def test_blocked_level_two_ancestor_blocks_every_depth(depth: int) -> None:
    statuses = [NodeStatus.IN_PROGRESS, NodeStatus.BLOCKED] + [NodeStatus.DONE] * (depth - 3)
    ancestors = _chain(*statuses)
    node = make_node("n", level=depth, parent_id=ancestors[-1].id)
    assert is_inherited_blocked(node, ancestors) is True


def test_blocked_root_does_not_propagate() -> None:
    ancestors = _chain(NodeStatus.BLOCKED, NodeStatus.IN_PROGRESS)
    node = make_node("n", level=3, parent_id="a2")
    assert is_inherited_blocked(node, ancestors) is False


@pytest.mark.parametrize("blocked_level", [3, 4, 5, 6])
def test_blocked_deeper_ancestor_does_not_propagate(blocked_level: int) -> None:
    statuses = [NodeStatus.IN_PROGRESS] * 6
    statuses[blocked_level - 1] = NodeStatus.BLOCKED
    ancestors = _chain(*statuses)
    node = make_node("n", level=7, parent_id="a6")
    assert is_inherited_blocked(node, ancestors) is False


def test_own_status_does_not_count_as_inherited() -> None:
    ancestors = _chain(NodeStatus.IN_PROGRESS)
    node = make_node("n", level=2, parent_id="a1", status=NodeStatus.BLOCKED)
    assert is_inherited_blocked(node, ancestors) is False


def test_missing_designated_ancestor_is_not_blocked() -> None:
    # Partial chain that starts below the blocking level.
    ancestors = [make_node("a3", level=3, status=NodeStatus.BLOCKED)]
    node = make_node("n", level=4, parent_id="a3")
    assert is_inherited_blocked(node, ancestors) is False
    assert is_inherited_blocked(node, []) is False


def test_custom_blocking_level() -> None:
    ancestors = _chain(NodeStatus.IN_PROGRESS, NodeStatus.IN_PROGRESS, NodeStatus.BLOCKED)
    node = make_node("n", level=4, parent_id="a3")
    assert is_inherited_blocked(node, ancestors) is False
    assert is_inherited_blocked(node, ancestors, blocking_level=3) is True


def test_get_blocking_ancestor_returns_blocked_level_two_node() -> None:
    ancestors = _chain(NodeStatus.IN_PROGRESS, NodeStatus.BLOCKED, NodeStatus.DONE)
    blocker = get_blocking_ancestor(ancestors)
    assert blocker is not None
    assert blocker.id == "a2"
    assert get_blocking_ancestor(_chain(NodeStatus.BLOCKED, NodeStatus.DONE)) is None


def test_compute_inherited_blocked_status_marks_whole_subtree() -> None:
    root = make_node("root", level=1, status=NodeStatus.BLOCKED)
    level2 = make_children(root)
    blocked = make_node("root-0", level=2, parent_id="root", index=0, status=NodeStatus.BLOCKED)
    level2[0] = blocked
    level3 = make_children(blocked, status=NodeStatus.DONE)
    level4 = make_children(level3[0])
    other_level3 = make_children(level2[1], status=NodeStatus.BLOCKED)
    level4_under_blocked_level3 = make_children(other_level3[0])

    status = compute_inherited_blocked_status(
        [root, *level2, *level3, *level4, *other_level3, *level4_under_blocked_level3]
    )

    assert status["root"] is False
    assert all(status[n.id] is False for n in level2)
    assert all(status[n.id] is True for n in level3)
    assert all(status[n.id] is True for n in level4)
    assert all(status[n.id] is False for n in other_level3)
    assert all(status[n.id] is False for n in level4_under_blocked_level3)

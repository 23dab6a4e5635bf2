"""Tests for progress aggregation."""

from dataclasses import replace

import pytest

from harada_pillars.core.tree.blocking import is_inherited_blocked
from harada_pillars.core.tree.progress import (
    annotate_tree,
    compute_checklist_progress,
    compute_leaf_progress,
    compute_progress,
    compute_tree_progress,
)
from harada_pillars.models.node import ChecklistItem, ChecklistStatus, Node, NodeStatus
from tests.unit.fakes import make_children, make_node


def _items(node_id: str, *statuses: ChecklistStatus) -> list[ChecklistItem]:
    return [
        ChecklistItem(
            id=f"{node_id}-item{i}",
            node_id=node_id,
            user_id="user1",
            title=f"Item {i}",
            status=s,
            sort_order=i,
        )
        for i, s in enumerate(statuses)
    ]


@pytest.mark.parametrize(
    ("status", "expected"),
    [(NodeStatus.DONE, 1.0), (NodeStatus.IN_PROGRESS, 0.5), (NodeStatus.BLOCKED, 0.0)],
)
def test_leaf_progress_mapping(status: NodeStatus, expected: float) -> None:
    assert compute_leaf_progress(status) == expected
    leaf = make_node("leaf", level=7, parent_id="p", status=status)
    assert compute_progress(leaf, [], False) == expected
    unexpanded = make_node("lazy", level=4, parent_id="p", status=status)
    assert compute_progress(unexpanded, [], False) == expected


def test_max_level_node_ignores_children_progress() -> None:
    leaf = make_node("leaf", level=7, parent_id="p", status=NodeStatus.DONE)
    assert compute_progress(leaf, [0.0, 0.0], False) == 1.0


@pytest.mark.parametrize("status", list(NodeStatus))
def test_non_leaf_progress_is_mean_of_children(status: NodeStatus) -> None:
    node = make_node("n", level=2, parent_id="root", status=status)
    children = [1.0, 0.5, 0.0, 0.25, 1.0, 1.0, 0.5, 0.0]
    assert compute_progress(node, children, False) == pytest.approx(sum(children) / 8)


def test_non_leaf_progress_with_single_child() -> None:
    node = make_node("n", level=5, parent_id="p", status=NodeStatus.BLOCKED)
    assert compute_progress(node, [0.75], False) == 0.75


def test_inherited_blocked_forces_zero() -> None:
    node = make_node("n", level=4, parent_id="p", status=NodeStatus.DONE)
    assert compute_progress(node, [1.0] * 8, True) == 0.0
    assert compute_progress(node, [], True) == 0.0


def test_inherited_blocked_overrides_checklist() -> None:
    node = make_node("n", level=3, parent_id="p")
    items = _items("n", ChecklistStatus.DONE, ChecklistStatus.DONE)
    assert compute_progress(node, [], True, items) == 0.0


def test_checklist_overrides_status_at_checklist_level() -> None:
    node = make_node("n", level=3, parent_id="p", status=NodeStatus.DONE)
    items = _items(
        "n",
        ChecklistStatus.DONE,
        ChecklistStatus.IN_PROGRESS,
        ChecklistStatus.TODO,
        ChecklistStatus.BLOCKED,
    )
    assert compute_progress(node, [], False, items) == pytest.approx(1.5 / 4)
    assert compute_progress(node, [1.0] * 8, False, items) == pytest.approx(1.5 / 4)


def test_empty_checklist_falls_back_to_status() -> None:
    node = make_node("n", level=3, parent_id="p", status=NodeStatus.DONE)
    assert compute_checklist_progress([]) is None
    assert compute_progress(node, [], False, []) == 1.0
    assert compute_progress(node, [], False, None) == 1.0


def test_checklist_ignored_outside_checklist_level() -> None:
    node = make_node("n", level=4, parent_id="p", status=NodeStatus.DONE)
    items = _items("n", ChecklistStatus.TODO)
    assert compute_progress(node, [], False, items) == 1.0


def test_tree_progress_all_children_done(done_root_tree: list[Node]) -> None:
    progress = compute_tree_progress(done_root_tree)
    assert progress["root"] == 1.0
    assert all(progress[f"root-{i}"] == 1.0 for i in range(8))


def test_tree_progress_one_blocked_child(done_root_tree: list[Node]) -> None:
    nodes = [
        replace(n, status=NodeStatus.BLOCKED) if n.id == "root-0" else n for n in done_root_tree
    ]
    progress = compute_tree_progress(nodes)
    assert progress["root-0"] == 0.0
    assert progress["root"] == pytest.approx(7 / 8)


def test_tree_progress_blocked_level_two_zeroes_done_descendants(
    done_root_tree: list[Node],
) -> None:
    nodes = [
        replace(n, status=NodeStatus.BLOCKED) if n.id == "root-0" else n for n in done_root_tree
    ]
    blocked = next(n for n in nodes if n.id == "root-0")
    level3 = make_children(blocked, status=NodeStatus.DONE)

    annotated = annotate_tree([*nodes, *level3])

    for child in level3:
        assert annotated[child.id].inherited_blocked is True
        assert annotated[child.id].progress == 0.0
    assert annotated["root-0"].progress == 0.0
    assert annotated["root-0"].inherited_blocked is False
    assert annotated["root"].progress == pytest.approx(7 / 8)


def test_tree_progress_blocked_root_does_not_zero_subtree(done_root_tree: list[Node]) -> None:
    nodes = [replace(n, status=NodeStatus.BLOCKED) if n.id == "root" else n for n in done_root_tree]
    assert compute_tree_progress(nodes)["root"] == 1.0


def test_tree_progress_uses_checklists_at_level_three() -> None:
    root = make_node("root", level=1)
    level2 = make_children(root)
    level3 = make_children(level2[0], status=NodeStatus.DONE)
    checklist = {level3[0].id: _items(level3[0].id, ChecklistStatus.TODO, ChecklistStatus.TODO)}

    progress = compute_tree_progress([root, *level2, *level3], checklist_by_node=checklist)

    assert progress[level3[0].id] == 0.0
    assert progress[level2[0].id] == pytest.approx(7 / 8)
    assert progress["root"] == pytest.approx((7 / 8 + 7 * 0.5) / 8)


def test_tree_progress_accepts_custom_blocked_fn(done_root_tree: list[Node]) -> None:
    def everything_blocked(node: Node, ancestors: object) -> bool:
        return node.level > 1

    progress = compute_tree_progress(done_root_tree, everything_blocked)
    assert progress["root"] == 0.0


def test_tree_progress_default_matches_is_inherited_blocked(done_root_tree: list[Node]) -> None:
    assert compute_tree_progress(done_root_tree) == compute_tree_progress(
        done_root_tree, is_inherited_blocked
    )


def test_tree_progress_on_partial_subtree() -> None:
    # No root or level 2 in the set: nothing can be inherited-blocked.
    parent = make_node("p", level=4, parent_id="missing")
    children = make_children(parent, status=NodeStatus.DONE)
    progress = compute_tree_progress([parent, *children])
    assert progress["p"] == 1.0


def test_annotate_tree_reports_expansion_state(done_root_tree: list[Node]) -> None:
    leaf = make_node("leaf", level=7, parent_id="x")
    annotated = annotate_tree([*done_root_tree, leaf])

    root = annotated["root"]
    assert root.children_count == 8
    assert root.children_generated is True
    assert root.can_expand is False

    lazy = annotated["root-3"]
    assert lazy.children_generated is False
    assert lazy.can_expand is True

    assert annotated["leaf"].is_leaf_level is True
    assert annotated["leaf"].can_expand is False

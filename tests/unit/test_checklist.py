"""Tests for checklist item operations."""

import pytest

from harada_pillars.core.checklist import (
    create_checklist_item,
    delete_checklist_item,
    group_by_node,
    reorder_checklist_items,
    sort_items,
    update_checklist_status,
)
from harada_pillars.errors import ChecklistError
from harada_pillars.models.node import ChecklistItem, ChecklistStatus
from tests.unit.fakes import SequentialIds, make_node

ACTIVITY = make_node("act", level=3, parent_id="sub")


def _three_items() -> list[ChecklistItem]:
    ids = SequentialIds("item")
    items: list[ChecklistItem] = []
    for title in ("Stretch", "Run 5k", "Log time"):
        items.append(create_checklist_item(ACTIVITY, title, existing=items, id_factory=ids))
    return items


def test_create_appends_with_dense_sort_order() -> None:
    items = _three_items()
    assert [i.sort_order for i in items] == [0, 1, 2]
    assert {i.node_id for i in items} == {"act"}
    assert {i.user_id for i in items} == {"user1"}
    assert {i.status for i in items} == {ChecklistStatus.TODO}


def test_create_rejects_nodes_outside_checklist_level() -> None:
    with pytest.raises(ChecklistError, match="level 3"):
        create_checklist_item(make_node("sub", level=2, parent_id="root"), "Nope")


def test_create_rejects_blank_title() -> None:
    with pytest.raises(ChecklistError, match="title"):
        create_checklist_item(ACTIVITY, "   ")


def test_reorder_rewrites_sort_order_for_full_set() -> None:
    items = _three_items()
    reordered = reorder_checklist_items(items, ["item-3", "item-1", "item-2"])
    assert [(i.id, i.sort_order) for i in reordered] == [
        ("item-3", 0),
        ("item-1", 1),
        ("item-2", 2),
    ]


@pytest.mark.parametrize(
    "ordered_ids",
    [["item-1", "item-2"], ["item-1", "item-2", "item-2"], ["item-1", "item-2", "other"]],
)
def test_reorder_requires_a_permutation(ordered_ids: list[str]) -> None:
    with pytest.raises(ChecklistError):
        reorder_checklist_items(_three_items(), ordered_ids)


def test_update_status_changes_only_target_item() -> None:
    updated = update_checklist_status(_three_items(), "item-2", ChecklistStatus.DONE)
    assert [i.status for i in updated] == [
        ChecklistStatus.TODO,
        ChecklistStatus.DONE,
        ChecklistStatus.TODO,
    ]


def test_delete_removes_only_that_item() -> None:
    remaining = delete_checklist_item(_three_items(), "item-2")
    assert [(i.id, i.sort_order) for i in remaining] == [("item-1", 0), ("item-3", 2)]


def test_delete_or_update_unknown_item_raises() -> None:
    with pytest.raises(ChecklistError):
        delete_checklist_item(_three_items(), "missing")
    with pytest.raises(ChecklistError):
        update_checklist_status(_three_items(), "missing", ChecklistStatus.DONE)


def test_create_after_delete_appends_past_highest_order() -> None:
    remaining = delete_checklist_item(_three_items(), "item-2")
    item = create_checklist_item(ACTIVITY, "Cool down", existing=remaining)
    assert item.sort_order == 3


def test_group_by_node_sorts_each_group() -> None:
    items = list(reversed(_three_items()))
    other = create_checklist_item(make_node("act2", level=3, parent_id="sub"), "Other")
    grouped = group_by_node([*items, other])
    assert [i.id for i in grouped["act"]] == ["item-1", "item-2", "item-3"]
    assert [i.title for i in grouped["act2"]] == ["Other"]
    assert sort_items(items) == grouped["act"]

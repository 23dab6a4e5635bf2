"""Checklist items attached to checklist-level nodes."""

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace

from harada_pillars.config import CHECKLIST_LEVEL
from harada_pillars.errors import ChecklistError
from harada_pillars.models.node import ChecklistItem, ChecklistStatus, Node, new_id


def sort_items(items: Iterable[ChecklistItem]) -> list[ChecklistItem]:
    """Return items in display order."""
    return sorted(items, key=lambda item: item.sort_order)


def group_by_node(items: Iterable[ChecklistItem]) -> dict[str, list[ChecklistItem]]:
    """Group items by owning node, each group in display order."""
    grouped: defaultdict[str, list[ChecklistItem]] = defaultdict(list)
    for item in items:
        grouped[item.node_id].append(item)
    return {node_id: sort_items(group) for node_id, group in grouped.items()}


def create_checklist_item(
    node: Node,
    title: str,
    *,
    existing: Sequence[ChecklistItem] = (),
    status: ChecklistStatus = ChecklistStatus.TODO,
    checklist_level: int = CHECKLIST_LEVEL,
    id_factory: Callable[[], str] = new_id,
) -> ChecklistItem:
    """Create an item appended after the node's existing items.

    Raises:
        ChecklistError: The node is not at the checklist level or the title is blank.
    """
    if node.level != checklist_level:
        msg = f"Checklist items belong to level {checklist_level} nodes, not level {node.level}"
        raise ChecklistError(msg)
    if not title.strip():
        msg = "Checklist item title is required"
        raise ChecklistError(msg)

    next_order = max((item.sort_order for item in existing), default=-1) + 1
    return ChecklistItem(
        id=id_factory(),
        node_id=node.id,
        user_id=node.user_id,
        title=title,
        status=status,
        sort_order=next_order,
    )


def reorder_checklist_items(
    items: Sequence[ChecklistItem],
    ordered_ids: Sequence[str],
) -> list[ChecklistItem]:
    """Rewrite sort_order for the full item set following ``ordered_ids``.

    Raises:
        ChecklistError: ``ordered_ids`` is not a permutation of the item ids.
    """
    by_id = {item.id: item for item in items}
    if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
        msg = f"Reorder must list each of the {len(by_id)} items exactly once"
        raise ChecklistError(msg)
    return [replace(by_id[item_id], sort_order=i) for i, item_id in enumerate(ordered_ids)]


def update_checklist_status(
    items: Sequence[ChecklistItem],
    item_id: str,
    status: ChecklistStatus,
) -> list[ChecklistItem]:
    """Return the items with one item's status changed."""
    if not any(item.id == item_id for item in items):
        msg = f"Checklist item not found: {item_id}"
        raise ChecklistError(msg)
    return [replace(item, status=status) if item.id == item_id else item for item in items]


def delete_checklist_item(
    items: Sequence[ChecklistItem],
    item_id: str,
) -> list[ChecklistItem]:
    """Remove one item. The remaining items keep their sort_order."""
    remaining = [item for item in items if item.id != item_id]
    if len(remaining) == len(items):
        msg = f"Checklist item not found: {item_id}"
        raise ChecklistError(msg)
    return remaining

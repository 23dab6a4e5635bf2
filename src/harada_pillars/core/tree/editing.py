"""User edits to existing nodes: field updates, deletion and subtree copies.

A deleted node leaves its slot behind: the parent keeps its full fan-out and
the slot gets a fresh placeholder child. Copying a subtree onto a node
replaces that node the same way, so both operations keep every expanded node
at exactly FANOUT children.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date

from harada_pillars.config import (
    DESCRIPTION_MAX_LENGTH,
    MIN_DELETABLE_LEVEL,
    TIMEZONE_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from harada_pillars.core.tree.generation import child_title, duplicate_subtree
from harada_pillars.errors import NodeEditError, NodeNotFoundError
from harada_pillars.models.node import Node, NodeStatus, new_id

EDITABLE_FIELDS = frozenset(
    {"title", "description", "due_date", "reminder_enabled", "reminder_time", "reminder_timezone"}
)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"\d{2}:\d{2}(:\d{2})?")


def _clean_title(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        msg = "Title is required"
        raise NodeEditError(msg)
    title = value.strip()
    if len(title) > TITLE_MAX_LENGTH:
        msg = f"Title must be at most {TITLE_MAX_LENGTH} characters"
        raise NodeEditError(msg)
    return title


def _clean_description(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or len(value) > DESCRIPTION_MAX_LENGTH:
        msg = f"Description must be a string of at most {DESCRIPTION_MAX_LENGTH} characters"
        raise NodeEditError(msg)
    return value


def _clean_due_date(value: object) -> date | None:
    if value is None or isinstance(value, date):
        return value
    if isinstance(value, str) and _DATE_RE.fullmatch(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    msg = f"Invalid date {value!r} (expected YYYY-MM-DD)"
    raise NodeEditError(msg)


def _clean_reminder_time(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _TIME_RE.fullmatch(value):
        msg = f"Invalid time {value!r} (expected HH:MM or HH:MM:SS)"
        raise NodeEditError(msg)
    return value


def _clean_timezone(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str) or len(value) > TIMEZONE_MAX_LENGTH:
        msg = f"Timezone must be a string of at most {TIMEZONE_MAX_LENGTH} characters"
        raise NodeEditError(msg)
    return value


_CLEANERS: dict[str, Callable[[object], object]] = {
    "title": _clean_title,
    "description": _clean_description,
    "due_date": _clean_due_date,
    "reminder_enabled": bool,
    "reminder_time": _clean_reminder_time,
    "reminder_timezone": _clean_timezone,
}


def apply_node_update(node: Node, **changes: object) -> Node:
    """Return ``node`` with the given editable fields changed.

    Only the fields in EDITABLE_FIELDS may be changed. Passing None clears an
    optional field. Status changes go through the status update path instead.

    Raises:
        NodeEditError: An unknown field or an invalid value.
    """
    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        msg = f"Cannot edit field(s): {', '.join(unknown)}"
        raise NodeEditError(msg)
    cleaned = {name: _CLEANERS[name](value) for name, value in changes.items()}
    return replace(node, **cleaned)


def check_deletable(node: Node, *, min_level: int = MIN_DELETABLE_LEVEL) -> None:
    """Refuse to remove main goals and sub-goals."""
    if node.level < min_level:
        msg = f"Cannot remove node {node.id} at level {node.level} (main goals and sub-goals)"
        raise NodeEditError(msg)


def blank_slot(node: Node, parent: Node, *, id_factory: Callable[[], str] = new_id) -> Node:
    """A fresh placeholder for the slot ``node`` occupies under ``parent``."""
    return Node(
        id=id_factory(),
        tree_id=node.tree_id,
        user_id=node.user_id,
        parent_id=parent.id,
        level=node.level,
        index_in_parent=node.index_in_parent,
        title=child_title(parent.title, node.index_in_parent),
        status=NodeStatus.IN_PROGRESS,
    )


def copy_subtree_onto(
    nodes: Iterable[Node],
    source_id: str,
    target: Node,
    *,
    min_level: int = MIN_DELETABLE_LEVEL,
    id_factory: Callable[[], str] = new_id,
) -> tuple[Node, ...]:
    """Copy the subtree at ``source_id`` into the slot held by ``target``.

    The copies take the target's parent, sibling index, tree and owner. The
    caller removes the target subtree and stores the copies in its place.

    Args:
        nodes: Nodes of the tree that holds the source subtree.
        source_id: Root of the subtree to copy.
        target: Node whose slot receives the copy. Must be at the source's level.
        min_level: Shallowest level that may be overwritten.
        id_factory: Allocates ids for the copies.

    Returns:
        The copied nodes, copied root first.
    """
    check_deletable(target, min_level=min_level)
    nodes = list(nodes)
    source = next((n for n in nodes if n.id == source_id), None)
    if source is None:
        msg = f"Node not found: {source_id}"
        raise NodeNotFoundError(msg)
    if source.id == target.id:
        msg = f"Cannot copy node {source_id} onto itself"
        raise NodeEditError(msg)
    if source.level != target.level:
        msg = (
            f"Cannot copy a level {source.level} node onto a level {target.level} node; "
            "levels must match"
        )
        raise NodeEditError(msg)

    copies = duplicate_subtree(
        nodes, source_id, new_parent_id=target.parent_id, id_factory=id_factory
    )
    root, *rest = copies
    root = replace(root, index_in_parent=target.index_in_parent)
    return tuple(
        replace(n, tree_id=target.tree_id, user_id=target.user_id) for n in (root, *rest)
    )

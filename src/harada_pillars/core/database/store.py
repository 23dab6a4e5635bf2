"""SQLite-backed node store."""

import sqlite3
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import date

from loguru import logger

from harada_pillars.core.checklist import group_by_node
from harada_pillars.core.tree.editing import (
    apply_node_update,
    blank_slot,
    check_deletable,
    copy_subtree_onto,
)
from harada_pillars.errors import ChecklistError, NodeNotFoundError
from harada_pillars.models.node import (
    ChecklistItem,
    ChecklistStatus,
    GeneratedTree,
    Node,
    NodeStatus,
    PlanTree,
    new_id,
)

NODE_COLUMNS = (
    "id, tree_id, user_id, parent_id, level, index_in_parent, title, description, "
    "status, due_date, reminder_enabled, reminder_time, reminder_timezone"
)

_ITEM_COLUMNS = "id, node_id, user_id, title, status, notes, due_date, sort_order"

_SUBTREE_COUNT_SQL = """
    WITH RECURSIVE sub(id) AS (
        SELECT id FROM nodes WHERE id = ?
        UNION ALL
        SELECT n.id FROM nodes n JOIN sub ON n.parent_id = sub.id
    )
    SELECT COUNT(*) FROM sub
"""


def _now_ms() -> int:
    return int(time.time() * 1000)


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _format_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


def row_to_node(row: tuple) -> Node:
    return Node(
        id=row[0], tree_id=row[1], user_id=row[2], parent_id=row[3], level=row[4],
        index_in_parent=row[5], title=row[6], description=row[7],
        status=NodeStatus(row[8]), due_date=_parse_date(row[9]),
        reminder_enabled=bool(row[10]), reminder_time=row[11], reminder_timezone=row[12],
    )


def _to_item(row: tuple) -> ChecklistItem:
    return ChecklistItem(
        id=row[0], node_id=row[1], user_id=row[2], title=row[3],
        status=ChecklistStatus(row[4]), notes=row[5], due_date=_parse_date(row[6]),
        sort_order=row[7],
    )


def _node_params(n: Node) -> tuple:
    return (
        n.id, n.tree_id, n.user_id, n.parent_id, n.level, n.index_in_parent, n.title,
        n.description, n.status.value, _format_date(n.due_date), int(n.reminder_enabled),
        n.reminder_time, n.reminder_timezone,
    )


class SqliteNodeStore:
    """Node and checklist persistence over a SQLite connection.

    Implements NodeStoreProtocol. The UNIQUE(parent_id, index_in_parent)
    constraint together with a single-transaction batch insert guarantees
    that a node is expanded at most once, even when two writers race.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.execute("PRAGMA foreign_keys = ON")

    # Nodes

    def get_node(self, node_id: str) -> Node | None:
        row = self.conn.execute(
            f"SELECT {NODE_COLUMNS} FROM nodes WHERE id = ?", (node_id,)
        ).fetchone()
        return row_to_node(row) if row else None

    def get_children(self, node_id: str) -> tuple[Node, ...]:
        rows = self.conn.execute(
            f"SELECT {NODE_COLUMNS} FROM nodes WHERE parent_id = ? ORDER BY index_in_parent",
            (node_id,),
        ).fetchall()
        return tuple(row_to_node(r) for r in rows)

    def insert_children(self, parent_id: str, children: Sequence[Node]) -> tuple[Node, ...]:
        try:
            self._insert_nodes(children)
            self.conn.commit()
        except sqlite3.IntegrityError:
            self.conn.rollback()
            existing = self.get_children(parent_id)
            if not existing:
                raise
            logger.warning("Node {} was already expanded; keeping existing children", parent_id)
            return existing
        return tuple(children)

    def _insert_nodes(self, nodes: Iterable[Node]) -> None:
        self.conn.executemany(
            f"INSERT INTO nodes ({NODE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [_node_params(n) for n in nodes],
        )

    def _require_node(self, node_id: str) -> Node:
        node = self.get_node(node_id)
        if node is None:
            msg = f"Node not found: {node_id}"
            raise NodeNotFoundError(msg)
        return node

    def update_node_status(self, node_id: str, status: NodeStatus) -> Node:
        node = self._require_node(node_id)
        self.conn.execute(
            "UPDATE nodes SET status = ?, updated_at = ? WHERE id = ?",
            (status.value, _now_ms(), node_id),
        )
        self.conn.commit()
        return replace(node, status=status)

    def update_node(self, node_id: str, **changes: object) -> Node:
        """Change the editable fields of a node (see apply_node_update)."""
        updated = apply_node_update(self._require_node(node_id), **changes)
        self.conn.execute(
            "UPDATE nodes SET title = ?, description = ?, due_date = ?, reminder_enabled = ?, "
            "reminder_time = ?, reminder_timezone = ?, updated_at = ? WHERE id = ?",
            (
                updated.title,
                updated.description,
                _format_date(updated.due_date),
                int(updated.reminder_enabled),
                updated.reminder_time,
                updated.reminder_timezone,
                _now_ms(),
                node_id,
            ),
        )
        self.conn.commit()
        logger.debug("Updated node {}: {}", node_id, ", ".join(sorted(changes)))
        return updated

    def count_subtree(self, node_id: str) -> int:
        """Number of nodes in the subtree rooted at ``node_id`` (0 if unknown)."""
        row = self.conn.execute(_SUBTREE_COUNT_SQL, (node_id,)).fetchone()
        return row[0]

    def replace_subtree(self, node_id: str, replacement: Sequence[Node]) -> int:
        """Remove a node with its descendants and store ``replacement`` in one transaction.

        Checklist items of removed nodes go with them. Returns the number of
        nodes removed.
        """
        removed = self.count_subtree(node_id)
        try:
            self.conn.execute("DELETE FROM nodes WHERE id = ?", (node_id,))
            self._insert_nodes(replacement)
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        return removed

    def delete_node(self, node_id: str, *, id_factory: Callable[[], str] = new_id) -> Node:
        """Delete a node and its descendants, leaving a placeholder in its slot.

        Raises:
            NodeNotFoundError: Unknown node.
            NodeEditError: The node is a main goal or sub-goal.
        """
        node = self._require_node(node_id)
        check_deletable(node)
        parent = self._require_node(node.parent_id or "")
        placeholder = blank_slot(node, parent, id_factory=id_factory)
        removed = self.replace_subtree(node_id, [placeholder])
        logger.debug("Deleted node {} ({} nodes), placeholder {}", node_id, removed, placeholder.id)
        return placeholder

    def copy_onto(
        self, source_id: str, target_id: str, *, id_factory: Callable[[], str] = new_id
    ) -> tuple[Node, ...]:
        """Overwrite the subtree at ``target_id`` with a copy of ``source_id``'s subtree."""
        source = self._require_node(source_id)
        target = self._require_node(target_id)
        copies = copy_subtree_onto(
            self.get_tree_nodes(source.tree_id), source_id, target, id_factory=id_factory
        )
        removed = self.replace_subtree(target_id, copies)
        logger.debug(
            "Copied {} nodes from {} onto {} (replacing {})", len(copies), source_id, target_id,
            removed,
        )
        return copies

    # Trees

    def insert_tree(self, tree: GeneratedTree) -> PlanTree:
        """Store a freshly generated tree and all of its nodes."""
        root = tree.root
        plan = PlanTree(id=root.tree_id, user_id=root.user_id, title=root.title, root_id=root.id)
        now_ms = _now_ms()
        try:
            self.conn.execute(
                "INSERT INTO trees (id, user_id, title, root_id, created_at)"
                " VALUES (?, ?, ?, ?, ?)",
                (plan.id, plan.user_id, plan.title, plan.root_id, now_ms),
            )
            self._insert_nodes(tree.nodes)
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        logger.debug("Stored tree {} ({} nodes)", plan.id, len(tree.nodes))
        return plan

    def get_tree(self, tree_id: str) -> PlanTree | None:
        row = self.conn.execute(
            "SELECT id, user_id, title, root_id FROM trees WHERE id = ?", (tree_id,)
        ).fetchone()
        return PlanTree(*row) if row else None

    def list_trees(self, user_id: str) -> list[PlanTree]:
        rows = self.conn.execute(
            "SELECT id, user_id, title, root_id FROM trees WHERE user_id = ? ORDER BY created_at",
            (user_id,),
        ).fetchall()
        return [PlanTree(*r) for r in rows]

    def get_tree_nodes(self, tree_id: str) -> list[Node]:
        rows = self.conn.execute(
            f"SELECT {NODE_COLUMNS} FROM nodes WHERE tree_id = ? "
            "ORDER BY level, parent_id, index_in_parent",
            (tree_id,),
        ).fetchall()
        return [row_to_node(r) for r in rows]

    # Checklist items

    def get_checklist_item(self, item_id: str) -> ChecklistItem | None:
        row = self.conn.execute(
            f"SELECT {_ITEM_COLUMNS} FROM checklist_items WHERE id = ?", (item_id,)
        ).fetchone()
        return _to_item(row) if row else None

    def get_checklist_items(self, node_id: str) -> list[ChecklistItem]:
        rows = self.conn.execute(
            f"SELECT {_ITEM_COLUMNS} FROM checklist_items WHERE node_id = ? ORDER BY sort_order",
            (node_id,),
        ).fetchall()
        return [_to_item(r) for r in rows]

    def get_checklist_items_for_tree(self, tree_id: str) -> dict[str, list[ChecklistItem]]:
        """Return all checklist items of a tree grouped by node id."""
        rows = self.conn.execute(
            f"SELECT {', '.join('c.' + col for col in _ITEM_COLUMNS.split(', '))} "
            "FROM checklist_items c JOIN nodes n ON n.id = c.node_id WHERE n.tree_id = ?",
            (tree_id,),
        ).fetchall()
        return group_by_node(_to_item(r) for r in rows)

    def save_checklist_items(self, items: Iterable[ChecklistItem]) -> None:
        """Insert or overwrite checklist items."""
        self.conn.executemany(
            f"INSERT OR REPLACE INTO checklist_items ({_ITEM_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    i.id, i.node_id, i.user_id, i.title, i.status.value, i.notes,
                    _format_date(i.due_date), i.sort_order,
                )
                for i in items
            ],
        )
        self.conn.commit()

    def delete_checklist_item(self, item_id: str) -> None:
        cursor = self.conn.execute("DELETE FROM checklist_items WHERE id = ?", (item_id,))
        self.conn.commit()
        if cursor.rowcount == 0:
            msg = f"Checklist item not found: {item_id}"
            raise ChecklistError(msg)

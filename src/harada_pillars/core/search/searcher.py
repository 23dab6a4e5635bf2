"""Title search for planner nodes."""

import sqlite3

from harada_pillars.config import SEARCH_MIN_QUERY_LENGTH, SEARCH_RESULT_LIMIT
from harada_pillars.core.database.store import NODE_COLUMNS, row_to_node
from harada_pillars.models.node import Breadcrumb, Node, SearchResult

_SELECT_NODE = ", ".join(f"n.{col}" for col in NODE_COLUMNS.split(", "))
_TREE_TITLE_COLUMN = len(NODE_COLUMNS.split(", "))

_ANCESTORS_SQL = """
    WITH RECURSIVE chain(id, parent_id, title, level) AS (
        SELECT id, parent_id, title, level FROM nodes WHERE id = ?
        UNION ALL
        SELECT p.id, p.parent_id, p.title, p.level
        FROM nodes p JOIN chain c ON p.id = c.parent_id
    )
    SELECT id, title, level FROM chain ORDER BY level
"""


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so the query matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _breadcrumbs(conn: sqlite3.Connection, node: Node) -> tuple[Breadcrumb, ...]:
    if node.parent_id is None:
        return ()
    rows = conn.execute(_ANCESTORS_SQL, (node.parent_id,)).fetchall()
    return tuple(Breadcrumb(node_id=r[0], title=r[1], level=r[2]) for r in rows)


def search_nodes(
    conn: sqlite3.Connection,
    *,
    query: str,
    user_id: str,
    tree_id: str | None = None,
    limit: int = SEARCH_RESULT_LIMIT,
) -> tuple[list[SearchResult], int]:
    """Find a user's nodes whose title contains ``query``.

    Matching is case-insensitive for ASCII letters. Queries shorter than
    SEARCH_MIN_QUERY_LENGTH (after trimming) match nothing.

    Args:
        conn: Database connection.
        query: Text to look for in node titles.
        user_id: Owner whose nodes are searched.
        tree_id: Restrict to a single tree.
        limit: Max results to return.

    Returns:
        Tuple of (results, total_count). Results are ordered shallowest first.
    """
    term = query.strip()
    if len(term) < SEARCH_MIN_QUERY_LENGTH:
        return [], 0

    where_clauses = ["n.user_id = ?", "n.title LIKE ? ESCAPE '\\'"]
    params: list[str | int] = [user_id, f"%{_escape_like(term)}%"]
    if tree_id:
        where_clauses.append("n.tree_id = ?")
        params.append(tree_id)
    where_sql = " AND ".join(where_clauses)

    total = conn.execute(f"SELECT COUNT(*) FROM nodes n WHERE {where_sql}", params).fetchone()[0]

    select_sql = f"""
        SELECT {_SELECT_NODE}, t.title
        FROM nodes n
        JOIN trees t ON t.id = n.tree_id
        WHERE {where_sql}
        ORDER BY n.level, t.created_at, n.parent_id, n.index_in_parent
        LIMIT ?
    """
    rows = conn.execute(select_sql, [*params, limit]).fetchall()

    results = []
    for row in rows:
        node = row_to_node(row)
        results.append(
            SearchResult(
                node=node,
                tree_title=row[_TREE_TITLE_COLUMN],
                breadcrumbs=_breadcrumbs(conn, node),
            )
        )
    return results, total

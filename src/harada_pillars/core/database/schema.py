"""SQLite schema creation and migration for the planner store."""

import sqlite3

from loguru import logger

SCHEMA_VERSION = 2

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS trees (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    root_id TEXT NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS nodes (
    id TEXT PRIMARY KEY,
    tree_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    parent_id TEXT,
    level INTEGER NOT NULL CHECK (level >= 1),
    index_in_parent INTEGER NOT NULL CHECK (index_in_parent >= 0),
    title TEXT NOT NULL,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'in_progress'
        CHECK (status IN ('done', 'in_progress', 'blocked')),
    due_date TEXT,
    reminder_enabled INTEGER NOT NULL DEFAULT 0,
    reminder_time TEXT,
    reminder_timezone TEXT,
    updated_at INTEGER,
    UNIQUE (parent_id, index_in_parent),
    FOREIGN KEY (tree_id) REFERENCES trees(id) ON DELETE CASCADE,
    FOREIGN KEY (parent_id) REFERENCES nodes(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_nodes_tree ON nodes(tree_id, level);
CREATE INDEX IF NOT EXISTS idx_nodes_parent ON nodes(parent_id);
CREATE INDEX IF NOT EXISTS idx_nodes_user_title ON nodes(user_id, title);

CREATE TABLE IF NOT EXISTS checklist_items (
    id TEXT PRIMARY KEY,
    node_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'todo'
        CHECK (status IN ('todo', 'in_progress', 'done', 'blocked')),
    notes TEXT,
    due_date TEXT,
    sort_order INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (node_id) REFERENCES nodes(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_checklist_items_node ON checklist_items(node_id, sort_order);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes."""
    conn.executescript(_SCHEMA_SQL)
    conn.execute(
        "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
        ("schema_version", str(SCHEMA_VERSION)),
    )
    conn.commit()


# Steps that bring a database from version N-1 to version N.
_MIGRATIONS: dict[int, tuple[str, ...]] = {
    2: (
        "ALTER TABLE nodes ADD COLUMN updated_at INTEGER",
        "CREATE INDEX IF NOT EXISTS idx_nodes_user_title ON nodes(user_id, title)",
    ),
}


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the stored schema version, or None for a database without one."""
    try:
        row = conn.execute("SELECT value FROM metadata WHERE key = 'schema_version'").fetchone()
    except sqlite3.OperationalError:
        return None
    return int(row[0]) if row else None


def migrate_schema(conn: sqlite3.Connection) -> None:
    """Create the schema on a new database, or apply pending migrations."""
    version = get_schema_version(conn)
    if version is None:
        create_schema(conn)
        return
    if version > SCHEMA_VERSION:
        msg = f"Database schema version {version} is newer than supported {SCHEMA_VERSION}"
        raise RuntimeError(msg)

    for target in range(version + 1, SCHEMA_VERSION + 1):
        for statement in _MIGRATIONS[target]:
            conn.execute(statement)
        conn.execute(
            "UPDATE metadata SET value = ? WHERE key = 'schema_version'", (str(target),)
        )
        conn.commit()
        logger.info("Migrated planner database to schema version {}", target)

"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from harada_pillars.core.database.schema import create_schema
from harada_pillars.core.database.store import SqliteNodeStore
from harada_pillars.core.tree.generation import create_tree
from harada_pillars.models.node import GeneratedTree, Node, NodeStatus
from tests.unit.fakes import SequentialIds, make_children, make_node


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def generated_tree(ids: SequentialIds) -> GeneratedTree:
    """A 73-node tree (levels 1-3) with deterministic ids."""
    return create_tree("Become a pro", 3, user_id="user1", tree_id="tree1", id_factory=ids)


@pytest.fixture
def done_root_tree() -> list[Node]:
    """Root (in progress) with eight level-2 children, all done and unexpanded."""
    root = make_node("root", level=1)
    return [root, *make_children(root, status=NodeStatus.DONE)]


@pytest.fixture
def store() -> Iterator[SqliteNodeStore]:
    """An in-memory SQLite store with the schema created."""
    conn = sqlite3.connect(":memory:")
    create_schema(conn)
    yield SqliteNodeStore(conn)
    conn.close()

"""Protocols for the persistence layer consumed by lazy expansion."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from harada_pillars.models.node import Node


@runtime_checkable
class NodeStoreProtocol(Protocol):
    """Protocol for node stores used by expand_node."""

    def get_node(self, node_id: str) -> Node | None:
        """Return the node with the given id, or None if it does not exist."""
        ...

    def get_children(self, node_id: str) -> tuple[Node, ...]:
        """Return the children of a node ordered by index_in_parent."""
        ...

    def insert_children(self, parent_id: str, children: Sequence[Node]) -> tuple[Node, ...]:
        """Persist a freshly generated child batch and return the stored children.

        Implementations must guarantee at most one child set per parent. When
        another writer already expanded the parent, the existing children are
        returned instead.
        """
        ...

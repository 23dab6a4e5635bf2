"""Flat node arena: id and parent lookups over a list of node records."""

from collections import defaultdict, deque
from collections.abc import Iterable

from harada_pillars.models.node import Node


class TreeIndex:
    """Lookup maps built once over a flat node set.

    Nodes are never linked to each other directly. Navigation goes through
    the id map and the parent->children map, and children are kept in
    index_in_parent order.
    """

    def __init__(self, nodes: Iterable[Node]) -> None:
        self.nodes: tuple[Node, ...] = tuple(nodes)
        self.by_id: dict[str, Node] = {n.id: n for n in self.nodes}
        children: defaultdict[str | None, list[Node]] = defaultdict(list)
        for node in self.nodes:
            children[node.parent_id].append(node)
        for siblings in children.values():
            siblings.sort(key=lambda n: n.index_in_parent)
        self._children = dict(children)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.by_id

    def get(self, node_id: str) -> Node | None:
        return self.by_id.get(node_id)

    def children_of(self, node_id: str) -> tuple[Node, ...]:
        """Return direct children ordered by index_in_parent."""
        return tuple(self._children.get(node_id, ()))

    def roots(self) -> tuple[Node, ...]:
        """Return nodes without a parent."""
        return tuple(self._children.get(None, ()))

    def ancestors_of(self, node: Node) -> list[Node]:
        """Return the ancestor chain ordered from root to immediate parent.

        The walk stops at the first parent id missing from the index, so a
        partial node set yields a partial chain.
        """
        chain: list[Node] = []
        current = self.by_id.get(node.parent_id) if node.parent_id else None
        while current is not None:
            chain.append(current)
            current = self.by_id.get(current.parent_id) if current.parent_id else None
        chain.reverse()
        return chain

    def by_level(self) -> dict[int, list[Node]]:
        """Group nodes by level."""
        levels: defaultdict[int, list[Node]] = defaultdict(list)
        for node in self.nodes:
            levels[node.level].append(node)
        return dict(levels)

    def subtree(self, node_id: str) -> list[Node]:
        """Return a node and all its descendants, parents before children."""
        root = self.by_id.get(node_id)
        if root is None:
            return []
        result = [root]
        pending = deque([root])
        while pending:
            current = pending.popleft()
            kids = self.children_of(current.id)
            result.extend(kids)
            pending.extend(kids)
        return result

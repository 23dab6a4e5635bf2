"""Tree generation: new trees, child batches and lazy expansion."""

from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import replace

from loguru import logger

from harada_pillars.config import DEFAULT_INITIAL_DEPTH, FANOUT, MAX_LEVEL
from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.errors import NodeNotFoundError, UnauthorizedError
from harada_pillars.models.node import GeneratedTree, Node, NodeStatus, new_id
from harada_pillars.protocols import NodeStoreProtocol

IdFactory = Callable[[], str]


def child_title(parent_title: str, index: int) -> str:
    """Placeholder title for the child at ``index`` (zero-based)."""
    return f"{parent_title} - Task {index + 1}"


def generate_children(
    parent: Node,
    *,
    fanout: int = FANOUT,
    max_level: int = MAX_LEVEL,
    id_factory: IdFactory = new_id,
) -> tuple[Node, ...]:
    """Build the child records of an unexpanded node.

    Exactly ``fanout`` children are produced, one level below the parent,
    with index_in_parent 0..fanout-1. Parents at ``max_level`` or deeper get
    no children; this is a no-op, not an error.
    """
    if parent.level >= max_level:
        return ()

    return tuple(
        Node(
            id=id_factory(),
            tree_id=parent.tree_id,
            user_id=parent.user_id,
            parent_id=parent.id,
            level=parent.level + 1,
            index_in_parent=i,
            title=child_title(parent.title, i),
            status=NodeStatus.IN_PROGRESS,
        )
        for i in range(fanout)
    )


def create_tree(
    title: str,
    initial_depth: int = DEFAULT_INITIAL_DEPTH,
    *,
    user_id: str,
    tree_id: str | None = None,
    fanout: int = FANOUT,
    max_level: int = MAX_LEVEL,
    id_factory: IdFactory = new_id,
) -> GeneratedTree:
    """Create a root node and generate every level down to ``initial_depth``.

    Args:
        title: The main goal; used as the root title.
        initial_depth: Deepest level generated eagerly (1 = root only).
            Values above ``max_level`` stop at ``max_level``.
        user_id: Owner of every generated node.
        tree_id: Id of the new tree. Allocated when not given.
        fanout: Children per expanded node.
        max_level: Deepest level of the tree.
        id_factory: Allocates node (and tree) ids.

    Returns:
        GeneratedTree with the root and all nodes, root first, level by level.
    """
    if initial_depth < 1:
        msg = f"initial_depth must be at least 1, got {initial_depth}"
        raise ValueError(msg)

    root = Node(
        id=id_factory(),
        tree_id=tree_id or id_factory(),
        user_id=user_id,
        parent_id=None,
        level=1,
        index_in_parent=0,
        title=title,
        status=NodeStatus.IN_PROGRESS,
    )

    generated: list[Node] = [root]
    todo: deque[Node] = deque([root])
    while todo:
        parent = todo.popleft()
        if parent.level >= initial_depth:
            continue
        children = generate_children(
            parent, fanout=fanout, max_level=max_level, id_factory=id_factory
        )
        generated.extend(children)
        todo.extend(children)

    logger.debug(
        "Created tree {} ({} nodes, depth {})", root.tree_id, len(generated), initial_depth
    )
    return GeneratedTree(root=root, nodes=tuple(generated))


def expand_node(
    store: NodeStoreProtocol,
    node_id: str,
    *,
    user_id: str,
    fanout: int = FANOUT,
    max_level: int = MAX_LEVEL,
    id_factory: IdFactory = new_id,
) -> tuple[Node, ...]:
    """Return the children of a node, generating them on first request.

    Calling this repeatedly returns the same children; a node is expanded at
    most once. Nodes at ``max_level`` have no children and yield an empty
    tuple.

    Raises:
        NodeNotFoundError: No node with ``node_id`` exists.
        UnauthorizedError: The node belongs to another user.
    """
    node = store.get_node(node_id)
    if node is None:
        msg = f"Node not found: {node_id}"
        raise NodeNotFoundError(msg)
    if node.user_id != user_id:
        msg = f"Node {node_id} does not belong to user {user_id}"
        raise UnauthorizedError(msg)

    existing = store.get_children(node_id)
    if existing:
        return existing

    children = generate_children(node, fanout=fanout, max_level=max_level, id_factory=id_factory)
    if not children:
        return ()

    logger.debug("Expanding node {} at level {}", node_id, node.level)
    return store.insert_children(node_id, children)


def has_children_generated(store: NodeStoreProtocol, node_id: str) -> bool:
    """Return whether a node has been expanded."""
    return bool(store.get_children(node_id))


def duplicate_subtree(
    nodes: Iterable[Node],
    node_id: str,
    *,
    new_parent_id: str | None = None,
    id_factory: IdFactory = new_id,
) -> tuple[Node, ...]:
    """Copy a node and all its descendants under fresh ids.

    Levels, sibling indices, titles, descriptions, statuses and due dates are
    kept. Reminders are switched off on the copies. The copied root is
    attached to ``new_parent_id``.

    Returns:
        The copied nodes, copied root first, parents before children.
    """
    index = TreeIndex(nodes)
    source = index.subtree(node_id)
    if not source:
        msg = f"Node not found: {node_id}"
        raise NodeNotFoundError(msg)

    id_map = {n.id: id_factory() for n in source}
    copies = tuple(
        replace(
            n,
            id=id_map[n.id],
            parent_id=(
                new_parent_id if n.id == node_id or n.parent_id is None else id_map[n.parent_id]
            ),
            reminder_enabled=False,
            reminder_time=None,
            reminder_timezone=None,
        )
        for n in source
    )
    logger.debug("Duplicated subtree {} ({} nodes)", node_id, len(copies))
    return copies

"""Harada method goal trees: generation, blocking and progress aggregation."""

from harada_pillars.core.database.store import SqliteNodeStore
from harada_pillars.core.search.searcher import search_nodes
from harada_pillars.core.tree.blocking import (
    compute_inherited_blocked_status,
    get_blocking_ancestor,
    is_inherited_blocked,
)
from harada_pillars.core.tree.editing import apply_node_update, copy_subtree_onto
from harada_pillars.core.tree.generation import (
    create_tree,
    duplicate_subtree,
    expand_node,
    generate_children,
    has_children_generated,
)
from harada_pillars.core.tree.navigation import (
    get_breadcrumbs,
    get_children,
    get_focused_path,
    get_siblings,
)
from harada_pillars.core.tree.progress import annotate_tree, compute_progress, compute_tree_progress
from harada_pillars.models.node import (
    Breadcrumb,
    ChecklistItem,
    ChecklistStatus,
    FocusedPath,
    GeneratedTree,
    Node,
    NodeStatus,
    NodeWithProgress,
    SearchResult,
)
from harada_pillars.protocols import NodeStoreProtocol

__all__ = [
    "Breadcrumb",
    "ChecklistItem",
    "ChecklistStatus",
    "FocusedPath",
    "GeneratedTree",
    "Node",
    "NodeStatus",
    "NodeStoreProtocol",
    "NodeWithProgress",
    "SearchResult",
    "SqliteNodeStore",
    "annotate_tree",
    "apply_node_update",
    "compute_inherited_blocked_status",
    "compute_progress",
    "compute_tree_progress",
    "copy_subtree_onto",
    "create_tree",
    "duplicate_subtree",
    "expand_node",
    "generate_children",
    "get_blocking_ancestor",
    "get_breadcrumbs",
    "get_children",
    "get_focused_path",
    "get_siblings",
    "has_children_generated",
    "is_inherited_blocked",
    "search_nodes",
]

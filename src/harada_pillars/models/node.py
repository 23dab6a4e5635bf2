"""Domain models for the goal tree."""

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from harada_pillars.config import MAX_LEVEL


class NodeStatus(StrEnum):
    """Status a user assigns to a node."""

    DONE = "done"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"


class ChecklistStatus(StrEnum):
    """Status of a single checklist item."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"


def new_id() -> str:
    """Allocate a fresh record id."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Node:
    """A single goal in a plan tree."""

    id: str
    tree_id: str
    user_id: str
    parent_id: str | None
    level: int
    index_in_parent: int
    title: str
    description: str | None = None
    status: NodeStatus = NodeStatus.IN_PROGRESS
    due_date: date | None = None
    reminder_enabled: bool = False
    reminder_time: str | None = None
    reminder_timezone: str | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True)
class ChecklistItem:
    """A fine-grained sub-item attached to a checklist-level node."""

    id: str
    node_id: str
    user_id: str
    title: str
    status: ChecklistStatus = ChecklistStatus.TODO
    notes: str | None = None
    due_date: date | None = None
    sort_order: int = 0


@dataclass(frozen=True)
class GeneratedTree:
    """A freshly created tree: its root and every node generated with it."""

    root: Node
    nodes: tuple[Node, ...] = field(default_factory=tuple)

    @property
    def tree_id(self) -> str:
        return self.root.tree_id


@dataclass(frozen=True)
class NodeWithProgress:
    """A node together with the values derived from its subtree and ancestors."""

    node: Node
    progress: float
    inherited_blocked: bool
    children_count: int = 0
    max_level: int = MAX_LEVEL

    @property
    def children_generated(self) -> bool:
        return self.children_count > 0

    @property
    def is_leaf_level(self) -> bool:
        """True for nodes that can never have children."""
        return self.node.level >= self.max_level

    @property
    def can_expand(self) -> bool:
        """True for nodes whose children have not been generated yet."""
        return not self.is_leaf_level and not self.children_generated


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    node_id: str
    title: str
    level: int


@dataclass(frozen=True)
class FocusedPath:
    """The root-to-node path of a focused node with siblings at each level."""

    path: tuple[NodeWithProgress, ...]
    siblings_by_level: dict[int, tuple[NodeWithProgress, ...]]


@dataclass(frozen=True)
class PlanTree:
    """A stored tree: one main goal and its node hierarchy."""

    id: str
    user_id: str
    title: str
    root_id: str


@dataclass(frozen=True)
class SearchResult:
    """A node matching a title search, with where it sits in its tree."""

    node: Node
    tree_title: str
    breadcrumbs: tuple[Breadcrumb, ...] = ()

    @property
    def path_text(self) -> str:
        return " > ".join([*(b.title for b in self.breadcrumbs), self.node.title])

"""Exceptions raised by the planner core and its store."""


class HaradaError(Exception):
    """Base class for planner errors."""


class NodeNotFoundError(HaradaError, LookupError):
    """Raised when a node id does not resolve to a node."""


class UnauthorizedError(HaradaError, PermissionError):
    """Raised when a node belongs to a different user."""


class ChecklistError(HaradaError, ValueError):
    """Raised for invalid checklist operations."""


class TreeStructureError(HaradaError, ValueError):
    """Raised when a node set violates the tree invariants."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("; ".join(problems))


class NodeEditError(HaradaError, ValueError):
    """Raised for invalid node edits, deletions and copies."""

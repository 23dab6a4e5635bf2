"""Tests for domain models."""

import pytest

from harada_pillars.models.node import NodeStatus, NodeWithProgress
from tests.unit.fakes import make_node


def test_node_is_frozen() -> None:
    node = make_node("n", level=1)
    with pytest.raises(AttributeError):
        node.title = "changed"  # type: ignore[misc]


def test_node_defaults() -> None:
    node = make_node("n", level=1)
    assert node.is_root
    assert node.status == NodeStatus.IN_PROGRESS
    assert node.reminder_enabled is False
    assert not make_node("c", level=2, parent_id="n").is_root


def test_status_values_match_stored_strings() -> None:
    assert NodeStatus("blocked") is NodeStatus.BLOCKED
    assert NodeStatus.IN_PROGRESS == "in_progress"


def test_leaf_level_and_lazy_node_are_distinct() -> None:
    leaf = NodeWithProgress(node=make_node("l", level=7), progress=0.5, inherited_blocked=False)
    lazy = NodeWithProgress(node=make_node("z", level=4), progress=0.5, inherited_blocked=False)
    assert leaf.is_leaf_level and not leaf.can_expand
    assert not lazy.is_leaf_level and lazy.can_expand

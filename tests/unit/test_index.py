"""Tests for the flat node index."""

from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.models.node import GeneratedTree
from tests.unit.fakes import make_children, make_node


def test_ancestors_ordered_root_to_parent(generated_tree: GeneratedTree) -> None:
    index = TreeIndex(generated_tree.nodes)
    leaf = generated_tree.nodes[-1]
    chain = index.ancestors_of(leaf)
    assert [n.level for n in chain] == [1, 2]
    assert chain[0] is generated_tree.root
    assert chain[1].id == leaf.parent_id


def test_ancestors_stop_at_missing_parent() -> None:
    parent = make_node("p", level=3, parent_id="gone")
    child = make_node("c", level=4, parent_id="p")
    assert [n.id for n in TreeIndex([parent, child]).ancestors_of(child)] == ["p"]


def test_subtree_lists_parents_before_children(generated_tree: GeneratedTree) -> None:
    index = TreeIndex(generated_tree.nodes)
    subtree = index.subtree(generated_tree.root.id)
    assert len(subtree) == 73
    seen: set[str] = set()
    for node in subtree:
        assert node.parent_id is None or node.parent_id in seen
        seen.add(node.id)
    assert index.subtree("missing") == []


def test_by_level_and_roots() -> None:
    root = make_node("root", level=1)
    index = TreeIndex([root, *make_children(root)])
    assert index.roots() == (root,)
    assert {level: len(nodes) for level, nodes in index.by_level().items()} == {1: 1, 2: 8}
    assert "root-3" in index
    assert len(index) == 9

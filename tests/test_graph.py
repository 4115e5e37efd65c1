"""
Tests for the Graph Query Engine.

All queries are pure functions over an id -> ScaleNode mapping.
"""

from scalegraph import graph
from scalegraph.model import Position, ScaleNode


def root(node_id="root"):
    return ScaleNode.root(id=node_id, name=node_id, position=Position(100, 250))


def branch(node_id, parent_id, depth=1, index=0):
    return ScaleNode.branch(id=node_id, name=node_id, parent_id=parent_id,
                            position=Position(0, 0), depth=depth, branch_index=index)


def build_family():
    """
    root
    ├── a
    │   ├── a1
    │   │   └── a1x
    │   └── a2
    └── b
    """
    nodes = [
        root(),
        branch("a", "root", 1, 0),
        branch("b", "root", 1, 1),
        branch("a1", "a", 2, 0),
        branch("a2", "a", 2, 1),
        branch("a1x", "a1", 3, 0),
    ]
    return {n.id: n for n in nodes}


def test_children_in_collection_order():
    nodes = build_family()
    assert graph.children(nodes, "root") == ["a", "b"]
    assert graph.children(nodes, "a") == ["a1", "a2"]
    assert graph.children(nodes, "b") == []
    assert graph.children(nodes, "missing") == []


def test_descendants_breadth_first():
    """Descendants exclude the starting node and go level by level."""
    nodes = build_family()
    assert graph.descendants(nodes, "root") == ["a", "b", "a1", "a2", "a1x"]
    assert graph.descendants(nodes, "a1") == ["a1x"]
    assert graph.descendants(nodes, "b") == []


def test_cascade_delete_set_includes_target():
    nodes = build_family()
    assert graph.cascade_delete_set(nodes, "a") == {"a", "a1", "a2", "a1x"}
    assert graph.cascade_delete_set(nodes, "b") == {"b"}


def test_cascade_delete_set_independent_of_order():
    """A grandchild listed before its parent is still collected."""
    nodes = build_family()
    reversed_nodes = {k: nodes[k] for k in reversed(list(nodes))}
    assert list(reversed_nodes)[0] == "a1x"
    assert graph.cascade_delete_set(reversed_nodes, "a") == graph.cascade_delete_set(nodes, "a")


def test_cascade_delete_set_unknown_id():
    assert graph.cascade_delete_set(build_family(), "ghost") == {"ghost"}


def test_root_queries():
    nodes = build_family()
    assert graph.is_root(nodes["root"])
    assert not graph.is_root(nodes["a"])
    assert not graph.is_root(None)
    assert graph.roots(nodes) == ["root"]
    assert graph.root(nodes).id == "root"
    assert graph.root({}) is None


def test_siblings_and_parent():
    nodes = build_family()
    assert graph.siblings(nodes, "a1") == ["a2"]
    assert graph.siblings(nodes, "root") == []
    assert graph.parent(nodes, "a1x").id == "a1"
    assert graph.parent(nodes, "root") is None


def test_branch_count_with_prefix():
    nodes = build_family()
    nodes["root-branch-1"] = branch("root-branch-1", "root", 1, 2)
    assert graph.branch_count(nodes, "root") == 3
    assert graph.branch_count(nodes, "root", id_prefix="root-branch-") == 1


def test_build_tree():
    tree = graph.build_tree(build_family())
    assert tree == {"root": ["a", "b"], "a": ["a1", "a2"], "a1": ["a1x"]}


def test_next_branch_index():
    """One past the highest present index, not the child count."""
    nodes = build_family()
    assert graph.next_branch_index(nodes, "root") == 2
    del nodes["a"]
    assert graph.next_branch_index(nodes, "root") == 2
    assert graph.next_branch_index(nodes, "b") == 0


def test_cascade_delete_set_on_chain():
    """root -> A -> B -> C, deleting A, in both collection orders."""
    chain = [root(), branch("A", "root", 1), branch("B", "A", 2), branch("C", "B", 3)]
    forward = {n.id: n for n in chain}
    backward = {n.id: n for n in reversed(chain)}
    assert graph.cascade_delete_set(forward, "A") == {"A", "B", "C"}
    assert graph.cascade_delete_set(backward, "A") == {"A", "B", "C"}

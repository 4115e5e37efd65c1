"""
Graph Query Engine: read-only structural queries over a scale family.

Every function takes the node collection as a Mapping of id -> ScaleNode
and returns plain ids, sets or nodes.

IMPORTANT: Nothing here modifies the collection, and nothing here raises
for an unknown id. Unknown ids produce empty results (or None).

Relationships are derived from parent_id on every call. There is no
maintained child index.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Mapping, Optional, Set

from scalegraph.model import ScaleNode


NodeMap = Mapping[str, ScaleNode]


def children(nodes: NodeMap, parent_id: str) -> List[str]:
    """Direct children of parent_id, in collection order."""
    return [node_id for node_id, node in nodes.items() if node.parent_id == parent_id]


def descendants(nodes: NodeMap, root_id: str) -> List[str]:
    """
    All transitive children of root_id, breadth-first.

    root_id itself is not included.
    """
    found: List[str] = []
    seen: Set[str] = {root_id}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for child_id in children(nodes, current):
            if child_id in seen:
                continue
            seen.add(child_id)
            found.append(child_id)
            queue.append(child_id)
    return found


def cascade_delete_set(nodes: NodeMap, target_id: str) -> Set[str]:
    """
    Build the set of ids to remove when deleting target_id.

    Starts from {target_id} and rescans the whole collection, adding any
    node whose parent is already in the set, until a full scan adds
    nothing. The fixed point does not depend on iteration order.
    """
    to_delete = {target_id}
    modified = True
    while modified:
        modified = False
        for node_id, node in nodes.items():
            if node_id not in to_delete and node.parent_id and node.parent_id in to_delete:
                to_delete.add(node_id)
                modified = True
    return to_delete


def is_root(node: Optional[ScaleNode]) -> bool:
    return node is not None and (node.is_root or not node.parent_id)


def roots(nodes: NodeMap) -> List[str]:
    return [node_id for node_id, node in nodes.items() if is_root(node)]


def root(nodes: NodeMap) -> Optional[ScaleNode]:
    """The first root found, or None for an empty collection."""
    for node in nodes.values():
        if is_root(node):
            return node
    return None


def siblings(nodes: NodeMap, node_id: str) -> List[str]:
    """Nodes sharing node_id's parent, excluding node_id. Empty for the root."""
    node = nodes.get(node_id)
    if node is None or not node.parent_id:
        return []
    return [
        other_id for other_id, other in nodes.items()
        if other_id != node_id and other.parent_id == node.parent_id
    ]


def parent(nodes: NodeMap, node_id: str) -> Optional[ScaleNode]:
    node = nodes.get(node_id)
    if node is None or not node.parent_id:
        return None
    return nodes.get(node.parent_id)


def branch_count(nodes: NodeMap, parent_id: str, id_prefix: Optional[str] = None) -> int:
    """Number of children of parent_id, optionally only those whose id starts with id_prefix."""
    return sum(
        1 for node_id, node in nodes.items()
        if node.parent_id == parent_id and (not id_prefix or node_id.startswith(id_prefix))
    )


def build_tree(nodes: NodeMap) -> Dict[str, List[str]]:
    """Map each parent id to its child ids."""
    tree: Dict[str, List[str]] = {}
    for node_id, node in nodes.items():
        if node.parent_id:
            tree.setdefault(node.parent_id, []).append(node_id)
    return tree


def next_branch_index(nodes: NodeMap, parent_id: str) -> int:
    """One past the highest branch_index among present children of parent_id."""
    indices = [
        node.branch_index for node in nodes.values()
        if node.parent_id == parent_id and node.branch_index is not None
    ]
    return max(indices) + 1 if indices else 0


__all__ = [
    "children",
    "descendants",
    "cascade_delete_set",
    "is_root",
    "roots",
    "root",
    "siblings",
    "parent",
    "branch_count",
    "build_tree",
    "next_branch_index",
]

"""
Scale Store: the single authorized mutation gateway.

Every structural change to a family (add, remove, cascade remove, update,
clear) goes through ScaleStore. Other components only ever see read-only
views of the collection.

The store owns:
    - the id -> ScaleNode collection (insertion ordered)
    - the "active node" reference
    - the set of retired ids (removed ids are never reused in a family)
    - per-parent branch counters (branch indices are never reissued)
    - a family generation number, bumped by clear()
    - a list of post-commit observers

INVARIANTS:
    - at most one root; branches always reference a present parent (strict mode)
    - the root is never removed, and removal never leaves a partial subtree
    - lineage and layout fields never change after insertion
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from scalegraph import graph
from scalegraph.errors import (
    DuplicateNodeError,
    ImmutableFieldError,
    NodeNotFoundError,
    NodeValidationError,
    PartialCascadeError,
    RootConflictError,
    RootProtectedError,
)
from scalegraph.model import Dimension, Item, Position, RubricSource, ScaleNode
from scalegraph.serialization import node_from_dict


IMMUTABLE_FIELDS = frozenset({
    "id", "parent_id", "is_root", "depth", "branch_index", "position", "position_locked", "dimensions",
})
UPDATABLE_FIELDS = frozenset({"name", "expanded"})


class StoreEventKind(Enum):
    ADDED = "added"
    REMOVED = "removed"
    UPDATED = "updated"
    CLEARED = "cleared"
    ACTIVE_CHANGED = "active_changed"


@dataclass(frozen=True)
class StoreEvent:
    """Delivered to observers after a change has been committed."""

    kind: StoreEventKind
    node_ids: Tuple[str, ...] = ()


Observer = Callable[[StoreEvent], None]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_node_payload(payload: Mapping[str, Any]) -> None:
    """
    Check a raw node mapping before it is converted to a ScaleNode.

    Raises:
        NodeValidationError: naming the first missing or mistyped field
    """
    node_id = payload.get("id")
    if not isinstance(node_id, str) or not node_id:
        raise NodeValidationError("id", "Scale must have a non-empty id")
    if not isinstance(payload.get("name"), str):
        raise NodeValidationError("name", "Scale must have a name")
    if not isinstance(payload.get("dimensions"), list):
        raise NodeValidationError("dimensions", "Scale must have a dimensions list")
    position = payload.get("position")
    if not isinstance(position, Mapping) or not _is_number(position.get("x")) or not _is_number(position.get("y")):
        raise NodeValidationError("position", "Scale must have a position {x, y}")
    if not payload.get("is_root"):
        if not isinstance(payload.get("parent_id"), str):
            raise NodeValidationError("parent_id", "Non-root scale must have a parent_id")
        branch_index = payload.get("branch_index")
        if not isinstance(branch_index, int) or isinstance(branch_index, bool) or branch_index < 0:
            raise NodeValidationError("branch_index", "Branched scale must have a non-negative branch_index")
        if payload.get("position_locked") is not True:
            raise NodeValidationError("position_locked", "Branched scale must have position_locked=True")


def validate_node(node: ScaleNode) -> None:
    """
    Check the shape of a ScaleNode and the root/branch discriminant.

    Raises:
        NodeValidationError: naming the first offending field
    """
    if not isinstance(node.id, str) or not node.id:
        raise NodeValidationError("id", "Scale must have a non-empty id")
    if not isinstance(node.name, str):
        raise NodeValidationError("name", "Scale must have a name")
    if not isinstance(node.dimensions, tuple):
        raise NodeValidationError("dimensions", "Scale must have a dimensions list")
    if not isinstance(node.position, Position) or not _is_number(node.position.x) or not _is_number(node.position.y):
        raise NodeValidationError("position", "Scale must have a position {x, y}")

    if node.is_root:
        if node.parent_id is not None:
            raise NodeValidationError("parent_id", "Root scale cannot have a parent_id")
        if node.depth != 0:
            raise NodeValidationError("depth", "Root scale must have depth 0")
    else:
        if not isinstance(node.parent_id, str) or not node.parent_id:
            raise NodeValidationError("parent_id", "Non-root scale must have a parent_id")
        if not isinstance(node.branch_index, int) or isinstance(node.branch_index, bool) or node.branch_index < 0:
            raise NodeValidationError("branch_index", "Branched scale must have a non-negative branch_index")
        if node.position_locked is not True:
            raise NodeValidationError("position_locked", "Branched scale must have position_locked=True")

    seen: Set[str] = set()
    for i, dim in enumerate(node.dimensions):
        if not isinstance(dim, Dimension) or not isinstance(dim.name, str):
            raise NodeValidationError(f"dimensions[{i}]", "Dimension must have a name")
        if not isinstance(dim.items, tuple):
            raise NodeValidationError(f"dimensions[{i}].items", "Dimension must have an items list")
        for j, item in enumerate(dim.items):
            path = f"dimensions[{i}].items[{j}]"
            if not isinstance(item, Item) or not isinstance(item.item_id, str):
                raise NodeValidationError(f"{path}.item_id", "Item must have an item_id")
            if not isinstance(item.text, str):
                raise NodeValidationError(f"{path}.text", "Item must have text")
            if item.item_id in seen:
                raise NodeValidationError(f"{path}.item_id", f"Duplicate item_id {item.item_id!r}")
            seen.add(item.item_id)


class ScaleStore:
    """
    Owned repository of one scale family.

    Args:
        strict: Validate nodes and family invariants on add(). Relaxed
            mode (strict=False) skips only those insertion checks; it
            exists for bulk loading of trusted data and is not a
            recommended default. Root protection and exact cascade sets
            are enforced on removal in both modes.
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self._nodes: Dict[str, ScaleNode] = {}
        self._active_id: Optional[str] = None
        self._retired: Set[str] = set()
        self._branch_counters: Dict[str, int] = {}
        self._family_generation = 0
        self._observers: List[Observer] = []

    # =========================================================================
    # READ
    # =========================================================================

    @property
    def nodes(self) -> Mapping[str, ScaleNode]:
        """Read-only live view of the collection. Nodes are frozen."""
        return MappingProxyType(self._nodes)

    def get(self, node_id: str) -> Optional[ScaleNode]:
        return self._nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def ids(self) -> List[str]:
        return list(self._nodes)

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active_node(self) -> Optional[ScaleNode]:
        return self._nodes.get(self._active_id) if self._active_id else None

    @property
    def family_generation(self) -> int:
        return self._family_generation

    def is_retired(self, node_id: str) -> bool:
        return node_id in self._retired

    # Queries (delegate to the graph module)

    def children(self, node_id: str) -> List[str]:
        return graph.children(self._nodes, node_id)

    def descendants(self, node_id: str) -> List[str]:
        return graph.descendants(self._nodes, node_id)

    def cascade_delete_set(self, node_id: str) -> Set[str]:
        return graph.cascade_delete_set(self._nodes, node_id)

    def branch_count(self, node_id: str, id_prefix: Optional[str] = None) -> int:
        return graph.branch_count(self._nodes, node_id, id_prefix)

    def root(self) -> Optional[ScaleNode]:
        return graph.root(self._nodes)

    def next_branch_index(self, parent_id: str) -> int:
        """
        Index for the next branch of parent_id.

        Monotonic within a family: indices of removed branches are not
        handed out again, so neither are their ids or positions.
        """
        return max(self._branch_counters.get(parent_id, 0), graph.next_branch_index(self._nodes, parent_id))

    # =========================================================================
    # OBSERVERS
    # =========================================================================

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register a post-commit observer (undo history, persistence, minimap).

        Returns:
            A function that unsubscribes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, kind: StoreEventKind, node_ids: Iterable[str] = ()) -> None:
        event = StoreEvent(kind=kind, node_ids=tuple(node_ids))
        for observer in list(self._observers):
            observer(event)

    # =========================================================================
    # WRITE
    # =========================================================================

    def add(self, node: Union[ScaleNode, Mapping[str, Any]]) -> ScaleNode:
        """
        Insert a node.

        Accepts a ScaleNode or a raw mapping (converted after validation).

        Returns:
            The inserted ScaleNode

        Raises (strict mode only):
            NodeValidationError: shape or discriminant check failed
            DuplicateNodeError: id is present or was removed earlier
            RootConflictError: a root already exists
        """
        if isinstance(node, Mapping):
            if self.strict:
                validate_node_payload(node)
            node = node_from_dict(node)

        if self.strict:
            validate_node(node)
            self._check_insertion(node)

        self._nodes[node.id] = node
        if not node.is_root and node.parent_id and node.branch_index is not None:
            counter = self._branch_counters.get(node.parent_id, 0)
            self._branch_counters[node.parent_id] = max(counter, node.branch_index + 1)

        self._notify(StoreEventKind.ADDED, [node.id])
        return node

    def _check_insertion(self, node: ScaleNode) -> None:
        if node.id in self._nodes:
            raise DuplicateNodeError(node.id)
        if node.id in self._retired:
            raise DuplicateNodeError(node.id, retired=True)

        if node.is_root:
            existing = graph.root(self._nodes)
            if existing is not None:
                raise RootConflictError(
                    f"Family already has root {existing.id!r}; clear the store before importing a new root"
                )
            return

        parent = self._nodes.get(node.parent_id)
        if parent is None:
            raise NodeValidationError("parent_id", f"Unknown parent {node.parent_id!r}")
        if node.depth != parent.depth + 1:
            raise NodeValidationError("depth", f"Expected depth {parent.depth + 1}, got {node.depth}")

    def remove(self, node_id: str) -> bool:
        """
        Remove a single node.

        Returns:
            False if the id is not present

        Raises:
            RootProtectedError: node is the root (use clear())
            PartialCascadeError: node still has children (use remove_cascade())
        """
        node = self._nodes.get(node_id)
        if node is None:
            return False

        if graph.is_root(node):
            raise RootProtectedError(node_id)
        child_ids = graph.children(self._nodes, node_id)
        if child_ids:
            raise PartialCascadeError(
                f"Scale {node_id!r} has {len(child_ids)} children; remove its cascade set instead"
            )

        del self._nodes[node_id]
        self._retired.add(node_id)
        if self._active_id == node_id:
            self._active_id = None

        self._notify(StoreEventKind.REMOVED, [node_id])
        return True

    def remove_cascade(self, node_ids: Iterable[str]) -> int:
        """
        Atomically remove a cascade set.

        The set must be exactly graph.cascade_delete_set() of its single
        top-most node. It is checked in full before anything is removed.

        Returns:
            Number of nodes removed

        Raises:
            PartialCascadeError: set is not a complete subtree
            RootProtectedError: set contains the root
        """
        ids = set(node_ids)
        present = [node_id for node_id in self._nodes if node_id in ids]
        if not present:
            return 0

        tops = [node_id for node_id in present if self._nodes[node_id].parent_id not in ids]
        if len(tops) != 1:
            raise PartialCascadeError(f"Removal set must have exactly one top node, found {len(tops)}")
        top = tops[0]
        if graph.is_root(self._nodes[top]):
            raise RootProtectedError(top)
        expected = graph.cascade_delete_set(self._nodes, top)
        if ids != expected:
            missing = sorted(expected - ids)
            extra = sorted(ids - expected)
            raise PartialCascadeError(
                f"Removal set for {top!r} is not its cascade set (missing={missing}, extra={extra})"
            )

        for node_id in present:
            del self._nodes[node_id]
            self._retired.add(node_id)
            if self._active_id == node_id:
                self._active_id = None

        self._notify(StoreEventKind.REMOVED, present)
        return len(present)

    def update(self, node_id: str, fields: Mapping[str, Any]) -> bool:
        """
        Shallow-merge fields into a node, committing a replacement node.

        Only display fields (name, expanded) may change. The root's
        position may also move; branch positions are locked.

        Returns:
            False if the id is not present

        Raises:
            ImmutableFieldError: a lineage or layout field was targeted
            NodeValidationError: an unknown field was targeted, or a value
                has the wrong type
        """
        node = self._nodes.get(node_id)
        if node is None:
            return False

        for name, value in fields.items():
            if name == "position" and node.is_root:
                if not isinstance(value, Position):
                    raise NodeValidationError("position", "position must be a Position")
                continue
            if name in IMMUTABLE_FIELDS:
                raise ImmutableFieldError(name, f"{name} cannot change after creation")
            if name not in UPDATABLE_FIELDS:
                raise NodeValidationError(name, f"Unknown scale field {name!r}")
            if name == "name" and not isinstance(value, str):
                raise NodeValidationError("name", "Scale name must be a string")
            if name == "expanded" and not isinstance(value, bool):
                raise NodeValidationError("expanded", "expanded must be a bool")

        self._nodes[node_id] = replace(node, **fields)
        self._notify(StoreEventKind.UPDATED, [node_id])
        return True

    def update_item_text(self, node_id: str, item_id: str, text: str) -> bool:
        """Edit one item's text. Returns False if node or item is absent."""
        if not isinstance(text, str):
            raise NodeValidationError("text", "Item text must be a string")
        return self._replace_item(node_id, item_id, text=text)

    def set_current_rubric(self, node_id: str, item_id: str, tags: Sequence[str],
                           source: RubricSource = RubricSource.MANUALLY_EDITED) -> bool:
        """
        Replace an item's current rubric (re-extraction or manual edit).

        The baseline rubric is never touched.
        """
        if not all(isinstance(tag, str) for tag in tags):
            raise NodeValidationError("current_rubric", "Rubric tags must be strings")
        return self._replace_item(node_id, item_id, current_rubric=tuple(tags), rubric_source=source)

    def _replace_item(self, node_id: str, item_id: str, **changes: Any) -> bool:
        node = self._nodes.get(node_id)
        if node is None or node.find_item(item_id) is None:
            return False
        dimensions = tuple(
            replace(dim, items=tuple(
                replace(item, **changes) if item.item_id == item_id else item for item in dim.items
            ))
            for dim in node.dimensions
        )
        self._nodes[node_id] = replace(node, dimensions=dimensions)
        self._notify(StoreEventKind.UPDATED, [node_id])
        return True

    def set_active(self, node_id: Optional[str]) -> None:
        if node_id is not None and node_id not in self._nodes:
            raise NodeNotFoundError(node_id)
        self._active_id = node_id
        self._notify(StoreEventKind.ACTIVE_CHANGED, [node_id] if node_id else [])

    def clear(self) -> None:
        """Empty the collection and start a new family."""
        removed = list(self._nodes)
        self._nodes.clear()
        self._active_id = None
        self._retired.clear()
        self._branch_counters.clear()
        self._family_generation += 1
        self._notify(StoreEventKind.CLEARED, removed)


__all__ = [
    "IMMUTABLE_FIELDS",
    "UPDATABLE_FIELDS",
    "StoreEventKind",
    "StoreEvent",
    "validate_node_payload",
    "validate_node",
    "ScaleStore",
]

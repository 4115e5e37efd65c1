"""
Core Scale Model Objects

Defines the data structures of the scale version graph.

These are plain data classes representing:
    - Positions (canvas coordinates of a node)
    - Items (self-report statements with lineage and two rubric generations)
    - Dimensions (named groups of items)
    - Scale nodes (one versioned definition of the instrument)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about the generative service or the UI
        - Are frozen; ScaleStore commits changes by replacing whole nodes
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple


class RubricSource(Enum):
    """Where an item's current rubric came from."""

    EXTERNALLY_GENERATED = "externally-generated"
    INHERITED_FROM_PARENT = "inherited-from-parent"
    MANUALLY_EDITED = "manually-edited"


class NodeKind(Enum):
    ROOT = "root"
    BRANCH = "branch"


class IntegrityStatus(Enum):
    """Display-only comparison of an item's baseline and current rubric."""

    STABLE = "stable"
    MISMATCH = "mismatch"
    NOT_APPLICABLE = "not_applicable"


@dataclass(frozen=True)
class Position:
    """
    Absolute canvas coordinates of a node.

    Positions of branches are snapshots, not offsets from the parent:
    moving a parent never moves its locked children.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Item:
    """
    One self-report statement inside a dimension.

    Properties:
        item_id:
            Unique within its node.
            Branch items look like "skala-asli-branch-1-item-4".

        origin_item_id:
            item_id of the positionally-corresponding item in the parent
            node, or "unknown" when the parent had no item at that position.

        text:
            The statement itself. Editable through ScaleStore.update_item_text.

        baseline_rubric:
            Semantic tags inherited at creation time. Set once, never
            reassigned. Stored as a tuple so it cannot be edited in place.

        current_rubric:
            Present semantic tags. May diverge from the baseline over the
            node's lifetime (re-extraction, manual edit).

        rubric_source:
            Which process produced current_rubric.
    """

    item_id: str
    text: str
    origin_item_id: str = "unknown"
    baseline_rubric: Tuple[str, ...] = ()
    current_rubric: Tuple[str, ...] = ()
    rubric_source: RubricSource = RubricSource.INHERITED_FROM_PARENT

    def __post_init__(self):
        object.__setattr__(self, "baseline_rubric", tuple(self.baseline_rubric))
        object.__setattr__(self, "current_rubric", tuple(self.current_rubric))


@dataclass(frozen=True)
class Dimension:
    """A named, ordered group of items."""

    name: str
    items: Tuple[Item, ...] = ()

    def __post_init__(self):
        if isinstance(self.items, list):
            object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class ScaleNode:
    """
    One versioned definition of the assessment instrument.

    A node is either the single root of the family or a branch derived
    from another node by adaptation. Use ScaleNode.root() and
    ScaleNode.branch() to build correctly-discriminated nodes; the plain
    constructor exists for deserialization and for the store's own
    validation tests.

    Properties:
        id:
            Unique identifier. Never reused within a family.

        name:
            Display name, e.g. "Skala Gen-Z".

        position:
            Absolute canvas position.

        parent_id:
            id of the source node. None only for the root.

        is_root:
            True only for the root.

        depth:
            0 for the root, parent.depth + 1 otherwise.

        branch_index:
            Stable sibling order, assigned once at creation. None for the root.

        position_locked:
            Always True for branches. A locked position is never recomputed.

        dimensions:
            Ordered dimensions of the instrument.

        expanded:
            UI expand/collapse flag. Changeable through ScaleStore.update.

    INVARIANTS (enforced by ScaleStore, not here):
        - is_root implies parent_id is None and depth == 0
        - not is_root implies position_locked and depth == parent.depth + 1
        - branch_index, position and position_locked never change once set
    """

    id: str
    name: str
    position: Position
    parent_id: Optional[str] = None
    is_root: bool = False
    depth: int = 0
    branch_index: Optional[int] = None
    position_locked: bool = False
    dimensions: Tuple[Dimension, ...] = ()
    expanded: bool = False

    def __post_init__(self):
        if isinstance(self.dimensions, list):
            object.__setattr__(self, "dimensions", tuple(self.dimensions))

    @classmethod
    def root(cls, id: str, name: str, position: Position,
             dimensions: Optional[Sequence[Dimension]] = None) -> "ScaleNode":
        return cls(
            id=id,
            name=name,
            position=position,
            parent_id=None,
            is_root=True,
            depth=0,
            branch_index=None,
            position_locked=False,
            dimensions=tuple(dimensions or ()),
        )

    @classmethod
    def branch(cls, id: str, name: str, parent_id: str, position: Position,
               depth: int, branch_index: int,
               dimensions: Optional[Sequence[Dimension]] = None) -> "ScaleNode":
        if depth < 1:
            raise ValueError(f"Branch depth must be >= 1, got {depth}")
        if branch_index < 0:
            raise ValueError(f"Branch index must be >= 0, got {branch_index}")
        return cls(
            id=id,
            name=name,
            position=position,
            parent_id=parent_id,
            is_root=False,
            depth=depth,
            branch_index=branch_index,
            position_locked=True,
            dimensions=tuple(dimensions or ()),
        )

    @property
    def kind(self) -> NodeKind:
        return NodeKind.ROOT if self.is_root else NodeKind.BRANCH

    def flatten_items(self) -> List[Tuple[str, Item]]:
        """
        Flatten all dimensions into (dimension_name, item) pairs.

        Order follows dimension order, then item order.
        """
        return [(dim.name, item) for dim in self.dimensions for item in dim.items]

    def item_count(self) -> int:
        return sum(len(dim.items) for dim in self.dimensions)

    def dimension_names(self) -> List[str]:
        return [dim.name for dim in self.dimensions]

    def find_item(self, item_id: str) -> Optional[Tuple[str, Item]]:
        """
        Retrieve an item by ID.

        Args:
            item_id: Item identifier

        Returns:
            (dimension_name, Item) or None if not found
        """
        for dim in self.dimensions:
            for item in dim.items:
                if item.item_id == item_id:
                    return dim.name, item
        return None


def rubrics_equal(a: Sequence[str], b: Sequence[str]) -> bool:
    """Order-sensitive tag comparison."""
    return tuple(a) == tuple(b)


def integrity_status(item: Item, node: Optional[ScaleNode] = None) -> IntegrityStatus:
    """
    Compare an item's baseline and current rubric for display.

    This is a derived fact, never a constraint: a MISMATCH simply means the
    adapted statement drifted from what its ancestor measured.
    """
    if node is not None and node.is_root:
        return IntegrityStatus.NOT_APPLICABLE
    if not item.baseline_rubric and not item.current_rubric:
        return IntegrityStatus.NOT_APPLICABLE
    if rubrics_equal(item.baseline_rubric, item.current_rubric):
        return IntegrityStatus.STABLE
    return IntegrityStatus.MISMATCH

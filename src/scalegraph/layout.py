"""
Branch Positioning: deterministic placement of new branches.

A branch's position depends only on its parent's position and depth and on
its own branch_index. It does not look at siblings, at how many branches
exist, or at the order nodes were added. Recomputing later, with any
collection ordering, reproduces the same point, which is what allows a
branch to be created with position_locked=True.

Layout (symmetric, alternating around the parent's y):
    index 0: y = parent.y - 1 * ROW_HEIGHT   (up)
    index 1: y = parent.y + 1 * ROW_HEIGHT   (down)
    index 2: y = parent.y - 2 * ROW_HEIGHT   (further up)
    index 3: y = parent.y + 2 * ROW_HEIGHT   (further down)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from scalegraph.model import Position, ScaleNode


@dataclass(frozen=True)
class LayoutConstants:
    horizontal_step: float = 550
    estimated_height: float = 180
    vertical_gap: float = 24

    @property
    def row_height(self) -> float:
        return self.estimated_height + self.vertical_gap


DEFAULT_LAYOUT = LayoutConstants()


@dataclass(frozen=True)
class BranchPosition:
    x: float
    y: float
    depth: int
    branch_index: int

    @property
    def point(self) -> Position:
        return Position(self.x, self.y)


FALLBACK_POSITION = BranchPosition(x=100, y=100, depth=1, branch_index=0)


def next_branch_position(parent: Optional[ScaleNode], branch_index: int,
                         constants: LayoutConstants = DEFAULT_LAYOUT) -> BranchPosition:
    """
    Compute the canvas position of a new branch.

    Args:
        parent: Source node (needs position and depth)
        branch_index: Index of the new branch among its siblings (0, 1, 2, ...)
        constants: Layout constants

    Returns:
        BranchPosition. FALLBACK_POSITION when the parent is missing or has
        no position.

    Raises:
        ValueError: If branch_index is negative
    """
    if branch_index < 0:
        raise ValueError(f"branch_index must be >= 0, got {branch_index}")

    if parent is None or parent.position is None:
        return FALLBACK_POSITION

    depth = (parent.depth or 0) + 1
    x = parent.position.x + constants.horizontal_step

    layer = branch_index // 2 + 1
    direction = -1 if branch_index % 2 == 0 else 1
    y = parent.position.y + direction * layer * constants.row_height

    return BranchPosition(x=x, y=y, depth=depth, branch_index=branch_index)


__all__ = [
    "LayoutConstants",
    "DEFAULT_LAYOUT",
    "BranchPosition",
    "FALLBACK_POSITION",
    "next_branch_position",
]

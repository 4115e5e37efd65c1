"""
Tests for deterministic branch positioning.
"""

import pytest
from scalegraph.layout import (
    DEFAULT_LAYOUT,
    FALLBACK_POSITION,
    LayoutConstants,
    next_branch_position,
)
from scalegraph.model import Position, ScaleNode


def parent_at(x, y, depth=0):
    if depth == 0:
        return ScaleNode.root(id="p", name="P", position=Position(x, y))
    return ScaleNode.branch(id="p", name="P", parent_id="q", position=Position(x, y),
                            depth=depth, branch_index=0)


class TestConcretePositions:
    """Coordinates for a parent at (100, 250)."""

    def test_row_height(self):
        assert DEFAULT_LAYOUT.row_height == 204

    def test_first_branch_goes_up(self):
        pos = next_branch_position(parent_at(100, 250), 0)
        assert (pos.x, pos.y, pos.depth, pos.branch_index) == (650, 46, 1, 0)

    def test_second_branch_goes_down(self):
        pos = next_branch_position(parent_at(100, 250), 1)
        assert (pos.x, pos.y) == (650, 454)

    def test_third_branch_goes_further_up(self):
        pos = next_branch_position(parent_at(100, 250), 2)
        assert (pos.x, pos.y) == (650, -158)

    def test_fourth_branch_goes_further_down(self):
        pos = next_branch_position(parent_at(100, 250), 3)
        assert (pos.x, pos.y) == (650, 658)

    def test_branch_of_branch(self):
        """A branch off the second child at (650, 454) lands at (1200, 250)."""
        pos = next_branch_position(parent_at(650, 454, depth=1), 0)
        assert (pos.x, pos.y, pos.depth) == (1200, 250, 2)

    def test_point(self):
        assert next_branch_position(parent_at(100, 250), 0).point == Position(650, 46)


def test_symmetric_around_parent():
    """Indices 2k and 2k+1 mirror each other around the parent's y."""
    parent = parent_at(0, 1000)
    for k in range(4):
        up = next_branch_position(parent, 2 * k)
        down = next_branch_position(parent, 2 * k + 1)
        assert up.y + down.y == 2 * 1000
        assert up.y < 1000 < down.y


def test_deterministic():
    parent = parent_at(100, 250)
    assert next_branch_position(parent, 5) == next_branch_position(parent, 5)


def test_missing_parent_uses_fallback():
    assert next_branch_position(None, 3) == FALLBACK_POSITION
    assert (FALLBACK_POSITION.x, FALLBACK_POSITION.y) == (100, 100)
    assert (FALLBACK_POSITION.depth, FALLBACK_POSITION.branch_index) == (1, 0)


def test_negative_index_rejected():
    with pytest.raises(ValueError):
        next_branch_position(parent_at(100, 250), -1)


def test_custom_constants():
    constants = LayoutConstants(horizontal_step=100, estimated_height=40, vertical_gap=10)
    pos = next_branch_position(parent_at(0, 0), 1, constants)
    assert (pos.x, pos.y) == (100, 50)

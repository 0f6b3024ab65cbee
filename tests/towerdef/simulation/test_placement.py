"""Unit tests for grid snapping and tower placement validation."""

from __future__ import annotations

import pytest

from towerdef.simulation.entities import create_tower
from towerdef.simulation.placement import (
    is_point_in_box,
    is_valid_tower_position,
    snap_to_grid,
)

pytestmark = pytest.mark.unit


class TestSnapToGrid:
    def test_rounds_to_nearest(self):
        assert snap_to_grid((1.4, 0.6)) == (1.0, 1.0)

    def test_halves_round_up(self):
        assert snap_to_grid((2.5, -2.5)) == (3.0, -2.0)

    def test_integers_unchanged(self):
        assert snap_to_grid((-4.0, 7.0)) == (-4.0, 7.0)


class TestPointInBox:
    def test_edges_are_inside(self):
        assert is_point_in_box((5, 5), (0, 0), 10, 10)
        assert is_point_in_box((-5, -5), (0, 0), 10, 10)

    def test_outside(self):
        assert not is_point_in_box((5.01, 0), (0, 0), 10, 10)


class TestIsValidTowerPosition:
    def test_open_ground_is_valid(self, level1):
        assert is_valid_tower_position((0, -2), [], level1)

    def test_near_waypoint_rejected(self, level1):
        # (-5, 0) is a waypoint, 1.0 away
        assert not is_valid_tower_position((-4, 0), [], level1)

    def test_exactly_min_distance_from_waypoint_allowed(self, level1):
        assert is_valid_tower_position((-3.5, 0), [], level1)

    def test_outside_buildable_area_rejected(self, level1):
        assert not is_valid_tower_position((0, -8), [], level1)

    def test_too_close_to_tower_rejected(self, level1):
        towers = [create_tower("tower-1", "cannon", (0, -2))]
        assert not is_valid_tower_position((2, -2), towers, level1)

    def test_tower_spacing_is_twice_min_distance(self, level1):
        towers = [create_tower("tower-1", "cannon", (0, -2))]
        assert is_valid_tower_position((3, -2), towers, level1)

    def test_mid_segment_point_only_checked_against_waypoints(self, level1):
        # (0, 5) lies on the segment (-5, 5) -> (5, 5) but is 5 units from both ends
        assert is_valid_tower_position((0, 5), [], level1)

    def test_no_level_loaded(self):
        assert not is_valid_tower_position((0, 0), [], None)

    def test_custom_min_distance(self, level1):
        assert not is_valid_tower_position((0, -2), [], level1, min_distance=6.0)

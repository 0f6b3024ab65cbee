"""Tower placement validation.

Pure predicates against the level geometry and the current towers; no
mutation, no side effects.

The "too close to the path" rule measures distance to path *waypoints*,
not to the segments between them.  Near the middle of a long segment a
candidate can therefore sit right on the path and still be accepted.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .entities import distance

if TYPE_CHECKING:
    from .entities import Tower
    from .level import BuildableArea, LevelConfig

DEFAULT_MIN_DISTANCE = 1.5


def snap_to_grid(point: tuple[float, float]) -> tuple[float, float]:
    """Snap a ground point to integer grid units, rounding halves up."""
    return (float(math.floor(point[0] + 0.5)), float(math.floor(point[1] + 0.5)))


def is_point_in_box(point: tuple[float, float], center: tuple[float, float],
                    width: float, height: float) -> bool:
    """Inclusive axis-aligned containment test."""
    half_w = width / 2
    half_h = height / 2
    return (
        center[0] - half_w <= point[0] <= center[0] + half_w
        and center[1] - half_h <= point[1] <= center[1] + half_h
    )


def in_buildable_area(point: tuple[float, float], areas: Iterable[BuildableArea]) -> bool:
    return any(is_point_in_box(point, a.center, a.width, a.height) for a in areas)


def is_valid_tower_position(
    candidate: tuple[float, float],
    towers: Iterable[Tower],
    level: LevelConfig | None,
    min_distance: float = DEFAULT_MIN_DISTANCE,
) -> bool:
    """Return True if a new tower may be built at *candidate*.

    All must hold:
      1. inside at least one buildable area
      2. at least *min_distance* from every path waypoint
      3. at least ``2 * min_distance`` from every existing tower
    """
    if level is None:
        return False

    if not in_buildable_area(candidate, level.buildable_areas):
        return False

    if any(distance(candidate, wp) < min_distance for wp in level.path):
        return False

    tower_spacing = min_distance * 2
    return not any(distance(candidate, t.position) < tower_spacing for t in towers)

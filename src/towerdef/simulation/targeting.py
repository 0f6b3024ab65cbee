"""Target acquisition for towers.

Pure queries over the enemy list; no mutation.  Ties between equally good
candidates go to the enemy encountered first, i.e. the earliest spawned,
because the store keeps enemies in insertion order.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from .entities import distance

if TYPE_CHECKING:
    from .entities import Enemy, Tower


def can_tower_attack_enemy(tower: Tower, enemy: Enemy) -> bool:
    return distance(tower.position, enemy.position) <= tower.range


def get_enemies_in_range(tower: Tower, enemies: Iterable[Enemy]) -> list[Enemy]:
    return [e for e in enemies if can_tower_attack_enemy(tower, e)]


def get_closest_enemy(tower: Tower, enemies: Iterable[Enemy]) -> Enemy | None:
    """Nearest in-range enemy, or None."""
    closest = None
    closest_dist = float("inf")
    for enemy in get_enemies_in_range(tower, enemies):
        dist = distance(tower.position, enemy.position)
        if dist < closest_dist:
            closest_dist = dist
            closest = enemy
    return closest


def _pick(candidates: list[Enemy], better) -> Enemy:
    """First-encountered candidate that no later candidate strictly beats."""
    best = candidates[0]
    for enemy in candidates[1:]:
        if better(enemy, best):
            best = enemy
    return best


def get_target_enemy(tower: Tower, enemies: Iterable[Enemy]) -> Enemy | None:
    """Choose which in-range enemy *tower* engages, per its target_mode.

      first:     furthest along the path (highest current_waypoint)
      last:      least far along the path
      strongest: most current health
      weakest:   least current health
      other:     nearest
    """
    in_range = get_enemies_in_range(tower, enemies)
    if not in_range:
        return None

    mode = tower.target_mode
    if mode == "first":
        return _pick(in_range, lambda a, b: a.current_waypoint > b.current_waypoint)
    if mode == "last":
        return _pick(in_range, lambda a, b: a.current_waypoint < b.current_waypoint)
    if mode == "strongest":
        return _pick(in_range, lambda a, b: a.health > b.health)
    if mode == "weakest":
        return _pick(in_range, lambda a, b: a.health < b.health)
    return get_closest_enemy(tower, in_range)

"""MovementSystem — walks every enemy along the level path.

Each tick an enemy moves ``speed * dt`` toward ``path[current_waypoint + 1]``.
If that step would reach or pass the waypoint, the enemy snaps exactly onto
it and the overshoot is dropped rather than carried into the next segment,
so low frame rates make enemies slightly slower.

An enemy whose ``current_waypoint`` is the last path index has reached the
base: it costs the player ``enemy.damage`` lives and is removed before it
moves again.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from .entities import heading_to

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus
    from .store import EntityStore

logger = logging.getLogger("towerdef.movement")


class MovementSystem:
    """Advances enemies along the path and resolves escapes."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus

    def tick(self, store: EntityStore, path: list[tuple[float, float]], dt: float) -> None:
        last_index = len(path) - 1
        for enemy in list(store.enemies.values()):
            if enemy.enemy_id not in store.enemies:
                continue

            if enemy.current_waypoint >= last_index:
                self._escape(store, enemy)
                if not store.is_playing:
                    return
                continue

            target = path[enemy.current_waypoint + 1]
            dx = target[0] - enemy.position[0]
            dz = target[1] - enemy.position[1]
            remaining = math.hypot(dx, dz)
            move_amount = enemy.speed * dt

            if remaining > 0:
                enemy.heading = heading_to(enemy.position, target)

            if move_amount >= remaining:
                enemy.position = (float(target[0]), float(target[1]))
                enemy.current_waypoint += 1
            else:
                enemy.position = (
                    enemy.position[0] + (dx / remaining) * move_amount,
                    enemy.position[1] + (dz / remaining) * move_amount,
                )

    def _escape(self, store: EntityStore, enemy) -> None:
        logger.debug(f"{enemy.enemy_id} reached the base, -{enemy.damage} lives")
        if self._event_bus is not None:
            self._event_bus.publish("enemy_escaped", {
                "enemy_id": enemy.enemy_id,
                "enemy_type": enemy.enemy_type,
                "damage": enemy.damage,
            })
        store.decrease_lives(enemy.damage)
        store.remove_enemy(enemy.enemy_id)
        store.enemies_escaped += 1

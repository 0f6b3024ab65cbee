"""ProjectileSystem — projectile flight and hit resolution.

Each tick every projectile moves ``speed * dt`` along the direction it was
given at spawn.  Then, for a projectile bound to a target:

  1. target gone (killed or escaped)      -> removed, counts as a miss
  2. within the target's hit radius       -> ``damage_enemy()``, removed
  3. flown further than the travel bound  -> removed (timeout)

The hit radius is ``enemy.size * hit_radius_scale``.  A projectile fired
without a target id hits the first enemy whose hit radius it enters.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from towerdef.config import Settings, settings as _default_settings

from .entities import distance

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus
    from .entities import Enemy, Projectile
    from .store import EntityStore

logger = logging.getLogger("towerdef.projectiles")


class ProjectileSystem:
    """Advances projectiles and resolves hit / miss / timeout."""

    def __init__(self, event_bus: EventBus | None = None,
                 config: Settings | None = None) -> None:
        self._event_bus = event_bus
        self._settings = config or _default_settings

    def hit_radius(self, enemy: Enemy) -> float:
        return enemy.size * self._settings.hit_radius_scale

    def tick(self, store: EntityStore, dt: float) -> None:
        to_remove: list[str] = []

        for proj in list(store.projectiles.values()):
            if not store.is_playing:
                break

            step = proj.speed * dt
            proj.position = (
                proj.position[0] + proj.direction[0] * step,
                proj.position[1] + proj.direction[1] * step,
            )
            proj.traveled += step

            if proj.target_id is not None:
                target = store.get_enemy(proj.target_id)
                if target is None:
                    to_remove.append(proj.projectile_id)
                    continue
            else:
                target = self._first_enemy_hit(store, proj)

            if target is not None and distance(proj.position, target.position) < self.hit_radius(target):
                self._hit(store, proj, target)
                to_remove.append(proj.projectile_id)
                continue

            if proj.traveled > self._settings.projectile_max_travel:
                logger.debug(f"{proj.projectile_id} timed out after {proj.traveled:.1f} units")
                to_remove.append(proj.projectile_id)

        for pid in to_remove:
            store.remove_projectile(pid)

    def _first_enemy_hit(self, store: EntityStore, proj: Projectile) -> Enemy | None:
        for enemy in store.enemies.values():
            if distance(proj.position, enemy.position) < self.hit_radius(enemy):
                return enemy
        return None

    def _hit(self, store: EntityStore, proj: Projectile, target: Enemy) -> None:
        if self._event_bus is not None:
            self._event_bus.publish("projectile_hit", {
                "projectile_id": proj.projectile_id,
                "tower_id": proj.tower_id,
                "target_id": target.enemy_id,
                "damage": proj.damage,
                "position": {"x": target.position[0], "z": target.position[1]},
            })
        store.damage_enemy(target.enemy_id, proj.damage)

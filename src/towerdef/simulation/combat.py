"""CombatResolver — tower aiming, attack cadence and firing.

Architecture
------------
Once per tick, for every tower:

  1. Decay the cosmetic timers (muzzle flash, laser beam) by ``dt``.
  2. Acquire a target with ``get_target_enemy()``.  No target, no action.
  3. Turn to face the target (``heading``, no gameplay effect).
  4. Fire only if ``now - last_attack_time >= 1 / attack_speed``, where
     ``now`` is the simulation clock.  A tower that has never fired may
     fire immediately.

Firing depends on the tower type:

  - Projectile towers (cannon, sniper) spawn a Projectile at a muzzle
    offset toward the target.  Its direction is aimed at the target's
    position *at spawn time* and never re-homed; ProjectileSystem resolves
    the hit later, so damage lands after the flight time.
  - Hitscan towers (laser) call ``store.damage_enemy()`` immediately.
    There is no projectile entity and no travel latency.

Damage is always the tower's current (possibly upgraded) ``damage``.

Events published on the EventBus:
  - ``projectile_fired``: a new projectile is in the air
  - ``laser_fired``: hitscan damage applied this tick
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from towerdef.config import Settings, settings as _default_settings

from .entities import (
    LASER_BEAM_DURATION,
    MUZZLE_FLASH_DURATION,
    Projectile,
    distance,
    heading_to,
    is_hitscan,
    projectile_speed,
)
from .ids import IdGenerator
from .targeting import get_target_enemy

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus
    from .entities import Enemy, Tower
    from .store import EntityStore

logger = logging.getLogger("towerdef.combat")


class CombatResolver:
    """Decides, per tower per tick, whether and how to attack."""

    def __init__(self, ids: IdGenerator, event_bus: EventBus | None = None,
                 config: Settings | None = None) -> None:
        self._ids = ids
        self._event_bus = event_bus
        self._settings = config or _default_settings

    def tick(self, store: EntityStore, now: float, dt: float) -> None:
        for tower in list(store.towers.values()):
            self._decay_effects(tower, dt)
            if not store.is_playing:
                continue

            target = get_target_enemy(tower, store.enemies.values())
            if target is None:
                continue

            tower.heading = heading_to(tower.position, target.position)
            if not tower.can_attack(now):
                continue

            tower.last_attack_time = now
            store.shots_fired += 1
            if is_hitscan(tower.tower_type):
                self._fire_hitscan(store, tower, target)
            else:
                self.fire(store, tower, target)

    @staticmethod
    def _decay_effects(tower: Tower, dt: float) -> None:
        if tower.flash_remaining > 0:
            tower.flash_remaining = max(0.0, tower.flash_remaining - dt)
        if tower.beam_remaining > 0:
            tower.beam_remaining = max(0.0, tower.beam_remaining - dt)
            if tower.beam_remaining == 0:
                tower.beam_end = None

    def fire(self, store: EntityStore, tower: Tower, target: Enemy) -> Projectile:
        """Spawn a projectile from *tower*'s muzzle aimed at *target*'s current position."""
        dist = distance(tower.position, target.position)
        if dist > 0:
            aim = (
                (target.position[0] - tower.position[0]) / dist,
                (target.position[1] - tower.position[1]) / dist,
            )
        else:
            aim = (0.0, 1.0)

        offset = self._settings.muzzle_offset
        muzzle = (tower.position[0] + aim[0] * offset, tower.position[1] + aim[1] * offset)

        dx = target.position[0] - muzzle[0]
        dz = target.position[1] - muzzle[1]
        length = math.hypot(dx, dz)
        direction = (dx / length, dz / length) if length > 0 else aim

        proj = Projectile(
            projectile_id=self._ids.next_id("proj"),
            position=muzzle,
            origin=muzzle,
            direction=direction,
            speed=projectile_speed(tower.tower_type),
            damage=tower.damage,
            tower_id=tower.tower_id,
            target_id=target.enemy_id,
        )
        store.add_projectile(proj)
        tower.flash_remaining = MUZZLE_FLASH_DURATION

        if self._event_bus is not None:
            self._event_bus.publish("projectile_fired", {
                "projectile_id": proj.projectile_id,
                "tower_id": tower.tower_id,
                "tower_type": tower.tower_type,
                "target_id": target.enemy_id,
                "damage": proj.damage,
            })
        return proj

    def _fire_hitscan(self, store: EntityStore, tower: Tower, target: Enemy) -> None:
        tower.beam_remaining = LASER_BEAM_DURATION
        tower.beam_end = target.position
        if self._event_bus is not None:
            self._event_bus.publish("laser_fired", {
                "tower_id": tower.tower_id,
                "target_id": target.enemy_id,
                "damage": tower.damage,
            })
        killed = store.damage_enemy(target.enemy_id, tower.damage)
        if killed:
            logger.debug(f"{tower.tower_id} lasered {target.enemy_id}")

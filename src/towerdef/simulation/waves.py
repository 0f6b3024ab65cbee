"""WaveScheduler — timed enemy spawning for the active wave.

State machine
-------------
  idle --initiate_wave()--> spawning --last group exhausted--> finished

While spawning, each tick checks ``now >= next_spawn_time``.  When due,
one enemy of the current group's type is created at the start of the path
with health scaled by ``1 + current_wave * wave_health_step`` (20% per
wave by default), and the schedule advances:

  - same group:  next spawn at ``next_spawn_time + group.spawn_delay``
  - next group:  counter reset, next spawn at ``next_spawn_time + next.spawn_delay``
  - no groups left: spawning stops and ``store.wave_spawning`` is cleared

Spawn times accumulate from the previous *scheduled* time, not from the
tick in which the spawn happened, so the cadence does not drift with the
frame rate.  At most one enemy spawns per tick.

The scheduler never ends a wave.  Once spawning stops, completion is
detected by the EntityStore when no enemies remain.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from towerdef.config import Settings, settings as _default_settings

from .entities import create_enemy
from .ids import IdGenerator

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus
    from .entities import Enemy
    from .level import LevelConfig
    from .store import EntityStore

logger = logging.getLogger("towerdef.waves")


class WaveScheduler:
    """Spawns the groups of the current wave on the simulation clock."""

    def __init__(self, ids: IdGenerator, event_bus: EventBus | None = None,
                 config: Settings | None = None) -> None:
        self._ids = ids
        self._event_bus = event_bus
        self._settings = config or _default_settings
        self.group_index: int = 0
        self.spawned_in_group: int = 0
        self.next_spawn_time: float = 0.0
        self.finished: bool = True

    def reset(self) -> None:
        self.group_index = 0
        self.spawned_in_group = 0
        self.next_spawn_time = 0.0
        self.finished = True

    def wave_multiplier(self, wave_index: int) -> float:
        return 1 + wave_index * self._settings.wave_health_step

    def initiate_wave(self, store: EntityStore, level: LevelConfig, now: float) -> bool:
        """Start the next wave.  Returns False if a wave cannot start now."""
        if not store.is_playing:
            logger.debug(f"Cannot start wave in phase {store.phase}")
            return False
        if store.wave_in_progress:
            logger.debug("Wave already in progress")
            return False
        if store.current_wave >= min(store.total_waves, level.total_waves):
            logger.debug("No waves left")
            return False

        self.group_index = 0
        self.spawned_in_group = 0
        self.next_spawn_time = now
        self.finished = False
        store.start_wave()

        wave = level.waves[store.current_wave]
        logger.info(
            f"Starting wave {store.current_wave + 1} of {store.total_waves} "
            f"({wave.total_count} enemies)"
        )
        if self._event_bus is not None:
            self._event_bus.publish("wave_start", {
                "wave": store.current_wave + 1,
                "total_waves": store.total_waves,
                "enemy_count": wave.total_count,
            })
        return True

    def tick(self, store: EntityStore, level: LevelConfig, now: float) -> Enemy | None:
        """Spawn the next enemy if one is due.  Returns the spawned enemy, if any."""
        if self.finished or not store.wave_in_progress:
            return None
        if now < self.next_spawn_time:
            return None

        wave = level.waves[store.current_wave]
        group = wave.groups[self.group_index]

        enemy = create_enemy(
            self._ids.next_id("enemy"),
            group.enemy_type,
            level.start_position,
            self.wave_multiplier(store.current_wave),
        )
        store.add_enemy(enemy)
        if self._event_bus is not None:
            self._event_bus.publish("enemy_spawned", {
                "enemy_id": enemy.enemy_id,
                "enemy_type": enemy.enemy_type,
                "max_health": enemy.max_health,
                "time": now,
            })

        self.spawned_in_group += 1
        if self.spawned_in_group < group.count:
            self.next_spawn_time += group.spawn_delay
        elif self.group_index + 1 < len(wave.groups):
            self.group_index += 1
            self.spawned_in_group = 0
            self.next_spawn_time += wave.groups[self.group_index].spawn_delay
        else:
            self.finished = True
            store.wave_spawning = False
            logger.debug(f"Wave {store.current_wave + 1} fully spawned")
        return enemy

"""EntityStore — authoritative state of one play session.

Architecture
------------
The store is an *arena*: towers, enemies and projectiles live in
insertion-ordered dicts keyed by id, next to the session scalars (gold,
lives, wave counters, phase, placement mode, simulation clock).  It is owned
by the GameLoop and handed to each system for the duration of one tick;
systems must not keep references to it or to its entities across ticks.

Every operation is synchronous and leaves the store consistent when it
returns.  Gameplay failures (not enough gold, upgrade at max level, unknown
id) are rejected with a False return and no mutation; they are not errors.

Wave completion
---------------
A wave is complete when nothing is left to spawn (``wave_spawning`` is
False) and no enemies remain.  It is evaluated right after a kill in
``damage_enemy()`` and again by the GameLoop at the end of every tick, so a
wave whose last enemy escapes still completes.  Completing the final wave
transitions the phase to ``victory``.

Events are published on the EventBus for the renderer and audio layers:
  - ``phase_change``, ``gold_changed``, ``lives_changed``
  - ``tower_placed``, ``tower_upgraded``, ``tower_removed``
  - ``enemy_killed``, ``wave_complete``
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from towerdef.config import Settings, settings as _default_settings

from .entities import (
    UPGRADE_DAMAGE_MULT,
    UPGRADE_RANGE_MULT,
    Enemy,
    Projectile,
    Tower,
)

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus

logger = logging.getLogger("towerdef.store")

PHASES = ("menu", "level_select", "playing", "paused", "game_over", "victory")
PLACEMENT_MODES = ("none", "placing")


class EntityStore:
    """Owns every entity collection and session scalar."""

    def __init__(self, event_bus: EventBus | None = None,
                 config: Settings | None = None) -> None:
        self._event_bus = event_bus
        self._settings = config or _default_settings

        self.towers: dict[str, Tower] = {}
        self.enemies: dict[str, Enemy] = {}
        self.projectiles: dict[str, Projectile] = {}

        self.phase: str = "menu"
        self.level_id: int | None = None
        self.gold: int = self._settings.default_gold
        self.lives: int = self._settings.starting_lives
        self.clock: float = 0.0

        self.current_wave: int = 0
        self.total_waves: int = 0
        self.wave_in_progress: bool = False
        self.wave_spawning: bool = False

        self.placement_mode: str = "none"
        self.selected_tower_type: str | None = None

        self.enemies_killed: int = 0
        self.enemies_escaped: int = 0
        self.shots_fired: int = 0

    def _publish(self, event_type: str, data: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)

    # -- Phase --------------------------------------------------------------

    def set_phase(self, phase: str) -> None:
        if phase not in PHASES:
            raise ValueError(f"Unknown phase: {phase!r}")
        if phase == self.phase:
            return
        previous = self.phase
        self.phase = phase
        logger.info(f"Phase {previous} -> {phase}")
        self._publish("phase_change", {"phase": phase, "previous": previous})

    def pause(self) -> bool:
        if self.phase != "playing":
            return False
        self.set_phase("paused")
        return True

    def resume(self) -> bool:
        if self.phase != "paused":
            return False
        self.set_phase("playing")
        return True

    @property
    def is_playing(self) -> bool:
        return self.phase == "playing"

    # -- Economy ------------------------------------------------------------

    def spend_gold(self, amount: int) -> bool:
        """Deduct *amount* if affordable.  Returns False (no mutation) otherwise."""
        if amount < 0:
            logger.debug(f"Refusing to spend negative amount {amount}")
            return False
        if self.gold < amount:
            logger.debug(f"Cannot spend {amount} gold, only {self.gold} available")
            return False
        self.gold -= amount
        self._publish("gold_changed", {"gold": self.gold, "delta": -amount})
        return True

    def add_gold(self, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Cannot add negative gold: {amount}")
        self.gold += amount
        self._publish("gold_changed", {"gold": self.gold, "delta": amount})

    def decrease_lives(self, amount: int) -> None:
        """Lose *amount* lives.  Reaching zero ends the game."""
        self.lives = max(0, self.lives - amount)
        self._publish("lives_changed", {"lives": self.lives, "delta": -amount})
        if self.lives <= 0:
            self.set_phase("game_over")

    # -- Towers -------------------------------------------------------------

    def add_tower(self, tower: Tower) -> None:
        self.towers[tower.tower_id] = tower
        self._publish("tower_placed", {
            "tower_id": tower.tower_id,
            "tower_type": tower.tower_type,
            "position": {"x": tower.position[0], "z": tower.position[1]},
        })

    def remove_tower(self, tower_id: str) -> bool:
        tower = self.towers.pop(tower_id, None)
        if tower is None:
            return False
        self._publish("tower_removed", {"tower_id": tower_id})
        return True

    def get_tower(self, tower_id: str) -> Tower | None:
        return self.towers.get(tower_id)

    def upgrade_tower(self, tower_id: str) -> bool:
        """Raise a tower one level: damage x1.5, range x1.2.

        No-op (returns False) for unknown towers and towers already at the
        maximum level.  Gold is charged by the caller.
        """
        tower = self.towers.get(tower_id)
        if tower is None or tower.is_max_level:
            return False
        tower.level += 1
        tower.damage *= UPGRADE_DAMAGE_MULT
        tower.range *= UPGRADE_RANGE_MULT
        self._publish("tower_upgraded", {
            "tower_id": tower_id,
            "level": tower.level,
            "damage": tower.damage,
            "range": tower.range,
        })
        return True

    # -- Enemies ------------------------------------------------------------

    def add_enemy(self, enemy: Enemy) -> None:
        self.enemies[enemy.enemy_id] = enemy

    def remove_enemy(self, enemy_id: str) -> bool:
        return self.enemies.pop(enemy_id, None) is not None

    def get_enemy(self, enemy_id: str) -> Enemy | None:
        return self.enemies.get(enemy_id)

    def damage_enemy(self, enemy_id: str, amount: float) -> bool:
        """Apply *amount* damage.  Returns True if this hit killed the enemy.

        A kill credits the enemy's reward, removes it, and checks whether
        that completed the wave.
        """
        enemy = self.enemies.get(enemy_id)
        if enemy is None:
            return False
        enemy.health -= amount
        if enemy.health > 0:
            return False

        enemy.health = 0.0
        self.remove_enemy(enemy_id)
        self.enemies_killed += 1
        self.add_gold(enemy.reward)
        self._publish("enemy_killed", {
            "enemy_id": enemy_id,
            "enemy_type": enemy.enemy_type,
            "reward": enemy.reward,
            "position": {"x": enemy.position[0], "z": enemy.position[1]},
        })
        self.check_wave_complete()
        return True

    # -- Projectiles --------------------------------------------------------

    def add_projectile(self, projectile: Projectile) -> None:
        self.projectiles[projectile.projectile_id] = projectile

    def remove_projectile(self, projectile_id: str) -> bool:
        return self.projectiles.pop(projectile_id, None) is not None

    # -- Waves --------------------------------------------------------------

    def start_wave(self) -> None:
        self.wave_in_progress = True
        self.wave_spawning = True

    def end_wave(self) -> None:
        self.wave_in_progress = False
        self.wave_spawning = False
        self.current_wave += 1

    def check_wave_complete(self) -> bool:
        """Close the active wave if it is fully spawned and cleared.

        Returns True if a wave was completed by this call.
        """
        if not self.wave_in_progress or self.wave_spawning or self.enemies:
            return False
        if self.phase not in ("playing", "paused"):
            return False
        completed = self.current_wave
        self.end_wave()
        logger.info(f"Wave {completed + 1}/{self.total_waves} complete")
        self._publish("wave_complete", {
            "wave": completed + 1,
            "total_waves": self.total_waves,
        })
        if self.current_wave >= self.total_waves:
            self.set_phase("victory")
        return True

    # -- Placement ----------------------------------------------------------

    def set_placement(self, mode: str, tower_type: str | None = None) -> None:
        if mode not in PLACEMENT_MODES:
            raise ValueError(f"Unknown placement mode: {mode!r}")
        self.placement_mode = mode
        self.selected_tower_type = tower_type if mode == "placing" else None

    # -- Lifecycle ----------------------------------------------------------

    def reset_game(self, initial_gold: int | None = None) -> None:
        """Clear every collection and restore starting resources."""
        self.towers.clear()
        self.enemies.clear()
        self.projectiles.clear()
        self.gold = initial_gold if initial_gold is not None else self._settings.default_gold
        self.lives = self._settings.starting_lives
        self.clock = 0.0
        self.current_wave = 0
        self.wave_in_progress = False
        self.wave_spawning = False
        self.placement_mode = "none"
        self.selected_tower_type = None
        self.enemies_killed = 0
        self.enemies_escaped = 0
        self.shots_fired = 0

    def snapshot(self) -> dict:
        """Return a detached copy of all public state for collaborators."""
        return {
            "phase": self.phase,
            "level_id": self.level_id,
            "gold": self.gold,
            "lives": self.lives,
            "clock": self.clock,
            "current_wave": self.current_wave,
            "total_waves": self.total_waves,
            "wave_in_progress": self.wave_in_progress,
            "placement_mode": self.placement_mode,
            "selected_tower_type": self.selected_tower_type,
            "stats": {
                "enemies_killed": self.enemies_killed,
                "enemies_escaped": self.enemies_escaped,
                "shots_fired": self.shots_fired,
            },
            "towers": [t.to_dict() for t in self.towers.values()],
            "enemies": [e.to_dict() for e in self.enemies.values()],
            "projectiles": [p.to_dict() for p in self.projectiles.values()],
        }

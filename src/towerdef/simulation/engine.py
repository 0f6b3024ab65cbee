"""GameLoop — the per-frame driver and the action entry points.

Architecture
------------
The GameLoop owns one EntityStore, the systems that mutate it, the id
generator and the loaded LevelConfig.  The renderer calls ``tick(delta)``
once per frame with the frame delta in seconds; nothing runs in the
background.

Tick order (fixed):

  1. ``clock += delta`` (the simulation clock)
  2. MovementSystem: enemies advance, escapes cost lives
  3. CombatResolver: towers aim and fire (spawns projectiles / hitscan)
  4. ProjectileSystem: projectiles fly, hit, miss or time out
  5. WaveScheduler: at most one spawn if due
  6. wave completion / victory check on the store

While the phase is anything but ``playing`` the tick returns immediately:
the clock, cooldowns, spawn schedule and cosmetic timers all freeze, so
pausing never resets a timer.  A phase change inside the tick (game over,
victory) stops the remaining steps.

Actions
-------
The UI collaborator drives play through:
  ``select_tower_for_placement(type)``, ``cancel_placement()``,
  ``update_placement_position(point)``, ``place_tower()``,
  ``initiate_wave()``, ``upgrade_tower(id)``, ``set_target_mode(id, mode)``,
  ``remove_tower(id)``, ``pause()``, ``resume()``.
Each returns a success flag (or the created Tower); a rejected action
leaves the store untouched.  The UI decides how to tell the player.

Reads go through ``snapshot()``, which returns detached dicts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from towerdef.config import Settings, settings as _default_settings

from .combat import CombatResolver
from .entities import TARGET_MODES, TOWER_TYPES, Tower, create_tower, get_upgrade_cost, tower_cost
from .ids import IdGenerator
from .level import LevelConfig, get_level
from .movement import MovementSystem
from .placement import is_valid_tower_position, snap_to_grid
from .projectiles import ProjectileSystem
from .store import EntityStore
from .waves import WaveScheduler

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus

logger = logging.getLogger("towerdef.engine")


class GameLoop:
    """Drives one play session frame by frame."""

    def __init__(self, event_bus: EventBus | None = None,
                 config: Settings | None = None,
                 ids: IdGenerator | None = None) -> None:
        self._event_bus = event_bus
        self._settings = config or _default_settings
        self.ids = ids or IdGenerator()

        self.store = EntityStore(event_bus, self._settings)
        self.movement = MovementSystem(event_bus)
        self.combat = CombatResolver(self.ids, event_bus, self._settings)
        self.projectiles = ProjectileSystem(event_bus, self._settings)
        self.waves = WaveScheduler(self.ids, event_bus, self._settings)

        self.level: LevelConfig | None = None
        self.hover_position: tuple[float, float] | None = None
        self.hover_valid: bool = False

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    # -- Level lifecycle ----------------------------------------------------

    def load_level(self, level: LevelConfig | int) -> LevelConfig:
        """Reset everything and start *level* (a LevelConfig or a level id).

        Raises:
            KeyError: If *level* is an unknown level id.
        """
        if not isinstance(level, LevelConfig):
            level = get_level(int(level), self._settings.levels_dir)

        self.level = level
        self.ids.reset()
        self.waves.reset()
        self.hover_position = None
        self.hover_valid = False
        self.store.reset_game(initial_gold=level.initial_gold)
        self.store.level_id = level.level_id
        self.store.total_waves = level.total_waves

        logger.info(f"Loaded level {level.level_id} '{level.name}' ({level.total_waves} waves)")
        if self._event_bus is not None:
            self._event_bus.publish("level_loaded", {
                "level_id": level.level_id,
                "name": level.name,
                "total_waves": level.total_waves,
                "initial_gold": level.initial_gold,
            })
        self.store.set_phase("playing")
        return level

    def open_level_select(self) -> None:
        self.store.set_phase("level_select")

    def return_to_menu(self) -> None:
        self.store.set_phase("menu")

    def pause(self) -> bool:
        return self.store.pause()

    def resume(self) -> bool:
        return self.store.resume()

    # -- Tick ---------------------------------------------------------------

    def tick(self, delta: float) -> None:
        """Advance the simulation by *delta* seconds of frame time."""
        store = self.store
        if not store.is_playing or self.level is None:
            return

        store.clock += delta
        now = store.clock

        self.movement.tick(store, self.level.path, delta)
        if not store.is_playing:
            return
        self.combat.tick(store, now, delta)
        if not store.is_playing:
            return
        self.projectiles.tick(store, delta)
        if not store.is_playing:
            return
        self.waves.tick(store, self.level, now)
        store.check_wave_complete()

    # -- Placement ----------------------------------------------------------

    def select_tower_for_placement(self, tower_type: str) -> bool:
        """Enter placement mode for *tower_type*.  False if unknown or unaffordable."""
        if tower_type not in TOWER_TYPES:
            logger.debug(f"Unknown tower type {tower_type!r}")
            return False
        cost = tower_cost(tower_type)
        if self.store.gold < cost:
            logger.debug(f"Not enough gold for {tower_type}: need {cost}, have {self.store.gold}")
            return False
        self.store.set_placement("placing", tower_type)
        return True

    def cancel_placement(self) -> None:
        self.store.set_placement("none")
        self.hover_position = None
        self.hover_valid = False

    def update_placement_position(self, point: tuple[float, float]) -> bool:
        """Snap a pointer-derived ground point and record whether it is buildable."""
        if self.store.placement_mode != "placing" or self.store.selected_tower_type is None:
            return False
        self.hover_position = snap_to_grid(point)
        self.hover_valid = is_valid_tower_position(
            self.hover_position,
            self.store.towers.values(),
            self.level,
            self._settings.placement_min_distance,
        )
        return self.hover_valid

    def place_tower(self) -> Tower | None:
        """Build the selected tower at the hover position.

        Gold is deducted together with creation; nothing changes if the
        position is invalid or the player cannot pay.  Placement mode stays
        active so the player can keep building.
        """
        store = self.store
        tower_type = store.selected_tower_type
        if store.placement_mode != "placing" or tower_type is None or self.hover_position is None:
            return None
        if not store.is_playing:
            return None
        if not is_valid_tower_position(self.hover_position, store.towers.values(),
                                       self.level, self._settings.placement_min_distance):
            self.hover_valid = False
            return None
        if not store.spend_gold(tower_cost(tower_type)):
            return None

        tower = create_tower(self.ids.next_id("tower"), tower_type, self.hover_position)
        store.add_tower(tower)
        logger.info(f"Placed {tower_type} {tower.tower_id} at {tower.position}")
        self.hover_position = None
        self.hover_valid = False
        return tower

    # -- Waves --------------------------------------------------------------

    def initiate_wave(self) -> bool:
        if self.level is None:
            return False
        return self.waves.initiate_wave(self.store, self.level, self.store.clock)

    # -- Tower management ---------------------------------------------------

    def upgrade_tower(self, tower_id: str) -> bool:
        """Pay for and apply one upgrade level.  False if missing, maxed or unaffordable."""
        tower = self.store.get_tower(tower_id)
        if tower is None or tower.is_max_level:
            return False
        if not self.store.spend_gold(get_upgrade_cost(tower)):
            return False
        return self.store.upgrade_tower(tower_id)

    def set_target_mode(self, tower_id: str, mode: str) -> bool:
        tower = self.store.get_tower(tower_id)
        if tower is None or mode not in TARGET_MODES:
            return False
        tower.target_mode = mode
        return True

    def remove_tower(self, tower_id: str) -> bool:
        return self.store.remove_tower(tower_id)

    # -- Snapshot -----------------------------------------------------------

    def snapshot(self) -> dict:
        state = self.store.snapshot()
        selected = self.store.selected_tower_type
        state["placement"] = {
            "hover_position": (
                {"x": self.hover_position[0], "z": self.hover_position[1]}
                if self.hover_position is not None else None
            ),
            "hover_valid": self.hover_valid,
            "selected_tower_cost": tower_cost(selected) if selected else 0,
        }
        return state

"""Headless play-through of a level at a fixed frame step.

Builds the requested towers, then runs waves until the level is won, lost
or the time limit is hit.  Used by the CLI and by integration tests.

The first wave starts right after the towers are built.  With
``auto_waves`` each later wave starts ``wave_delay`` seconds (of the wave
just completed) after completion; without it, on the next frame.

Usage:
    runner = HeadlessRunner(get_level(1), towers=[("cannon", (0, 0))])
    result = runner.run()
    print(result["outcome"])   # "victory", "game_over" or "timeout"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from towerdef.config import Settings, settings as _default_settings
from towerdef.simulation.engine import GameLoop

if TYPE_CHECKING:
    from towerdef.comms.event_bus import EventBus
    from towerdef.simulation.level import LevelConfig

logger = logging.getLogger("towerdef.runner")


def parse_tower_arg(raw: str) -> tuple[str, tuple[float, float]]:
    """Parse ``TYPE:X,Z`` (e.g. ``cannon:0,-2``).

    Raises:
        ValueError: If the string is malformed.
    """
    tower_type, sep, coords = raw.partition(":")
    if not sep:
        raise ValueError(f"Expected TYPE:X,Z, got {raw!r}")
    parts = coords.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected TYPE:X,Z, got {raw!r}")
    return tower_type.strip().lower(), (float(parts[0]), float(parts[1]))


class HeadlessRunner:
    """Plays one level to completion without a renderer."""

    def __init__(
        self,
        level: LevelConfig,
        towers: list[tuple[str, tuple[float, float]]] | None = None,
        fps: int | None = None,
        max_seconds: float | None = None,
        auto_waves: bool = False,
        config: Settings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._settings = config or _default_settings
        self.level = level
        self.towers = list(towers or [])
        self.fps = fps or self._settings.tick_rate
        self.max_seconds = max_seconds if max_seconds is not None else self._settings.max_run_seconds
        self.auto_waves = auto_waves
        self.loop = GameLoop(event_bus=event_bus, config=self._settings)

    def _build(self) -> tuple[list[str], list[str]]:
        placed: list[str] = []
        rejected: list[str] = []
        for tower_type, point in self.towers:
            label = f"{tower_type}@{point[0]:g},{point[1]:g}"
            tower = None
            if self.loop.select_tower_for_placement(tower_type):
                self.loop.update_placement_position(point)
                tower = self.loop.place_tower()
            if tower is None:
                logger.warning(f"Could not place {label}")
                rejected.append(label)
            else:
                placed.append(tower.tower_id)
        self.loop.cancel_placement()
        return placed, rejected

    def run(self) -> dict:
        loop = self.loop
        store = loop.store
        dt = 1.0 / self.fps

        loop.load_level(self.level)
        placed, rejected = self._build()

        next_wave_at: float | None = store.clock
        completed_seen = store.current_wave

        while store.is_playing and store.clock < self.max_seconds:
            if not store.wave_in_progress and next_wave_at is not None and store.clock >= next_wave_at:
                loop.initiate_wave()
                next_wave_at = None

            loop.tick(dt)

            if store.current_wave != completed_seen:
                completed_seen = store.current_wave
                if store.is_playing:
                    delay = self.level.waves[completed_seen - 1].wave_delay if self.auto_waves else 0.0
                    next_wave_at = store.clock + delay

        outcome = store.phase if store.phase in ("victory", "game_over") else "timeout"
        logger.info(f"Level {self.level.level_id} finished: {outcome} at t={store.clock:.1f}s")
        state = loop.snapshot()
        return {
            "level_id": self.level.level_id,
            "outcome": outcome,
            "waves_completed": store.current_wave,
            "total_waves": store.total_waves,
            "lives": store.lives,
            "gold": store.gold,
            "clock": round(store.clock, 3),
            "towers_placed": placed,
            "towers_rejected": rejected,
            "stats": state["stats"],
        }

"""Shared fixtures for towerdef tests."""

from __future__ import annotations

import pytest

from towerdef.comms.event_bus import EventBus
from towerdef.config import Settings
from towerdef.simulation.engine import GameLoop
from towerdef.simulation.ids import IdGenerator
from towerdef.simulation.level import LevelConfig, get_level
from towerdef.simulation.store import EntityStore


def _strip_level_dict(waves=None, initial_gold=200, path=None) -> dict:
    """A 20-unit straight path along x with a build strip just north of it."""
    return {
        "level_id": 90,
        "name": "Test Strip",
        "path": path or [[-10, 0], [10, 0]],
        "buildable_areas": [{"center": [0, 4], "width": 20, "height": 4}],
        "waves": waves or [
            {"groups": [{"enemy_type": "basic", "count": 1, "spawn_delay": 1.0}], "wave_delay": 2},
        ],
        "initial_gold": initial_gold,
    }


@pytest.fixture
def cfg() -> Settings:
    """Settings with defaults only, ignoring any .env in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def bus() -> EventBus:
    return EventBus(maxsize=1000)


@pytest.fixture
def ids() -> IdGenerator:
    return IdGenerator()


@pytest.fixture
def store(bus, cfg) -> EntityStore:
    s = EntityStore(bus, cfg)
    s.set_phase("playing")
    return s


@pytest.fixture
def level1() -> LevelConfig:
    return get_level(1)


@pytest.fixture
def make_level():
    """Factory: ``make_level(waves=..., initial_gold=..., path=...)`` -> LevelConfig."""
    def _make(**kwargs) -> LevelConfig:
        return LevelConfig.from_dict(_strip_level_dict(**kwargs))
    return _make


@pytest.fixture
def strip_level(make_level) -> LevelConfig:
    return make_level()


@pytest.fixture
def loop(bus, cfg, ids) -> GameLoop:
    return GameLoop(event_bus=bus, config=cfg, ids=ids)

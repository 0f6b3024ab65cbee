"""LevelConfig: static level definitions: path, build areas and waves.

A level is authored as JSON and consumed read-only by the simulation.
Built-in levels ship as package data under ``towerdef/data/levels``;
``settings.levels_dir`` can point at a directory of additional or
overriding ``level<N>.json`` files.

Usage:
    level = get_level(1)
    loop.load_level(level)

JSON layout::

    {
      "level_id": 1,
      "name": "Green Valley",
      "path": [[-15, 0], [-5, 0], ...],
      "buildable_areas": [{"center": [-10, -5], "width": 10, "height": 10}],
      "waves": [
        {"groups": [{"enemy_type": "basic", "count": 10, "spawn_delay": 1.5}],
         "wave_delay": 10}
      ],
      "initial_gold": 120
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from towerdef.config import settings as _default_settings

from .entities import ENEMY_TYPES


@dataclass
class SpawnGroup:
    """A run of same-type enemies within a wave."""

    enemy_type: str  # "basic", "fast", "tank"
    count: int
    spawn_delay: float  # seconds between spawns in this group


@dataclass
class WaveConfig:
    """An ordered list of spawn groups plus the pause before the next wave."""

    groups: list[SpawnGroup]
    wave_delay: float = 0.0

    @property
    def total_count(self) -> int:
        return sum(g.count for g in self.groups)


@dataclass
class BuildableArea:
    """Axis-aligned rectangle where towers may be placed."""

    center: tuple[float, float]
    width: float
    height: float


@dataclass
class LevelConfig:
    """Complete level definition."""

    level_id: int
    name: str
    path: list[tuple[float, float]]
    waves: list[WaveConfig]
    buildable_areas: list[BuildableArea]
    initial_gold: int
    description: str = ""
    terrain_size: tuple[float, float] = (40.0, 40.0)
    tags: list[str] = field(default_factory=list)

    @property
    def start_position(self) -> tuple[float, float]:
        return self.path[0]

    @property
    def base_position(self) -> tuple[float, float]:
        return self.path[-1]

    @property
    def total_waves(self) -> int:
        return len(self.waves)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level_id": self.level_id,
            "name": self.name,
            "description": self.description,
            "terrain_size": list(self.terrain_size),
            "tags": self.tags,
            "path": [list(p) for p in self.path],
            "buildable_areas": [
                {"center": list(a.center), "width": a.width, "height": a.height}
                for a in self.buildable_areas
            ],
            "waves": [
                {
                    "groups": [
                        {
                            "enemy_type": g.enemy_type,
                            "count": g.count,
                            "spawn_delay": g.spawn_delay,
                        }
                        for g in w.groups
                    ],
                    "wave_delay": w.wave_delay,
                }
                for w in self.waves
            ],
            "initial_gold": self.initial_gold,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LevelConfig:
        """Build a LevelConfig from parsed JSON.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If the path is too short, a wave is empty, or an
                enemy type is unknown.
        """
        path = [_point(p) for p in data["path"]]
        if len(path) < 2:
            raise ValueError(f"Level {data.get('level_id')}: path needs at least 2 waypoints")

        waves = []
        for i, w in enumerate(data["waves"]):
            groups = []
            for g in w["groups"]:
                if g["enemy_type"] not in ENEMY_TYPES:
                    raise ValueError(f"Wave {i + 1}: unknown enemy type {g['enemy_type']!r}")
                if int(g["count"]) < 1:
                    raise ValueError(f"Wave {i + 1}: spawn group count must be positive")
                groups.append(SpawnGroup(
                    enemy_type=g["enemy_type"],
                    count=int(g["count"]),
                    spawn_delay=float(g["spawn_delay"]),
                ))
            if not groups:
                raise ValueError(f"Wave {i + 1}: no spawn groups")
            waves.append(WaveConfig(groups=groups, wave_delay=float(w.get("wave_delay", 0.0))))

        areas = [
            BuildableArea(
                center=_point(a["center"]),
                width=float(a["width"]),
                height=float(a["height"]),
            )
            for a in data.get("buildable_areas", [])
        ]

        return cls(
            level_id=int(data["level_id"]),
            name=data["name"],
            description=data.get("description", ""),
            terrain_size=_point(data.get("terrain_size", (40.0, 40.0))),
            tags=data.get("tags", []),
            path=path,
            waves=waves,
            buildable_areas=areas,
            initial_gold=int(data.get("initial_gold", _default_settings.default_gold)),
        )


def _point(raw) -> tuple[float, float]:
    """Accept ``[x, z]`` or ``{"x": .., "z": ..}``."""
    if isinstance(raw, dict):
        return (float(raw["x"]), float(raw["z"]))
    return (float(raw[0]), float(raw[1]))


def load_level(path: str | Path) -> LevelConfig:
    """Load a LevelConfig from a JSON file.

    Raises:
        FileNotFoundError: If path does not exist.
        json.JSONDecodeError: If file is not valid JSON.
        KeyError/ValueError: If required fields are missing or invalid.
    """
    with open(path) as f:
        data = json.load(f)
    return LevelConfig.from_dict(data)


def _builtin_files() -> dict[int, Any]:
    files = {}
    for entry in resources.files("towerdef").joinpath("data").joinpath("levels").iterdir():
        if entry.name.startswith("level") and entry.name.endswith(".json"):
            files[int(entry.name[len("level"):-len(".json")])] = entry
    return files


def list_levels(levels_dir: Path | None = None) -> list[int]:
    """Return the ids of all available levels, built-in and custom."""
    ids = set(_builtin_files())
    levels_dir = levels_dir if levels_dir is not None else _default_settings.levels_dir
    if levels_dir is not None and Path(levels_dir).is_dir():
        for p in Path(levels_dir).glob("level*.json"):
            suffix = p.stem[len("level"):]
            if suffix.isdigit():
                ids.add(int(suffix))
    return sorted(ids)


def get_level(level_id: int, levels_dir: Path | None = None) -> LevelConfig:
    """Return level *level_id*, preferring a custom file over the built-in one.

    Raises:
        KeyError: If no level with that id exists.
    """
    levels_dir = levels_dir if levels_dir is not None else _default_settings.levels_dir
    if levels_dir is not None:
        custom = Path(levels_dir) / f"level{level_id}.json"
        if custom.is_file():
            return load_level(custom)

    entry = _builtin_files().get(level_id)
    if entry is None:
        raise KeyError(f"Unknown level: {level_id}")
    return LevelConfig.from_dict(json.loads(entry.read_text()))

"""Unit tests for level definitions and the JSON level loader."""

from __future__ import annotations

import json

import pytest

from towerdef.simulation.level import LevelConfig, get_level, list_levels, load_level

pytestmark = pytest.mark.unit


def _write(path, data):
    path.write_text(json.dumps(data))
    return path


MINIMAL = {
    "level_id": 7,
    "name": "Tiny",
    "path": [[0, 0], [5, 0]],
    "buildable_areas": [{"center": {"x": 2, "z": 3}, "width": 4, "height": 2}],
    "waves": [{"groups": [{"enemy_type": "tank", "count": 2, "spawn_delay": 3}]}],
    "initial_gold": 60,
}


class TestBuiltinLevels:
    def test_list(self):
        assert {1, 2, 3} <= set(list_levels())

    def test_level1(self):
        level = get_level(1)
        assert level.name == "Green Valley"
        assert level.initial_gold == 120
        assert level.total_waves == 3
        assert level.start_position == (-15.0, 0.0)
        assert level.base_position == (15.0, 0.0)
        assert len(level.buildable_areas) == 3
        first = level.waves[0]
        assert first.wave_delay == 10.0
        assert first.total_count == 10
        assert first.groups[0].spawn_delay == 1.5

    @pytest.mark.parametrize("level_id,waves,gold", [(2, 4, 150), (3, 5, 200)])
    def test_later_levels(self, level_id, waves, gold):
        level = get_level(level_id)
        assert level.total_waves == waves
        assert level.initial_gold == gold

    def test_unknown(self):
        with pytest.raises(KeyError):
            get_level(42)


class TestLoadLevel:
    def test_minimal_file(self, tmp_path):
        level = load_level(_write(tmp_path / "tiny.json", MINIMAL))
        assert level.level_id == 7
        assert level.buildable_areas[0].center == (2.0, 3.0)
        assert level.waves[0].wave_delay == 0.0
        assert level.waves[0].groups[0].enemy_type == "tank"

    def test_default_gold(self, tmp_path):
        data = dict(MINIMAL)
        del data["initial_gold"]
        assert load_level(_write(tmp_path / "tiny.json", data)).initial_gold == 100

    def test_unknown_enemy_type(self, tmp_path):
        data = json.loads(json.dumps(MINIMAL))
        data["waves"][0]["groups"][0]["enemy_type"] = "dragon"
        with pytest.raises(ValueError):
            load_level(_write(tmp_path / "bad.json", data))

    def test_short_path(self, tmp_path):
        data = dict(MINIMAL, path=[[0, 0]])
        with pytest.raises(ValueError):
            load_level(_write(tmp_path / "bad.json", data))

    def test_empty_wave(self, tmp_path):
        data = dict(MINIMAL, waves=[{"groups": []}])
        with pytest.raises(ValueError):
            load_level(_write(tmp_path / "bad.json", data))

    def test_missing_path(self, tmp_path):
        data = dict(MINIMAL)
        del data["path"]
        with pytest.raises(KeyError):
            load_level(_write(tmp_path / "bad.json", data))

    def test_invalid_json(self, tmp_path):
        p = tmp_path / "broken.json"
        p.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            load_level(p)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_level(tmp_path / "nope.json")

    def test_to_dict_reloads_identically(self):
        level = get_level(3)
        assert LevelConfig.from_dict(level.to_dict()) == level


class TestCustomLevelsDir:
    def test_custom_level_listed_and_loaded(self, tmp_path):
        _write(tmp_path / "level7.json", MINIMAL)
        assert 7 in list_levels(tmp_path)
        assert get_level(7, tmp_path).name == "Tiny"

    def test_custom_file_overrides_builtin(self, tmp_path):
        _write(tmp_path / "level1.json", dict(MINIMAL, level_id=1))
        assert get_level(1, tmp_path).name == "Tiny"

"""Unit tests for Settings."""

from __future__ import annotations

import pytest

from towerdef.config import Settings

pytestmark = pytest.mark.unit


class TestSettings:
    def test_defaults(self, cfg):
        assert cfg.starting_lives == 20
        assert cfg.default_gold == 100
        assert cfg.placement_min_distance == 1.5
        assert cfg.projectile_max_travel == 100.0
        assert cfg.wave_health_step == 0.2
        assert cfg.tick_rate == 60
        assert cfg.levels_dir is None

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TOWERDEF_STARTING_LIVES", "5")
        monkeypatch.setenv("TOWERDEF_LEVELS_DIR", str(tmp_path))
        s = Settings(_env_file=None)
        assert s.starting_lives == 5
        assert s.levels_dir == tmp_path

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("TOWERDEF_MUZZLE_OFFSET=2.5\nUNRELATED=1\n")
        assert Settings(_env_file=env).muzzle_offset == 2.5

    def test_store_uses_starting_lives(self, monkeypatch):
        from towerdef.simulation.store import EntityStore

        monkeypatch.setenv("TOWERDEF_STARTING_LIVES", "3")
        assert EntityStore(config=Settings(_env_file=None)).lives == 3

"""Unit tests for MovementSystem: path following and escapes."""

from __future__ import annotations

import pytest

from towerdef.comms.event_bus import drain
from towerdef.simulation.entities import create_enemy
from towerdef.simulation.movement import MovementSystem

pytestmark = pytest.mark.unit

PATH = [(0.0, 0.0), (1.0, 0.0), (1.0, 5.0)]


class TestFollowPath:
    def test_moves_speed_times_dt(self, store):
        store.add_enemy(create_enemy("enemy-1", "basic", (0, 0)))
        MovementSystem().tick(store, [(0, 0), (10, 0)], 0.5)
        e = store.get_enemy("enemy-1")
        assert e.position == pytest.approx((0.5, 0.0))
        assert e.current_waypoint == 0
        assert e.heading == pytest.approx(90.0)

    def test_snaps_to_waypoint_and_drops_overshoot(self, store):
        e = create_enemy("enemy-1", "fast", (0, 0))  # speed 2
        store.add_enemy(e)
        MovementSystem().tick(store, PATH, 1.0)
        assert e.position == (1.0, 0.0)
        assert e.current_waypoint == 1

    def test_continues_on_next_segment(self, store):
        e = create_enemy("enemy-1", "basic", (1, 0))
        e.current_waypoint = 1
        store.add_enemy(e)
        MovementSystem().tick(store, PATH, 2.0)
        assert e.position == pytest.approx((1.0, 2.0))


class TestEscape:
    def test_escape_costs_lives_and_removes(self, store, bus):
        q = bus.subscribe("enemy_escaped")
        e = create_enemy("enemy-1", "tank", (1, 5))
        e.current_waypoint = 2
        store.add_enemy(e)
        MovementSystem(bus).tick(store, PATH, 0.1)
        assert store.lives == 18
        assert store.enemies == {}
        assert store.enemies_escaped == 1
        assert drain(q)[0]["data"]["damage"] == 2

    def test_escape_happens_tick_after_reaching_base(self, store):
        e = create_enemy("enemy-1", "basic", (1, 4.5))
        e.current_waypoint = 1
        store.add_enemy(e)
        mv = MovementSystem()
        mv.tick(store, PATH, 1.0)
        assert e.current_waypoint == 2
        assert store.get_enemy("enemy-1") is not None
        mv.tick(store, PATH, 1.0)
        assert store.get_enemy("enemy-1") is None

    def test_game_over_stops_processing(self, store):
        store.lives = 1
        for eid in ("enemy-1", "enemy-2"):
            e = create_enemy(eid, "basic", (1, 5))
            e.current_waypoint = 2
            store.add_enemy(e)
        MovementSystem().tick(store, PATH, 0.1)
        assert store.phase == "game_over"
        assert store.lives == 0
        assert list(store.enemies) == ["enemy-2"]

"""Tower, Enemy and Projectile: the three entity kinds of the simulation.

Architecture
------------
Entities are *flat dataclasses*.  Every tower type shares the same fields,
and so does every enemy type; type-specific numbers live in the lookup
tables below (_TOWER_PROFILES, _ENEMY_PROFILES) and type-specific behaviour
(hitscan vs. projectile) is decided by CombatResolver from the same tables.

Positions are ``(x, z)`` ground-plane tuples.  Elevation is a fixed
constant per entity kind and only matters to the renderer; all simulation
distances are measured on the ground plane.

Entities carry only *intrinsic* state.  Which enemy a tower shoots, where a
projectile is heading and when the next enemy spawns are all decided by the
systems each tick from the EntityStore.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

TOWER_ELEVATION = 0.5
ENEMY_ELEVATION = 0.5
PROJECTILE_ELEVATION = 1.5

MAX_TOWER_LEVEL = 3
UPGRADE_DAMAGE_MULT = 1.5
UPGRADE_RANGE_MULT = 1.2
UPGRADE_COST_GROWTH = 1.5

MUZZLE_FLASH_DURATION = 0.1   # seconds
LASER_BEAM_DURATION = 0.2     # seconds

TOWER_TYPES = ("cannon", "laser", "sniper")
ENEMY_TYPES = ("basic", "fast", "tank")
TARGET_MODES = ("first", "last", "strongest", "weakest")

# Tower stat profiles by type.
# Format: (damage, range, attack_speed, cost, upgrade_cost, target_mode)
_TOWER_PROFILES: dict[str, tuple[float, float, float, int, int, str]] = {
    "cannon": (20.0, 7.0,  0.8, 50, 75,  "first"),
    "laser":  (8.0,  5.0,  2.0, 40, 60,  "first"),
    "sniper": (50.0, 12.0, 0.3, 75, 100, "strongest"),
}

# Projectile speed by tower type.  Types absent here are hitscan.
_PROJECTILE_SPEEDS: dict[str, float] = {
    "cannon": 20.0,
    "sniper": 30.0,
}

# Enemy stat profiles by type.
# Format: (health, speed, damage, reward, size)
_ENEMY_PROFILES: dict[str, tuple[float, float, int, int, float]] = {
    "basic": (100.0, 1.0, 1, 10, 1.0),
    "fast":  (50.0,  2.0, 1, 15, 0.8),
    "tank":  (300.0, 0.6, 2, 25, 1.3),
}


def _pos_dict(pos: tuple[float, float]) -> dict:
    return {"x": pos[0], "z": pos[1]}


def distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Ground-plane Euclidean distance between two ``(x, z)`` points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def heading_to(src: tuple[float, float], dst: tuple[float, float]) -> float:
    """Heading in degrees from *src* toward *dst* (0 = +z, clockwise toward +x)."""
    return math.degrees(math.atan2(dst[0] - src[0], dst[1] - src[1]))


def tower_cost(tower_type: str) -> int:
    """Purchase price of a tower type.  Raises KeyError for unknown types."""
    return _TOWER_PROFILES[tower_type][3]


def is_hitscan(tower_type: str) -> bool:
    return tower_type not in _PROJECTILE_SPEEDS


def projectile_speed(tower_type: str) -> float:
    return _PROJECTILE_SPEEDS[tower_type]


@dataclass
class Tower:
    """A placed defensive tower.

    Lifecycle:
      placed (level 1) -> upgraded (level 2) -> upgraded (level 3, max)
      Towers are never destroyed in normal play; removal is an explicit action.
    """

    tower_id: str
    tower_type: str  # "cannon", "laser", "sniper"
    position: tuple[float, float]
    damage: float
    range: float
    attack_speed: float  # attacks per second
    cost: int
    upgrade_cost: int    # base price, scaled per level by get_upgrade_cost()
    target_mode: str = "first"
    level: int = 1
    last_attack_time: float | None = None  # sim clock of last shot, None = never fired

    # Cosmetic state, advanced by the tick
    heading: float = 0.0
    flash_remaining: float = 0.0
    beam_remaining: float = 0.0
    beam_end: tuple[float, float] | None = None

    @property
    def attack_interval(self) -> float:
        return 1.0 / self.attack_speed

    @property
    def is_max_level(self) -> bool:
        return self.level >= MAX_TOWER_LEVEL

    def can_attack(self, now: float) -> bool:
        """Check if the attack cooldown has elapsed at sim time *now*."""
        if self.last_attack_time is None:
            return True
        return (now - self.last_attack_time) >= self.attack_interval

    def to_dict(self) -> dict:
        return {
            "tower_id": self.tower_id,
            "tower_type": self.tower_type,
            "position": _pos_dict(self.position),
            "elevation": TOWER_ELEVATION,
            "damage": self.damage,
            "range": self.range,
            "attack_speed": self.attack_speed,
            "level": self.level,
            "cost": self.cost,
            "next_upgrade_cost": None if self.is_max_level else get_upgrade_cost(self),
            "target_mode": self.target_mode,
            "heading": self.heading,
            "muzzle_flash": self.flash_remaining > 0,
            "beam_opacity": round(self.beam_remaining / LASER_BEAM_DURATION, 3),
            "beam_end": _pos_dict(self.beam_end) if self.beam_end else None,
        }


@dataclass
class Enemy:
    """A single enemy walking the level path toward the base."""

    enemy_id: str
    enemy_type: str  # "basic", "fast", "tank"
    position: tuple[float, float]
    health: float
    max_health: float
    speed: float     # units/second
    damage: int      # lives lost if this enemy reaches the base
    reward: int      # gold credited on kill
    size: float
    current_waypoint: int = 0
    heading: float = 0.0

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def to_dict(self) -> dict:
        return {
            "enemy_id": self.enemy_id,
            "enemy_type": self.enemy_type,
            "position": _pos_dict(self.position),
            "elevation": ENEMY_ELEVATION,
            "health": round(self.health, 1),
            "max_health": round(self.max_health, 1),
            "speed": self.speed,
            "current_waypoint": self.current_waypoint,
            "size": self.size,
            "heading": self.heading,
        }


@dataclass
class Projectile:
    """A projectile in flight.  Direction is fixed at spawn (no homing)."""

    projectile_id: str
    position: tuple[float, float]
    origin: tuple[float, float]
    direction: tuple[float, float]  # unit vector
    speed: float
    damage: float
    tower_id: str
    target_id: str | None = None
    traveled: float = 0.0

    def to_dict(self) -> dict:
        return {
            "projectile_id": self.projectile_id,
            "position": _pos_dict(self.position),
            "elevation": PROJECTILE_ELEVATION,
            "direction": _pos_dict(self.direction),
            "speed": self.speed,
            "damage": self.damage,
            "tower_id": self.tower_id,
            "target_id": self.target_id,
        }


def create_tower(tower_id: str, tower_type: str,
                 position: tuple[float, float]) -> Tower:
    """Build a level-1 tower from its type profile.  Raises KeyError for unknown types."""
    damage, rng, attack_speed, cost, upgrade_cost, mode = _TOWER_PROFILES[tower_type]
    return Tower(
        tower_id=tower_id,
        tower_type=tower_type,
        position=(float(position[0]), float(position[1])),
        damage=damage,
        range=rng,
        attack_speed=attack_speed,
        cost=cost,
        upgrade_cost=upgrade_cost,
        target_mode=mode,
    )


def create_enemy(enemy_id: str, enemy_type: str, position: tuple[float, float],
                 wave_multiplier: float = 1.0) -> Enemy:
    """Build an enemy from its type profile with health scaled by *wave_multiplier*."""
    health, speed, damage, reward, size = _ENEMY_PROFILES[enemy_type]
    scaled = float(math.floor(health * wave_multiplier))
    return Enemy(
        enemy_id=enemy_id,
        enemy_type=enemy_type,
        position=(float(position[0]), float(position[1])),
        health=scaled,
        max_health=scaled,
        speed=speed,
        damage=damage,
        reward=reward,
        size=size,
    )


def get_upgrade_cost(tower: Tower) -> int:
    """Price of the tower's next upgrade: base × 1.5^(level-1), floored."""
    return int(math.floor(tower.upgrade_cost * UPGRADE_COST_GROWTH ** (tower.level - 1)))

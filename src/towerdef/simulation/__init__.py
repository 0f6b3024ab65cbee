"""Simulation subsystem: entity store, systems, levels and the game loop."""
from .combat import CombatResolver
from .engine import GameLoop
from .entities import Enemy, Projectile, Tower, create_enemy, create_tower, get_upgrade_cost
from .ids import IdGenerator
from .level import BuildableArea, LevelConfig, SpawnGroup, WaveConfig, get_level, list_levels, load_level
from .movement import MovementSystem
from .placement import is_valid_tower_position, snap_to_grid
from .projectiles import ProjectileSystem
from .store import EntityStore
from .targeting import get_target_enemy
from .waves import WaveScheduler

__all__ = [
    "BuildableArea",
    "CombatResolver",
    "Enemy",
    "EntityStore",
    "GameLoop",
    "IdGenerator",
    "LevelConfig",
    "MovementSystem",
    "Projectile",
    "ProjectileSystem",
    "SpawnGroup",
    "Tower",
    "WaveConfig",
    "WaveScheduler",
    "create_enemy",
    "create_tower",
    "get_level",
    "get_target_enemy",
    "get_upgrade_cost",
    "is_valid_tower_position",
    "list_levels",
    "load_level",
    "snap_to_grid",
]

"""Configuration management using Pydantic settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Simulation settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TOWERDEF_",
        case_sensitive=False,
        extra="ignore",
    )

    # Session
    starting_lives: int = 20
    default_gold: int = 100

    # Placement
    placement_min_distance: float = 1.5

    # Combat
    muzzle_offset: float = 1.5          # projectile spawn distance from tower center
    hit_radius_scale: float = 1.5       # hit radius = enemy size * scale
    projectile_max_travel: float = 100.0

    # Waves
    wave_health_step: float = 0.2       # +20% enemy health per completed wave

    # Headless runner
    tick_rate: int = 60
    max_run_seconds: float = 900.0

    # Logging
    log_level: str = "INFO"

    # Extra directory searched for level JSON files (level<N>.json)
    levels_dir: Optional[Path] = None


settings = Settings()

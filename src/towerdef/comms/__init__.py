"""Outbound messaging for simulation collaborators."""
from .event_bus import EventBus, drain

__all__ = ["EventBus", "drain"]

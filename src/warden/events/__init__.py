"""Warden permission-change events."""

from warden.events.bus import EventBus
from warden.events.types import EventType

__all__ = ["EventBus", "EventType"]

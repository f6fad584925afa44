"""Async event bus carrying permission-change notifications from the host."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from warden.events.types import PRINCIPAL_CHANGE_EVENTS, EventType

logger = logging.getLogger(__name__)

Listener = Callable[[EventType, dict[str, Any]], Coroutine[Any, Any, None]]


class EventBus:
    """Pub/sub bus; listener failures are logged and never reach the emitter."""

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[Listener]] = defaultdict(list)

    def on(self, event_types: EventType | Iterable[EventType], listener: Listener) -> None:
        """Register a listener for one or more event types."""
        if isinstance(event_types, EventType):
            event_types = (event_types,)
        for event_type in event_types:
            if listener not in self._listeners[event_type]:
                self._listeners[event_type].append(listener)

    def off(self, event_type: EventType, listener: Listener) -> None:
        """Remove a listener."""
        if listener in self._listeners[event_type]:
            self._listeners[event_type].remove(listener)

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))

    async def emit(self, event_type: EventType, data: dict[str, Any] | None = None) -> None:
        """Emit an event to all registered listeners."""
        data = data or {}
        for listener in list(self._listeners.get(event_type, [])):
            try:
                await listener(event_type, data)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error in event listener for %s", event_type)

    async def principal_changed(
        self, event_type: EventType, principal_id: str, **data: Any
    ) -> None:
        """Announce that one of a principal's permission inputs changed."""
        if event_type not in PRINCIPAL_CHANGE_EVENTS:
            raise ValueError(f"Not a principal change event: {event_type}")
        await self.emit(event_type, {"principal_id": principal_id, **data})

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()

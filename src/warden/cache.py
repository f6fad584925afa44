"""Bounded cache of effective grant tables with event-driven invalidation."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from warden.config import Config
from warden.core.merger import EffectiveGrantTable
from warden.events.bus import EventBus
from warden.events.types import PRINCIPAL_CHANGE_EVENTS, EventType

logger = logging.getLogger(__name__)

# First element is always the principal id
CacheKey = tuple[Any, ...]


class GrantTableCache:
    """LRU cache of grant tables keyed by principal id plus evaluation inputs.

    Keys carry the whole principal state, so a changed state never reuses an
    old table. ``invalidate`` drops the superseded entries of a principal;
    ``attach`` does so automatically for change events on an ``EventBus``.
    """

    def __init__(self, max_entries: int = 1024) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[CacheKey, EffectiveGrantTable] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_config(cls, config: Config) -> GrantTableCache:
        return cls(max_entries=config.cache_max_entries)

    def get_or_build(
        self, key: CacheKey, build: Callable[[], EffectiveGrantTable]
    ) -> EffectiveGrantTable:
        with self._lock:
            table = self._entries.get(key)
            if table is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return table
            self.misses += 1

        table = build()

        with self._lock:
            self._entries[key] = table
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted grant table for %s", evicted[0])
        return table

    def invalidate(self, principal_id: str) -> int:
        """Drop every cached table for a principal; returns how many were removed."""
        with self._lock:
            stale = [k for k in self._entries if k[0] == principal_id]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Invalidated %d grant table(s) for %s", len(stale), principal_id)
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def attach(self, bus: EventBus) -> None:
        """Invalidate on permission-change events published on ``bus``."""
        bus.on(PRINCIPAL_CHANGE_EVENTS, self._on_principal_change)
        bus.on(EventType.CATALOG_RELOADED, self._on_catalog_reload)

    async def _on_principal_change(self, event_type: EventType, data: dict[str, Any]) -> None:
        principal_id = data.get("principal_id")
        if not principal_id:
            logger.warning("%s event without principal_id; clearing cache", event_type)
            self.clear()
            return
        self.invalidate(principal_id)

    async def _on_catalog_reload(self, event_type: EventType, data: dict[str, Any]) -> None:
        logger.info("Catalog reloaded; clearing %d cached grant table(s)", len(self))
        self.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

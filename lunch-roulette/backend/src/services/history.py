from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from models import HistoryEntry, Location


class SelectionHistoryStore:
    """In-memory, append-only selection log keyed by group.

    Appends are serialised so concurrent picks for the same group see a
    consistent log when computing recency penalties.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: Dict[str, List[HistoryEntry]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get_history(self, group_id: str, since: Optional[float] = None) -> List[HistoryEntry]:
        if not group_id:
            return []
        with self._lock:
            entries = list(self._entries.get(group_id, []))
        if since is not None:
            entries = [e for e in entries if e.timestamp > since]
        return entries

    def record(
        self,
        group_id: str,
        restaurant_id: str,
        *,
        timestamp: Optional[int] = None,
        now: Optional[float] = None,
        selected_by: Optional[str] = None,
        coordinates: Optional[Location] = None,
        radius: Optional[float] = None,
        dietary_restrictions: Iterable[str] = (),
        price_range: Iterable[str] = (),
    ) -> HistoryEntry:
        if not group_id:
            raise ValueError("group_id is required to record a selection")
        if not restaurant_id:
            raise ValueError("restaurant_id is required to record a selection")

        # Future check uses the caller's clock when one is passed.
        now = int(self._clock() if now is None else now)
        ts = now if timestamp is None else int(timestamp)
        if ts > now:
            raise ValueError(f"history timestamp {ts} is in the future")

        entry = HistoryEntry(
            restaurant_id=restaurant_id,
            timestamp=ts,
            group_id=group_id,
            selected_by=selected_by,
            coordinates=coordinates,
            radius=radius,
            dietary_restrictions=tuple(sorted(dietary_restrictions)),
            price_range=tuple(sorted(price_range)),
        )
        with self._lock:
            self._entries.setdefault(group_id, []).append(entry)
        logger.info("history recorded group={} restaurant={} ts={}", group_id, restaurant_id, ts)
        return entry

    def reset(self, group_id: str) -> None:
        """Clear a group's history."""
        if not group_id:
            return
        with self._lock:
            self._entries.pop(group_id, None)

    def groups(self) -> List[str]:
        with self._lock:
            return list(self._entries)


# Global singleton
history_store = SelectionHistoryStore()

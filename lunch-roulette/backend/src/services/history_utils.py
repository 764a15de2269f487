from __future__ import annotations

from typing import List, Optional

from models import HistoryEntry, ScoredCandidate, SelectionConstraints
from services.history import SelectionHistoryStore, history_store


def fetch_recent_history(
    group_id: Optional[str],
    now: float,
    window_sec: float,
    store: SelectionHistoryStore = history_store,
) -> List[HistoryEntry]:
    """Return entries inside the lookback window, or [] without a group."""
    if not group_id:
        return []
    return store.get_history(group_id, since=now - window_sec)


def record_selection(
    group_id: Optional[str],
    candidate: ScoredCandidate,
    constraints: SelectionConstraints,
    *,
    selected_by: Optional[str] = None,
    now: Optional[float] = None,
    store: SelectionHistoryStore = history_store,
) -> Optional[HistoryEntry]:
    """Append the pick to the group's history if a group is supplied."""
    if not group_id:
        return None
    return store.record(
        group_id,
        candidate.restaurant.id,
        timestamp=None if now is None else int(now),
        now=now,
        selected_by=selected_by,
        coordinates=constraints.location,
        radius=constraints.radius,
        dietary_restrictions=constraints.dietary_restrictions,
        price_range=constraints.price_range,
    )

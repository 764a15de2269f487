"""Utility helpers for the lunch roulette backend."""

from __future__ import annotations

import math
from typing import Iterable, Optional

KM_PER_MILE = 1.609344
SECONDS_PER_DAY = 24 * 60 * 60


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers."""
    R = 6371.0
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return R * c


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return haversine_km(lat1, lon1, lat2, lon2) / KM_PER_MILE


def normalize_tags(values: Optional[Iterable[object]]) -> frozenset[str]:
    """Lower-case, strip and dedupe a tag collection; ``None`` means empty."""
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    return frozenset(s for s in (str(v).strip().lower() for v in values) if s)


def normalize_ids(values: Optional[Iterable[object]]) -> frozenset[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    return frozenset(s for s in (str(v).strip() for v in values) if s)

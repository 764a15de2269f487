from __future__ import annotations

import time
from typing import Callable, Iterable, List, Sequence

from loguru import logger

from models import HistoryEntry, Restaurant, ScoredCandidate, SelectionConstraints
from services.scoring import (
    RECENCY_PENALTY,
    RECENCY_WINDOW_SEC,
    eligible_candidates,
    score_candidates,
)


def rank_candidates(candidates: Iterable[ScoredCandidate], limit: int) -> List[ScoredCandidate]:
    """Highest score first; equal scores keep their input order. ``limit <= 0`` yields []."""
    if limit <= 0:
        return []
    return sorted(candidates, key=lambda c: c.score, reverse=True)[:limit]


def recommend_candidates(
    constraints: SelectionConstraints,
    restaurants: Iterable[Restaurant],
    history: Sequence[HistoryEntry] = (),
    *,
    limit: int = 5,
    clock: Callable[[], float] = time.time,
    recency_window_sec: float = RECENCY_WINDOW_SEC,
    recency_penalty: float = RECENCY_PENALTY,
) -> List[ScoredCandidate]:
    scored = score_candidates(
        constraints,
        restaurants,
        history,
        clock=clock,
        recency_window_sec=recency_window_sec,
        recency_penalty=recency_penalty,
    )
    ranked = rank_candidates(eligible_candidates(scored, constraints.radius), limit)
    logger.debug("recommend limit={} returned={}", limit, len(ranked))
    return ranked


def recommend_restaurants(
    constraints: SelectionConstraints,
    restaurants: Iterable[Restaurant],
    history: Sequence[HistoryEntry] = (),
    **kwargs,
) -> List[Restaurant]:
    return [c.restaurant for c in recommend_candidates(constraints, restaurants, history, **kwargs)]

from __future__ import annotations

import random
import time
from typing import Callable, Iterable, Optional, Sequence

from loguru import logger

from errors import NoEligibleCandidates
from models import HistoryEntry, Restaurant, ScoredCandidate, SelectionConstraints
from services.scoring import (
    RECENCY_PENALTY,
    RECENCY_WINDOW_SEC,
    eligible_candidates,
    score_candidates,
)


def pick_weighted(candidates: Sequence[ScoredCandidate], rng: random.Random) -> ScoredCandidate:
    """Draw one candidate with probability ``score / total``.

    Walks the list subtracting each score from a uniform draw in
    ``[0, total)`` and stops at the first candidate where the remainder drops
    to zero or below. Falls back to the first candidate if rounding leaves
    the remainder positive after the last one.
    """
    if not candidates:
        raise NoEligibleCandidates()

    total = sum(c.score for c in candidates)
    remainder = rng.random() * total
    for candidate in candidates:
        remainder -= candidate.score
        if remainder <= 0:
            return candidate
    return candidates[0]


def select_candidate(
    constraints: SelectionConstraints,
    restaurants: Iterable[Restaurant],
    history: Sequence[HistoryEntry] = (),
    *,
    rng: Optional[random.Random] = None,
    clock: Callable[[], float] = time.time,
    recency_window_sec: float = RECENCY_WINDOW_SEC,
    recency_penalty: float = RECENCY_PENALTY,
) -> ScoredCandidate:
    """Score, filter and pick one restaurant.

    Recording the pick in the group's history is left to the caller.
    """
    scored = score_candidates(
        constraints,
        restaurants,
        history,
        clock=clock,
        recency_window_sec=recency_window_sec,
        recency_penalty=recency_penalty,
    )
    eligible = eligible_candidates(scored, constraints.radius)
    if not eligible:
        raise NoEligibleCandidates(considered=len(scored))

    eligible.sort(key=lambda c: c.score, reverse=True)
    picked = pick_weighted(eligible, rng or random.Random())
    logger.info(
        "picked restaurant={} score={:.2f} distance_miles={:.2f} eligible={}",
        picked.restaurant.id,
        picked.score,
        picked.distance_miles,
        len(eligible),
    )
    return picked


def select_restaurant(
    constraints: SelectionConstraints,
    restaurants: Iterable[Restaurant],
    history: Sequence[HistoryEntry] = (),
    **kwargs,
) -> Restaurant:
    return select_candidate(constraints, restaurants, history, **kwargs).restaurant

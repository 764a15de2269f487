from __future__ import annotations

import time
from typing import Callable, Iterable, List, Optional, Sequence

from loguru import logger

from models import HistoryEntry, Restaurant, ScoredCandidate, SelectionConstraints
from services.geo_filter import filter_within_radius
from utils import SECONDS_PER_DAY


BASE_SCORE = 100.0
# Ratings are scaled to [0, 1] and then given a flat 20% boost.
RATING_BOOST = 1.2
RECENCY_WINDOW_SEC = 7 * SECONDS_PER_DAY
RECENCY_PENALTY = 0.5


def _distance_factor(distance: float, radius: float) -> float:
    # Stale distances beyond the radius would flip the factor negative.
    if distance > radius:
        return 0.0
    return max(0.0, 1.0 - distance / radius)


def _rating_factor(rating: float) -> float:
    return (rating / 5.0) * RATING_BOOST


def _price_ok(restaurant: Restaurant, constraints: SelectionConstraints) -> bool:
    if not constraints.price_range:
        return True
    return str(restaurant.price_level) in constraints.price_range


def _missing_dietary(restaurant: Restaurant, constraints: SelectionConstraints) -> List[str]:
    if not constraints.dietary_restrictions:
        return []
    offered = {opt.strip().lower() for opt in restaurant.dietary_options if opt}
    return sorted(r for r in constraints.dietary_restrictions if r not in offered)


def last_selected_at(restaurant_id: str, history: Iterable[HistoryEntry]) -> Optional[int]:
    """Timestamp of the most recent pick of ``restaurant_id``, if any."""
    latest: Optional[int] = None
    for entry in history:
        if entry.restaurant_id != restaurant_id:
            continue
        if latest is None or entry.timestamp > latest:
            latest = entry.timestamp
    return latest


def _evaluate(
    restaurant: Restaurant,
    distance: float,
    constraints: SelectionConstraints,
    history: Sequence[HistoryEntry],
    *,
    now: float,
    recency_window_sec: float,
    recency_penalty: float,
) -> ScoredCandidate:
    debug_scores: dict[str, float] = {}
    vetoes: list[str] = []
    score = BASE_SCORE

    distance_factor = _distance_factor(distance, constraints.radius)
    if distance > constraints.radius:
        vetoes.append("outside_radius")
    score *= distance_factor
    debug_scores["distance"] = round(distance_factor, 4)

    rating_factor = _rating_factor(restaurant.rating)
    score *= rating_factor
    debug_scores["rating"] = round(rating_factor, 4)

    if not _price_ok(restaurant, constraints):
        score = 0.0
        vetoes.append("price_range")

    if _missing_dietary(restaurant, constraints):
        score = 0.0
        vetoes.append("dietary")

    recency_factor = 1.0
    last_pick = last_selected_at(restaurant.id, history)
    if last_pick is not None and now - last_pick < recency_window_sec:
        recency_factor = recency_penalty
        score *= recency_factor
    debug_scores["recency"] = recency_factor

    if restaurant.id in constraints.exclude_restaurants:
        score = 0.0
        vetoes.append("excluded")

    return ScoredCandidate(
        restaurant=restaurant,
        score=max(0.0, score),
        distance_miles=distance,
        debug_scores=debug_scores,
        vetoes=vetoes,
    )


def score_candidate(
    restaurant: Restaurant,
    distance_miles: float,
    constraints: SelectionConstraints,
    history: Sequence[HistoryEntry] = (),
    *,
    now: float,
    recency_window_sec: float = RECENCY_WINDOW_SEC,
    recency_penalty: float = RECENCY_PENALTY,
) -> float:
    """Desirability of one restaurant; 0 means ineligible."""
    return _evaluate(
        restaurant,
        distance_miles,
        constraints,
        history,
        now=now,
        recency_window_sec=recency_window_sec,
        recency_penalty=recency_penalty,
    ).score


def score_candidates(
    constraints: SelectionConstraints,
    restaurants: Iterable[Restaurant],
    history: Sequence[HistoryEntry] = (),
    *,
    clock: Callable[[], float] = time.time,
    recency_window_sec: float = RECENCY_WINDOW_SEC,
    recency_penalty: float = RECENCY_PENALTY,
) -> List[ScoredCandidate]:
    """Geo-filter ``restaurants`` and score every survivor against one ``now``.

    Zero-scored candidates are kept (with their vetoes) so callers can report
    why something was dropped; use :func:`eligible_candidates` before sampling.
    """
    within = filter_within_radius(constraints.location, constraints.radius, restaurants)
    history = list(history)
    now = clock()

    scored = [
        _evaluate(
            restaurant,
            dist,
            constraints,
            history,
            now=now,
            recency_window_sec=recency_window_sec,
            recency_penalty=recency_penalty,
        )
        for restaurant, dist in within
    ]
    logger.debug(
        "scored within_radius={} eligible={} history={} radius_miles={:.2f}",
        len(scored),
        sum(1 for c in scored if c.score > 0),
        len(history),
        constraints.radius,
    )
    return scored


def eligible_candidates(scored: Iterable[ScoredCandidate], radius: float) -> List[ScoredCandidate]:
    return [c for c in scored if c.eligible and c.distance_miles <= radius]

from __future__ import annotations

import pytest

from errors import InvalidConstraint
from factories import make_constraints, make_restaurant
from models import HistoryEntry
from services.scoring import (
    eligible_candidates,
    last_selected_at,
    score_candidate,
    score_candidates,
)
from utils import SECONDS_PER_DAY

NOW = 1_700_000_000


def test_baseline_scenario() -> None:
    restaurant = make_restaurant(rating=4.0, price_level=2)
    constraints = make_constraints(radius=5.0, price_range={"2"})
    score = score_candidate(restaurant, 2.0, constraints, now=NOW)
    assert score == pytest.approx(57.6)


def test_price_tier_not_accepted_is_vetoed() -> None:
    restaurant = make_restaurant(rating=4.0, price_level=2)
    constraints = make_constraints(radius=5.0, price_range={"3", "4"})
    assert score_candidate(restaurant, 2.0, constraints, now=NOW) == 0.0


def test_price_tiers_accept_ints_and_strings() -> None:
    restaurant = make_restaurant(price_level=3)
    assert score_candidate(restaurant, 1.0, make_constraints(price_range=[3]), now=NOW) > 0
    assert score_candidate(restaurant, 1.0, make_constraints(price_range=["3"]), now=NOW) > 0


def test_recent_selection_halves_score() -> None:
    restaurant = make_restaurant("r1", rating=4.0, price_level=2)
    constraints = make_constraints(radius=5.0, price_range={"2"})
    history = [HistoryEntry(restaurant_id="r1", timestamp=NOW - 3 * SECONDS_PER_DAY)]
    assert score_candidate(restaurant, 2.0, constraints, history, now=NOW) == pytest.approx(28.8)


def test_recency_window_boundaries() -> None:
    restaurant = make_restaurant("r1", rating=4.0)
    constraints = make_constraints(radius=5.0)
    week = 7 * SECONDS_PER_DAY

    just_inside = [HistoryEntry(restaurant_id="r1", timestamp=NOW - (week - 1))]
    just_outside = [HistoryEntry(restaurant_id="r1", timestamp=NOW - (week + 1))]

    assert score_candidate(restaurant, 2.0, constraints, just_inside, now=NOW) == pytest.approx(28.8)
    assert score_candidate(restaurant, 2.0, constraints, just_outside, now=NOW) == pytest.approx(57.6)


def test_only_most_recent_matching_entry_counts() -> None:
    history = [
        HistoryEntry(restaurant_id="r1", timestamp=NOW - 30 * SECONDS_PER_DAY),
        HistoryEntry(restaurant_id="r1", timestamp=NOW - 2 * SECONDS_PER_DAY),
        HistoryEntry(restaurant_id="other", timestamp=NOW - 60),
    ]
    assert last_selected_at("r1", history) == NOW - 2 * SECONDS_PER_DAY
    assert last_selected_at("missing", history) is None

    restaurant = make_restaurant("r1", rating=4.0)
    score = score_candidate(restaurant, 2.0, make_constraints(), history, now=NOW)
    assert score == pytest.approx(28.8)


def test_history_for_other_restaurants_is_ignored() -> None:
    history = [HistoryEntry(restaurant_id="other", timestamp=NOW - 60)]
    restaurant = make_restaurant("r1", rating=4.0)
    assert score_candidate(restaurant, 2.0, make_constraints(), history, now=NOW) == pytest.approx(57.6)


def test_dietary_requires_every_tag() -> None:
    restaurant = make_restaurant(dietary_options=["Vegan", "gluten-free"])

    all_present = make_constraints(dietary_restrictions=["vegan", "Gluten-Free"])
    partial = make_constraints(dietary_restrictions=["vegan", "halal"])

    assert score_candidate(restaurant, 1.0, all_present, now=NOW) > 0
    assert score_candidate(restaurant, 1.0, partial, now=NOW) == 0.0


def test_exclusion_overrides_everything() -> None:
    restaurant = make_restaurant("r1", rating=5.0)
    constraints = make_constraints(exclude_restaurants=["r1"])
    scored = score_candidates(constraints, [restaurant], clock=lambda: NOW)
    assert scored[0].score == 0.0
    assert scored[0].vetoes == ["excluded"]


def test_stale_distance_beyond_radius_never_goes_negative() -> None:
    restaurant = make_restaurant(rating=5.0)
    assert score_candidate(restaurant, 7.5, make_constraints(radius=5.0), now=NOW) == 0.0


def test_scores_are_never_negative() -> None:
    restaurants = [
        make_restaurant(f"r{i}", miles=0.5 * i, rating=float(i % 6), price_level=1 + i % 4)
        for i in range(12)
    ]
    constraints = make_constraints(radius=4.0, price_range={"1", "2"})
    scored = score_candidates(constraints, restaurants, clock=lambda: NOW)
    assert scored
    assert all(c.score >= 0 for c in scored)
    assert all(c.score == 0 for c in scored if c.restaurant.price_level not in (1, 2))


def test_geo_filter_runs_before_scoring() -> None:
    near = make_restaurant("near", miles=1.0)
    far = make_restaurant("far", miles=6.0)
    scored = score_candidates(make_constraints(radius=5.0), [near, far], clock=lambda: NOW)
    assert [c.restaurant.id for c in scored] == ["near"]
    assert scored[0].distance_miles == pytest.approx(1.0, abs=1e-6)


def test_scoring_is_deterministic_for_fixed_now() -> None:
    restaurants = [make_restaurant(f"r{i}", miles=0.4 * i + 0.1, rating=3.0 + i * 0.3) for i in range(5)]
    history = [HistoryEntry(restaurant_id="r2", timestamp=NOW - 100)]
    constraints = make_constraints()

    first = score_candidates(constraints, restaurants, history, clock=lambda: NOW)
    second = score_candidates(constraints, restaurants, history, clock=lambda: NOW)
    assert [(c.restaurant.id, c.score) for c in first] == [(c.restaurant.id, c.score) for c in second]


def test_eligible_candidates_drops_zero_scores() -> None:
    keep = make_restaurant("keep", price_level=2)
    veto = make_restaurant("veto", price_level=4)
    constraints = make_constraints(price_range={"2"})
    scored = score_candidates(constraints, [keep, veto], clock=lambda: NOW)
    assert len(scored) == 2
    assert [c.restaurant.id for c in eligible_candidates(scored, constraints.radius)] == ["keep"]
    assert scored[1].vetoes == ["price_range"]


def test_invalid_radius_is_rejected_before_scoring() -> None:
    with pytest.raises(InvalidConstraint):
        make_constraints(radius=0)
    with pytest.raises(InvalidConstraint):
        make_constraints(radius="far")


def test_exclusion_wins_over_recency_penalty() -> None:
    restaurant = make_restaurant("r1", rating=4.0)
    history = [HistoryEntry(restaurant_id="r1", timestamp=NOW - SECONDS_PER_DAY)]
    constraints = make_constraints(exclude_restaurants=["r1"])
    scored = score_candidates(constraints, [restaurant], history, clock=lambda: NOW)
    assert scored[0].score == 0.0
    assert scored[0].vetoes == ["excluded"]
    assert scored[0].debug_scores["recency"] == 0.5


def test_price_veto_stays_zero_with_recent_history() -> None:
    restaurant = make_restaurant("r1", price_level=2)
    history = [HistoryEntry(restaurant_id="r1", timestamp=NOW - 60)]
    constraints = make_constraints(price_range={"3", "4"})
    scored = score_candidates(constraints, [restaurant], history, clock=lambda: NOW)
    assert scored[0].score == 0.0
    assert scored[0].vetoes == ["price_range"]
    assert eligible_candidates(scored, constraints.radius) == []

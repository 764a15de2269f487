from __future__ import annotations

from typing import Iterable, List, Tuple

from errors import InvalidConstraint
from models import Location, Restaurant
from utils import haversine_miles


def distance_miles(origin: Location, restaurant: Restaurant) -> float:
    return haversine_miles(origin.lat, origin.lon, restaurant.location.lat, restaurant.location.lon)


def filter_within_radius(
    origin: Location,
    radius_miles: float,
    restaurants: Iterable[Restaurant],
) -> List[Tuple[Restaurant, float]]:
    """Keep restaurants within ``radius_miles`` of ``origin``, paired with their distance.

    Input order is preserved. The returned distances are reused by the scorer.
    """
    if not radius_miles > 0:
        raise InvalidConstraint(f"radius must be > 0, got {radius_miles!r}")

    within: list[tuple[Restaurant, float]] = []
    for restaurant in restaurants:
        dist = distance_miles(origin, restaurant)
        if dist <= radius_miles:
            within.append((restaurant, dist))
    return within

"""Data models for the lunch roulette selection engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from errors import InvalidConstraint
from utils import normalize_ids, normalize_tags

PRICE_LEVELS = (1, 2, 3, 4)


@dataclass(frozen=True)
class Location:
    lat: float
    lon: float
    address: Optional[str] = None


@dataclass(frozen=True)
class OperatingHours:
    day: int  # 0 = Sunday
    open: str  # "HH:MM"
    close: str


@dataclass
class Restaurant:
    id: str
    name: str
    location: Location
    price_level: int
    rating: float
    cuisine: list[str] = field(default_factory=list)
    review_count: int = 0
    dietary_options: list[str] = field(default_factory=list)
    operating_hours: list[OperatingHours] = field(default_factory=list)
    place_id: Optional[str] = None
    website: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.price_level not in PRICE_LEVELS:
            raise ValueError(f"price_level must be one of {PRICE_LEVELS}, got {self.price_level!r}")
        if not 0.0 <= self.rating <= 5.0:
            raise ValueError(f"rating must be within [0, 5], got {self.rating!r}")
        if self.review_count < 0:
            raise ValueError("review_count must be non-negative")


@dataclass(frozen=True)
class SelectionConstraints:
    """Search parameters for one selection request.

    Collections are always present (possibly empty). Price tiers are compared
    as strings so ``2`` and ``"2"`` name the same tier; dietary tags are
    compared case-insensitively.
    """

    location: Location
    radius: float  # miles
    dietary_restrictions: frozenset[str] = frozenset()
    price_range: frozenset[str] = frozenset()
    exclude_restaurants: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        try:
            radius = float(self.radius)
        except (TypeError, ValueError):
            raise InvalidConstraint(f"radius must be a number, got {self.radius!r}") from None
        if math.isnan(radius) or radius <= 0:
            raise InvalidConstraint(f"radius must be > 0, got {self.radius!r}")
        object.__setattr__(self, "radius", radius)
        object.__setattr__(self, "dietary_restrictions", normalize_tags(self.dietary_restrictions))
        object.__setattr__(self, "price_range", normalize_ids(self.price_range))
        object.__setattr__(self, "exclude_restaurants", normalize_ids(self.exclude_restaurants))

    @classmethod
    def build(
        cls,
        lat: float,
        lon: float,
        radius: float,
        *,
        dietary_restrictions: Optional[Iterable[str]] = None,
        price_range: Optional[Iterable[object]] = None,
        exclude_restaurants: Optional[Iterable[str]] = None,
    ) -> "SelectionConstraints":
        return cls(
            location=Location(lat=lat, lon=lon),
            radius=radius,
            dietary_restrictions=dietary_restrictions,  # type: ignore[arg-type]
            price_range=price_range,  # type: ignore[arg-type]
            exclude_restaurants=exclude_restaurants,  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class HistoryEntry:
    restaurant_id: str
    timestamp: int  # UTC epoch seconds
    group_id: Optional[str] = None
    selected_by: Optional[str] = None
    coordinates: Optional[Location] = None
    radius: Optional[float] = None
    dietary_restrictions: tuple[str, ...] = ()
    price_range: tuple[str, ...] = ()


@dataclass
class ScoredCandidate:
    restaurant: Restaurant
    score: float
    distance_miles: float
    debug_scores: Dict[str, float] = field(default_factory=dict)
    vetoes: list[str] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return self.score > 0

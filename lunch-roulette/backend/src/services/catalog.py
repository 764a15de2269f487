"""Load the restaurant catalog from an exported JSON document dump."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from loguru import logger

from models import Location, OperatingHours, Restaurant


def _parse_location(raw: Any) -> Location:
    if not isinstance(raw, dict):
        raise ValueError("location must be an object")
    lat = raw.get("latitude", raw.get("lat"))
    lon = raw.get("longitude", raw.get("lon"))
    if lat is None or lon is None:
        raise ValueError("location requires latitude and longitude")
    return Location(lat=float(lat), lon=float(lon), address=raw.get("address"))


def _parse_hours(raw: Any) -> List[OperatingHours]:
    hours: list[OperatingHours] = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        try:
            hours.append(OperatingHours(day=int(item["day"]), open=str(item["open"]), close=str(item["close"])))
        except (KeyError, TypeError, ValueError):
            continue
    return hours


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


def parse_restaurant(doc: Dict[str, Any]) -> Restaurant:
    """Build a Restaurant from a stored document (camelCase keys)."""
    if not doc.get("id"):
        raise ValueError("restaurant document is missing an id")
    return Restaurant(
        id=str(doc["id"]),
        name=str(doc.get("name") or doc["id"]),
        location=_parse_location(doc.get("location")),
        price_level=_as_int(doc.get("priceLevel", 0), "priceLevel"),
        rating=float(doc.get("rating", 0.0)),
        cuisine=_str_list(doc.get("cuisine")),
        review_count=_as_int(doc.get("reviewCount", 0), "reviewCount"),
        dietary_options=_str_list(doc.get("dietaryOptions")),
        operating_hours=_parse_hours(doc.get("operatingHours")),
        place_id=doc.get("placeId"),
        website=doc.get("website"),
        phone_number=doc.get("phoneNumber"),
        photo_url=doc.get("photoURL"),
    )


def parse_catalog(payload: Any) -> List[Restaurant]:
    docs = payload.get("restaurants", []) if isinstance(payload, dict) else payload
    if not isinstance(docs, list):
        raise ValueError("catalog must be a list of restaurant documents")

    restaurants: list[Restaurant] = []
    for idx, doc in enumerate(docs):
        if not isinstance(doc, dict):
            logger.warning("skipping catalog record {}: not an object", idx)
            continue
        try:
            restaurants.append(parse_restaurant(doc))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("skipping catalog record {} ({}): {}", idx, doc.get("id"), exc)
    return restaurants


def load_catalog(path: Union[str, Path]) -> List[Restaurant]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    restaurants = parse_catalog(payload)
    logger.debug("catalog loaded path={} restaurants={}", path, len(restaurants))
    return restaurants

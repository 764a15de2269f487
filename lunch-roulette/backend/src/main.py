from __future__ import annotations

import random
import time
from typing import Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from config import Configuration
from errors import InvalidConstraint, NoEligibleCandidates
from models import HistoryEntry, Restaurant, ScoredCandidate, SelectionConstraints
from services.catalog import load_catalog
from services.history import history_store
from services.history_utils import fetch_recent_history, record_selection
from services.recommend import recommend_candidates
from services.report import build_report
from services.selection import select_candidate


app = FastAPI(title="Lunch Roulette")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_catalog_cache: Dict[str, List[Restaurant]] = {}
_rng = random.Random()


def get_config() -> Configuration:
    return Configuration.from_env()


def get_catalog(cfg: Configuration = Depends(get_config)) -> List[Restaurant]:
    try:
        cfg.require_catalog()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    path = str(cfg.resolved_catalog_path())
    if path not in _catalog_cache:
        try:
            _catalog_cache[path] = load_catalog(path)
        except (OSError, ValueError) as exc:
            logger.error("catalog unavailable path={}: {}", path, exc)
            raise HTTPException(status_code=503, detail="restaurant catalog unavailable")
    return _catalog_cache[path]


def get_clock() -> Callable[[], float]:
    return time.time


def get_rng() -> random.Random:
    return _rng


class SelectRequest(BaseModel):
    latitude: float = Field(..., description="Reference latitude")
    longitude: float = Field(..., description="Reference longitude")
    radius: Optional[float] = Field(None, description="Search radius in miles; defaults to DEFAULT_RADIUS_MILES")
    dietary_restrictions: List[str] = []
    price_range: List[str] = []
    exclude_restaurants: List[str] = []
    selected_by: Optional[str] = Field(None, description="Member who triggered the pick")


class RecommendRequest(BaseModel):
    latitude: float
    longitude: float
    radius: Optional[float] = None
    dietary_restrictions: List[str] = []
    price_range: List[str] = []
    exclude_restaurants: List[str] = []
    group_id: Optional[str] = Field(None, description="Apply the group's recency penalty when set")
    limit: Optional[int] = Field(None, description="Number of results; defaults to RECOMMEND_LIMIT")


class LocationPayload(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class RestaurantPayload(BaseModel):
    id: str
    name: str
    location: LocationPayload
    cuisine: List[str] = []
    price_level: int
    rating: float
    review_count: int = 0
    dietary_options: List[str] = []
    website: Optional[str] = None
    phone_number: Optional[str] = None
    photo_url: Optional[str] = None


class CandidatePayload(BaseModel):
    restaurant: RestaurantPayload
    score: float
    distance_miles: float
    debug_scores: Dict[str, float] = {}


class HistoryEntryPayload(BaseModel):
    restaurant_id: str
    timestamp: int
    selected_by: Optional[str] = None
    radius: Optional[float] = None
    dietary_restrictions: List[str] = []
    price_range: List[str] = []


class SelectResponse(BaseModel):
    selection: CandidatePayload
    history_entry: Optional[HistoryEntryPayload] = None


class RecommendResponse(BaseModel):
    recommendations_markdown: str
    candidates: List[CandidatePayload]


class HistoryResponse(BaseModel):
    group_id: str
    entries: List[HistoryEntryPayload]


def _constraints(
    cfg: Configuration,
    latitude: float,
    longitude: float,
    radius: Optional[float],
    dietary_restrictions: List[str],
    price_range: List[str],
    exclude_restaurants: List[str],
) -> SelectionConstraints:
    return SelectionConstraints.build(
        latitude,
        longitude,
        cfg.default_radius_miles if radius is None else radius,
        dietary_restrictions=dietary_restrictions,
        price_range=price_range,
        exclude_restaurants=exclude_restaurants,
    )


def to_restaurant_payload(r: Restaurant) -> RestaurantPayload:
    return RestaurantPayload(
        id=r.id,
        name=r.name,
        location=LocationPayload(latitude=r.location.lat, longitude=r.location.lon, address=r.location.address),
        cuisine=r.cuisine,
        price_level=r.price_level,
        rating=r.rating,
        review_count=r.review_count,
        dietary_options=r.dietary_options,
        website=r.website,
        phone_number=r.phone_number,
        photo_url=r.photo_url,
    )


def to_candidate_payload(c: ScoredCandidate) -> CandidatePayload:
    return CandidatePayload(
        restaurant=to_restaurant_payload(c.restaurant),
        score=round(c.score, 4),
        distance_miles=round(c.distance_miles, 3),
        debug_scores=c.debug_scores,
    )


def to_history_payload(e: HistoryEntry) -> HistoryEntryPayload:
    return HistoryEntryPayload(
        restaurant_id=e.restaurant_id,
        timestamp=e.timestamp,
        selected_by=e.selected_by,
        radius=e.radius,
        dietary_restrictions=list(e.dietary_restrictions),
        price_range=list(e.price_range),
    )


@app.get("/healthz")
def healthz(cfg: Configuration = Depends(get_config)) -> dict:
    logger.info("cfg: {}", cfg.log_summary())
    return {"status": "ok"}


@app.post("/groups/{group_id}/select", response_model=SelectResponse)
def select(
    group_id: str,
    req: SelectRequest,
    cfg: Configuration = Depends(get_config),
    catalog: List[Restaurant] = Depends(get_catalog),
    clock: Callable[[], float] = Depends(get_clock),
    rng: random.Random = Depends(get_rng),
) -> SelectResponse:
    try:
        constraints = _constraints(
            cfg,
            req.latitude,
            req.longitude,
            req.radius,
            req.dietary_restrictions,
            req.price_range,
            req.exclude_restaurants,
        )
        now = clock()
        history = fetch_recent_history(group_id, now, cfg.recency_window_sec)
        picked = select_candidate(
            constraints,
            catalog,
            history,
            rng=rng,
            clock=lambda: now,
            recency_window_sec=cfg.recency_window_sec,
            recency_penalty=cfg.recency_penalty,
        )
    except NoEligibleCandidates as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("selection failed: {}", exc)
        raise HTTPException(status_code=500, detail="internal error")

    entry = None
    if cfg.record_history:
        try:
            entry = record_selection(group_id, picked, constraints, selected_by=req.selected_by, now=now)
        except Exception as exc:
            logger.exception("recording selection failed group={}: {}", group_id, exc)
            raise HTTPException(status_code=500, detail="failed to record selection")

    return SelectResponse(
        selection=to_candidate_payload(picked),
        history_entry=to_history_payload(entry) if entry else None,
    )


@app.post("/recommend", response_model=RecommendResponse)
def recommend(
    req: RecommendRequest,
    cfg: Configuration = Depends(get_config),
    catalog: List[Restaurant] = Depends(get_catalog),
    clock: Callable[[], float] = Depends(get_clock),
) -> RecommendResponse:
    try:
        constraints = _constraints(
            cfg,
            req.latitude,
            req.longitude,
            req.radius,
            req.dietary_restrictions,
            req.price_range,
            req.exclude_restaurants,
        )
        now = clock()
        history = fetch_recent_history(req.group_id, now, cfg.recency_window_sec)
        ranked = recommend_candidates(
            constraints,
            catalog,
            history,
            limit=cfg.recommend_limit if req.limit is None else req.limit,
            clock=lambda: now,
            recency_window_sec=cfg.recency_window_sec,
            recency_penalty=cfg.recency_penalty,
        )
        md = build_report(constraints, ranked)
    except InvalidConstraint as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("recommendation failed: {}", exc)
        raise HTTPException(status_code=500, detail="internal error")

    return RecommendResponse(
        recommendations_markdown=md,
        candidates=[to_candidate_payload(c) for c in ranked],
    )


@app.get("/groups/{group_id}/history", response_model=HistoryResponse)
def group_history(group_id: str, since: Optional[int] = None) -> HistoryResponse:
    entries = history_store.get_history(group_id, since=since)
    return HistoryResponse(group_id=group_id, entries=[to_history_payload(e) for e in entries])

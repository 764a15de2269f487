from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from utils import SECONDS_PER_DAY

# Relative catalog paths resolve against backend/, not the working directory.
BACKEND_DIR = Path(__file__).resolve().parent.parent


class Configuration(BaseModel):
    # Catalog
    catalog_path: Optional[str] = Field(default="data/restaurants.json")

    # Defaults
    default_radius_miles: float = Field(default=5.0)
    recommend_limit: int = Field(default=5)

    # Recency
    recency_window_days: float = Field(default=7.0)
    recency_penalty: float = Field(default=0.5)

    # History
    record_history: bool = Field(default=True)

    @classmethod
    def from_env(cls, overrides: Optional[dict[str, Any]] = None) -> "Configuration":
        raw: dict[str, Any] = {}

        env_map = {
            "catalog_path": os.getenv("CATALOG_PATH"),
            "default_radius_miles": os.getenv("DEFAULT_RADIUS_MILES"),
            "recommend_limit": os.getenv("RECOMMEND_LIMIT"),
            "recency_window_days": os.getenv("RECENCY_WINDOW_DAYS"),
            "recency_penalty": os.getenv("RECENCY_PENALTY"),
            "record_history": os.getenv("RECORD_HISTORY"),
        }

        bool_fields = {"record_history"}

        for k, v in env_map.items():
            if v is None:
                continue
            if k in bool_fields:
                raw[k] = str(v).lower() in {"1", "true", "yes", "on"}
            else:
                raw[k] = v

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**raw)

    @property
    def recency_window_sec(self) -> float:
        return self.recency_window_days * SECONDS_PER_DAY

    def resolved_catalog_path(self) -> Path:
        path = Path(self.catalog_path or "")
        if not path.is_absolute():
            path = BACKEND_DIR / path
        return path

    def require_catalog(self) -> None:
        if not self.catalog_path:
            raise ValueError("CATALOG_PATH is required")

    def log_summary(self) -> str:
        return (
            "catalog=%s default_radius_miles=%s recommend_limit=%s recency_window_days=%s recency_penalty=%s record_history=%s"
            % (
                self.catalog_path or "unset",
                self.default_radius_miles,
                self.recommend_limit,
                self.recency_window_days,
                self.recency_penalty,
                self.record_history,
            )
        )

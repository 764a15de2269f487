from __future__ import annotations

import pytest

from config import Configuration


def test_defaults() -> None:
    cfg = Configuration()
    assert cfg.default_radius_miles == 5.0
    assert cfg.recency_window_sec == 7 * 24 * 60 * 60
    assert cfg.recency_penalty == 0.5
    assert cfg.record_history is True


def test_from_env_reads_and_coerces(monkeypatch) -> None:
    monkeypatch.setenv("CATALOG_PATH", "/tmp/catalog.json")
    monkeypatch.setenv("DEFAULT_RADIUS_MILES", "2.5")
    monkeypatch.setenv("RECENCY_WINDOW_DAYS", "3")
    monkeypatch.setenv("RECOMMEND_LIMIT", "8")
    monkeypatch.setenv("RECORD_HISTORY", "off")

    cfg = Configuration.from_env()

    assert cfg.catalog_path == "/tmp/catalog.json"
    assert cfg.default_radius_miles == 2.5
    assert cfg.recency_window_sec == 3 * 24 * 60 * 60
    assert cfg.recommend_limit == 8
    assert cfg.record_history is False
    assert "catalog=/tmp/catalog.json" in cfg.log_summary()


def test_overrides_win_over_env(monkeypatch) -> None:
    monkeypatch.setenv("RECENCY_PENALTY", "0.25")
    cfg = Configuration.from_env({"recency_penalty": 0.75, "recommend_limit": None})
    assert cfg.recency_penalty == 0.75
    assert cfg.recommend_limit == 5


def test_require_catalog() -> None:
    with pytest.raises(ValueError):
        Configuration(catalog_path="").require_catalog()


def test_default_catalog_resolves_against_backend_dir(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    path = Configuration().resolved_catalog_path()
    assert path.is_absolute()
    assert path.parts[-3:] == ("backend", "data", "restaurants.json")
    assert path.exists()


def test_absolute_catalog_path_is_kept(tmp_path) -> None:
    target = tmp_path / "catalog.json"
    assert Configuration(catalog_path=str(target)).resolved_catalog_path() == target

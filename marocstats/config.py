"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class Settings:
    geo_source: str
    retirees_source: str
    unemployment_source: str
    geo_name_property: str = "name"
    fetch_timeout: float = 15.0
    fetch_retries: int = 3
    retry_backoff: float = 1.0
    api_key: str | None = None
    reload_interval_hours: float | None = None


def get_settings() -> Settings:
    """Build settings from ``MAROCSTATS_*`` variables, defaulting to the bundled data."""
    interval = os.getenv("MAROCSTATS_RELOAD_INTERVAL")
    return Settings(
        geo_source=os.getenv("MAROCSTATS_GEO_SOURCE", str(DATA_DIR / "regions.geojson")),
        retirees_source=os.getenv(
            "MAROCSTATS_RETIREES_SOURCE", str(DATA_DIR / "retraites_2022.json")
        ),
        unemployment_source=os.getenv(
            "MAROCSTATS_UNEMPLOYMENT_SOURCE", str(DATA_DIR / "chomage_regional.csv")
        ),
        geo_name_property=os.getenv("MAROCSTATS_GEO_NAME_PROPERTY", "name"),
        fetch_timeout=float(os.getenv("MAROCSTATS_FETCH_TIMEOUT", "15")),
        fetch_retries=max(1, int(os.getenv("MAROCSTATS_FETCH_RETRIES", "3"))),
        retry_backoff=float(os.getenv("MAROCSTATS_RETRY_BACKOFF", "1.0")),
        api_key=os.getenv("MAROCSTATS_API_KEY") or None,
        reload_interval_hours=float(interval) if interval else None,
    )

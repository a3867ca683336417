"""Pydantic schemas for API response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------


class DatasetOut(BaseModel):
    key: str
    name: str
    description: str
    unit: str
    source: str
    years: list[str]
    segments: list[str]
    records: int


class RegionListOut(BaseModel):
    segment: str
    total: int
    regions: list[str]


class ResolveOut(BaseModel):
    query: str
    region: str | None = None
    resolved: bool


# ---------------------------------------------------------------------------
# Values and series
# ---------------------------------------------------------------------------


class ValueOut(BaseModel):
    region: str
    year: str
    segment: str
    locale: str
    value: float | None = None
    available: bool


class UrbanRuralOut(BaseModel):
    region: str
    year: str
    segment: str
    urban: float | None = None
    rural: float | None = None


class SeriesPointOut(BaseModel):
    year: str
    value: float

    model_config = {"from_attributes": True}


class SeriesOut(BaseModel):
    region: str
    segment: str
    locale: str
    data: list[SeriesPointOut]


class ScaleStatsOut(BaseModel):
    year: str
    segment: str
    min: float
    max: float
    mean: float


class RegionSeriesOut(BaseModel):
    name: str
    data: list[SeriesPointOut]

    model_config = {"from_attributes": True}


class ComparisonOut(BaseModel):
    region_a: RegionSeriesOut
    region_b: RegionSeriesOut

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


class FeatureCollectionOut(BaseModel):
    type: str = "FeatureCollection"
    features: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Health / metrics / reload
# ---------------------------------------------------------------------------


class HealthOut(BaseModel):
    status: str
    data: str


class MetricsOut(BaseModel):
    uptime_seconds: float
    total_requests: int
    datasets_loaded: int
    loaded_at: datetime | None = None
    last_scheduled_reload: datetime | None = None


class ReloadOut(BaseModel):
    status: str
    counts: dict[str, int]
    loaded_at: datetime

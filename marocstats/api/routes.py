"""FastAPI REST endpoints for MarocStats."""

from __future__ import annotations

import io
import time

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from marocstats.api.auth import app_settings, verify_api_key
from marocstats.api.schemas import (
    ComparisonOut,
    DatasetOut,
    FeatureCollectionOut,
    HealthOut,
    MetricsOut,
    RegionListOut,
    ReloadOut,
    ResolveOut,
    ScaleStatsOut,
    SeriesOut,
    SeriesPointOut,
    UrbanRuralOut,
    ValueOut,
)
from marocstats.context import DataContext, DatasetView
from marocstats.ingestion.sources import MissingInputError
from marocstats.pipeline import load_context
from marocstats.scheduler import get_last_run

router = APIRouter(prefix="/api/v1", tags=["MarocStats API"])

# Track startup time for metrics
_start_time = time.time()
_request_count = 0


def _inc_requests():
    global _request_count
    _request_count += 1


def get_context(request: Request) -> DataContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Data not loaded")
    return context


def get_dataset(dataset: str, context: DataContext = Depends(get_context)) -> DatasetView:
    try:
        return context.dataset(dataset)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown dataset: {dataset}") from None


def _year(view: DatasetView, year: str | None) -> str:
    return year or view.config.years[-1]


def _segment(view: DatasetView, segment: str | None) -> str:
    return segment or view.config.default_segment


# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------


@router.get("/datasets", summary="List loaded datasets", response_model=list[DatasetOut])
def list_datasets(
    context: DataContext = Depends(get_context),
    _key: str = Depends(verify_api_key),
) -> list[DatasetOut]:
    _inc_requests()
    return [
        DatasetOut(
            key=key,
            name=view.config.name,
            description=view.config.description,
            unit=view.config.unit,
            source=view.config.source,
            years=list(view.config.years),
            segments=view.index.segments(),
            records=len(view.records),
        )
        for key, view in context.datasets.items()
    ]


@router.get("/{dataset}/regions", summary="Regions available for a segment", response_model=RegionListOut)
def list_regions(
    segment: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> RegionListOut:
    _inc_requests()
    segment = _segment(view, segment)
    regions = view.engine.available_regions(segment)
    return RegionListOut(segment=segment, total=len(regions), regions=regions)


@router.get("/{dataset}/resolve", summary="Resolve a free-text region name", response_model=ResolveOut)
def resolve_region(
    name: str = Query(..., description="Region name as found in external data"),
    segment: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> ResolveOut:
    _inc_requests()
    region = view.engine.resolve(name, _segment(view, segment))
    return ResolveOut(query=name, region=region, resolved=region is not None)


# ---------------------------------------------------------------------------
# Values and series
# ---------------------------------------------------------------------------


@router.get("/{dataset}/value", summary="Value for one region/year/segment/locale", response_model=ValueOut)
def get_value(
    region: str = Query(...),
    year: str | None = Query(None),
    segment: str | None = Query(None),
    locale: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> ValueOut:
    _inc_requests()
    year, segment = _year(view, year), _segment(view, segment)
    locale = locale or view.config.default_locale
    value = view.engine.value_at(region, year, segment, locale)
    return ValueOut(
        region=region, year=year, segment=segment, locale=locale,
        value=value, available=value is not None,
    )


@router.get("/{dataset}/urban-rural", summary="Urban/rural split", response_model=UrbanRuralOut)
def get_urban_rural(
    region: str = Query(...),
    year: str | None = Query(None),
    segment: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> UrbanRuralOut:
    _inc_requests()
    year, segment = _year(view, year), _segment(view, segment)
    split = view.engine.urban_rural_split(region, year, segment)
    return UrbanRuralOut(region=region, year=year, segment=segment, urban=split.urban, rural=split.rural)


@router.get("/{dataset}/series", summary="Yearly series for a region", response_model=SeriesOut)
def get_series(
    region: str = Query(...),
    segment: str | None = Query(None),
    locale: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> SeriesOut:
    _inc_requests()
    segment = _segment(view, segment)
    locale = locale or view.config.default_locale
    points = view.engine.temporal_series(region, segment, locale)
    return SeriesOut(
        region=region, segment=segment, locale=locale,
        data=[SeriesPointOut.model_validate(p) for p in points],
    )


@router.get("/{dataset}/color-scale", summary="Min/max/mean across regions", response_model=ScaleStatsOut)
def get_color_scale(
    year: str | None = Query(None),
    segment: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> ScaleStatsOut:
    _inc_requests()
    year, segment = _year(view, year), _segment(view, segment)
    stats = view.engine.color_scale_stats(year, segment)
    return ScaleStatsOut(year=year, segment=segment, min=stats.min, max=stats.max, mean=stats.mean)


@router.get("/{dataset}/compare", summary="Compare two regions over time", response_model=ComparisonOut)
def compare_regions(
    region_a: str = Query(...),
    region_b: str = Query(...),
    segment: str | None = Query(None),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
) -> ComparisonOut:
    _inc_requests()
    comparison = view.engine.comparison_series(region_a, region_b, _segment(view, segment))
    if comparison is None:
        raise HTTPException(status_code=404, detail="No data for at least one of the regions")
    return ComparisonOut.model_validate(comparison)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@router.get("/{dataset}/export", summary="Export one year as CSV or JSON")
def export_dataset(
    year: str | None = Query(None),
    segment: str | None = Query(None),
    format: str = Query("csv", pattern="^(csv|json)$"),
    view: DatasetView = Depends(get_dataset),
    _key: str = Depends(verify_api_key),
):
    _inc_requests()
    year, segment = _year(view, year), _segment(view, segment)
    filename = f"{view.config.key}_{segment}_{year}"
    if format == "json":
        return JSONResponse(
            view.engine.export_records(year, segment),
            headers={"Content-Disposition": f"attachment; filename={filename}.json"},
        )
    rows = view.engine.export_rows(year, segment)
    columns = ["Région", *view.config.export_columns.values()]
    df = pd.DataFrame(rows, columns=columns)
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    buf.seek(0)
    return StreamingResponse(
        iter([buf.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
    )


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


@router.get("/retirees/map", summary="Boundaries joined with retiree counts", response_model=FeatureCollectionOut)
def retirees_map(
    with_data_only: bool = Query(False, description="Keep only features with a positive total"),
    context: DataContext = Depends(get_context),
    _key: str = Depends(verify_api_key),
) -> FeatureCollectionOut:
    _inc_requests()
    merged = context.merged_features()
    if with_data_only:
        merged = [m for m in merged if m.has_data]
    return FeatureCollectionOut(features=[m.to_geojson() for m in merged])


# ---------------------------------------------------------------------------
# Reload
# ---------------------------------------------------------------------------


@router.post("/reload", summary="Reload every input and rebuild the indexes", response_model=ReloadOut)
async def reload_data(
    request: Request,
    _key: str = Depends(verify_api_key),
) -> ReloadOut:
    try:
        context = await load_context(app_settings(request))
    except MissingInputError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    request.app.state.context = context
    return ReloadOut(status="ok", counts=context.summary(), loaded_at=context.loaded_at)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@router.get("/metrics", summary="Application metrics", response_model=MetricsOut)
def get_metrics(
    request: Request,
    _key: str = Depends(verify_api_key),
) -> MetricsOut:
    context = getattr(request.app.state, "context", None)
    return MetricsOut(
        uptime_seconds=round(time.time() - _start_time, 2),
        total_requests=_request_count,
        datasets_loaded=len(context.datasets) if context else 0,
        loaded_at=context.loaded_at if context else None,
        last_scheduled_reload=get_last_run(),
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", summary="Health check", response_model=HealthOut)
def health(request: Request) -> HealthOut:
    if getattr(request.app.state, "context", None) is None:
        raise HTTPException(status_code=503, detail="Data not loaded")
    return HealthOut(status="ok", data="loaded")

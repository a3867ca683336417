"""Point and aggregate queries over a ``DataIndex``.

Every query is read-only and returns ``None`` (or omits the entry) for
missing data instead of raising. When the index has no value for a cell, a
synthetic estimate is derived from the dataset's reference baselines.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from marocstats.models import Comparison, LocaleSplit, RegionSeries, ScaleStats, SeriesPoint
from marocstats.processing.indexer import DataIndex
from marocstats.processing.matcher import RegionMatcher
from marocstats.reference import (
    ABSENT_PLACEHOLDER,
    AGGREGATE_REGION,
    DEFAULT_SCALE,
    LOCALE_NATIONAL,
    LOCALE_RURAL,
    LOCALE_URBAN,
    SYNTHETIC_BASELINE_INDEX,
    SYNTHETIC_YEARLY_STEP,
)

logger = logging.getLogger(__name__)


class QueryEngine:
    def __init__(
        self,
        index: DataIndex,
        reference: Mapping[str, Mapping[str, float]] | None = None,
        matcher: RegionMatcher | None = None,
        export_columns: Mapping[str, str] | None = None,
        default_locale: str = LOCALE_NATIONAL,
    ):
        self.index = index
        self.reference = reference or {}
        self.matcher = matcher or RegionMatcher(fallback_regions=self.reference)
        self.export_columns = export_columns or {LOCALE_NATIONAL: LOCALE_NATIONAL}
        self.default_locale = default_locale

    @property
    def years(self) -> tuple[str, ...]:
        return self.index.years

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    def synthetic_value(self, region, year, locale=None) -> float | None:
        """Baseline for (region, locale) shifted by a fixed step per year from 2019."""
        locale = locale or self.default_locale
        try:
            baseline = self.reference.get(region, {}).get(locale)
        except TypeError:
            return None
        if baseline is None or year not in self.years:
            return None
        year_index = self.years.index(year)
        return round(baseline + (year_index - SYNTHETIC_BASELINE_INDEX) * SYNTHETIC_YEARLY_STEP, 1)

    def value_at(self, region, year, segment, locale=None) -> float | None:
        locale = locale or self.default_locale
        value = self.index.get(segment, region, locale, year)
        if value is not None:
            return value
        value = self.synthetic_value(region, year, locale)
        if value is not None:
            logger.debug("Synthetic value for %s %s %s: %s", region, locale, year, value)
        return value

    def urban_rural_split(self, region, year, segment) -> LocaleSplit:
        return LocaleSplit(
            urban=self.value_at(region, year, segment, LOCALE_URBAN),
            rural=self.value_at(region, year, segment, LOCALE_RURAL),
        )

    # ------------------------------------------------------------------
    # Series and aggregates
    # ------------------------------------------------------------------

    def temporal_series(self, region, segment, locale=None) -> list[SeriesPoint]:
        """Values in year order; years without a real or synthetic value are left out."""
        points = []
        for year in self.years:
            value = self.value_at(region, year, segment, locale)
            if value is not None:
                points.append(SeriesPoint(year=year, value=value))
        return points

    def available_regions(self, segment) -> list[str]:
        """Regions with real data for *segment*, then reference-only regions."""
        regions = [r for r in self.index.regions(segment) if r != AGGREGATE_REGION]
        for region in self.reference:
            if region != AGGREGATE_REGION and region not in regions:
                regions.append(region)
        return regions

    def color_scale_stats(self, year, segment) -> ScaleStats:
        values = [
            v for v in (self.value_at(r, year, segment) for r in self.available_regions(segment))
            if v is not None
        ]
        if not values:
            logger.warning("No value available for %s/%s, using default scale", segment, year)
            return ScaleStats(*DEFAULT_SCALE)
        return ScaleStats(min=min(values), max=max(values), mean=sum(values) / len(values))

    def comparison_series(self, region_a, region_b, segment) -> Comparison | None:
        series_a = self.temporal_series(region_a, segment)
        series_b = self.temporal_series(region_b, segment)
        if not series_a or not series_b:
            return None
        return Comparison(
            region_a=RegionSeries(name=region_a, data=series_a),
            region_b=RegionSeries(name=region_b, data=series_b),
        )

    def resolve(self, name, segment) -> str | None:
        """Map a free-text region name to a region of *segment*."""
        return self.matcher.resolve(name, self.available_regions(segment))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_rows(self, year, segment) -> list[dict[str, str]]:
        """One row per available region, cells as numeric strings or ``-``."""
        rows = []
        for region in self.available_regions(segment):
            row = {"Région": region}
            for locale, label in self.export_columns.items():
                row[label] = format_cell(self.value_at(region, year, segment, locale))
            rows.append(row)
        return rows

    def export_records(self, year, segment) -> dict[str, dict[str, Any]]:
        """JSON export: per-locale values and the national evolution of each region."""
        payload = {}
        for region in self.available_regions(segment):
            entry: dict[str, Any] = {
                locale.lower(): self.value_at(region, year, segment, locale)
                for locale in self.export_columns
            }
            entry["evolution"] = [
                {"year": p.year, "value": p.value} for p in self.temporal_series(region, segment)
            ]
            payload[region] = entry
        return payload


def format_cell(value: float | None) -> str:
    if value is None:
        return ABSENT_PLACEHOLDER
    if float(value).is_integer():
        return str(int(value))
    return str(value)

"""Join of boundary features with the retiree statistics."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from marocstats.models import MergedFeature
from marocstats.processing.indexer import DataIndex
from marocstats.processing.matcher import RegionMatcher
from marocstats.reference import LOCALE_NATIONAL, SEGMENT_FEMALE, SEGMENT_MALE, SEGMENT_TOTAL

logger = logging.getLogger(__name__)


def merge_features(
    features: Iterable[dict[str, Any]],
    index: DataIndex,
    matcher: RegionMatcher | None = None,
    year: str | None = None,
    name_property: str = "name",
    locale: str = LOCALE_NATIONAL,
) -> list[MergedFeature]:
    """Pair every feature with the statistics of its resolved region.

    Features keep their place in the result even when unresolved (zero
    counts), so base boundaries can still be drawn; use ``bubble_features``
    for the ones that carry data. Each feature is matched against every
    region of the index, which is fine for a couple of dozen regions.
    """
    matcher = matcher or RegionMatcher()
    year = year or (index.years[-1] if index.years else None)
    regions = index.regions(SEGMENT_TOTAL)

    merged = []
    for feature in features:
        name = str((feature.get("properties") or {}).get(name_property) or "")
        region = matcher.resolve(name, regions) if name else None
        if region is None:
            logger.debug("No statistics for boundary %r", name)
            merged.append(MergedFeature(feature=feature, name=name, region=None))
            continue
        merged.append(MergedFeature(
            feature=feature,
            name=name,
            region=region,
            total=index.get(SEGMENT_TOTAL, region, locale, year) or 0.0,
            masculin=index.get(SEGMENT_MALE, region, locale, year) or 0.0,
            feminin=index.get(SEGMENT_FEMALE, region, locale, year) or 0.0,
        ))

    resolved = sum(1 for m in merged if m.has_data)
    logger.info("Merged %d boundary features, %d with data", len(merged), resolved)
    return merged


def bubble_features(merged: Iterable[MergedFeature]) -> list[MergedFeature]:
    """Features with a positive total, the ones shown as bubbles and selectable."""
    return [m for m in merged if m.has_data]


def find_merged(merged: Iterable[MergedFeature], name: str, matcher: RegionMatcher | None = None) -> MergedFeature | None:
    """Look up the merged feature for a boundary or region name."""
    merged = list(merged)
    for m in merged:
        if name in (m.name, m.region):
            return m
    matcher = matcher or RegionMatcher()
    region = matcher.resolve(name, [m.region for m in merged if m.region])
    return next((m for m in merged if region and m.region == region), None)

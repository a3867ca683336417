"""Nested lookup index: segment -> region -> locale -> year -> value."""

from __future__ import annotations

import logging
from typing import Iterable

from marocstats.models import RawRecord

logger = logging.getLogger(__name__)


class DataIndex:
    """Read-only nested view of a dataset.

    Built once per load by ``build_index``; there are no mutators; a reload
    builds a new index.
    """

    def __init__(self, data: dict[str, dict[str, dict[str, dict[str, float | None]]]], years: tuple[str, ...]):
        self._data = data
        self.years = tuple(years)

    def get(self, segment, region, locale, year) -> float | None:
        try:
            return self._data[segment][region][locale].get(year)
        except (KeyError, TypeError):
            return None

    def segments(self) -> list[str]:
        return list(self._data)

    def regions(self, segment) -> list[str]:
        try:
            return list(self._data.get(segment, {}))
        except TypeError:
            return []

    def locales(self, segment, region) -> list[str]:
        try:
            return list(self._data[segment][region])
        except (KeyError, TypeError):
            return []

    def has_region(self, segment, region) -> bool:
        return region in self.regions(segment)

    def cells(self) -> Iterable[tuple[str, str, str, str, float | None]]:
        for segment, regions in self._data.items():
            for region, locales in regions.items():
                for locale, years in locales.items():
                    for year, value in years.items():
                        yield segment, region, locale, year, value

    def __len__(self) -> int:
        return sum(1 for _ in self.cells())


def build_index(records: Iterable[RawRecord], years: tuple[str, ...]) -> DataIndex:
    """Build the index in a single pass over *records*.

    Records without a segment, region or locale are dropped. Years outside
    *years* are ignored; configured years missing from a record are absent.
    """
    data: dict = {}
    dropped = 0
    for record in records:
        if not (record.segment and record.region and record.locale):
            dropped += 1
            continue
        cell = data.setdefault(record.segment, {}).setdefault(record.region, {})
        # A repeated (segment, region, locale) row replaces the earlier one.
        cell[record.locale] = {year: record.values.get(year) for year in years}

    if dropped:
        logger.debug("Dropped %d records with missing identifiers", dropped)
    logger.info("Index built: %d segments, %d records dropped", len(data), dropped)
    return DataIndex(data, years)

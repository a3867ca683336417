"""Reshaping of cleaned tables into immutable observation records."""

from __future__ import annotations

import logging

import pandas as pd

from marocstats.ingestion.datasets import DatasetConfig
from marocstats.models import RawRecord

logger = logging.getLogger(__name__)


def frame_to_records(df: pd.DataFrame, config: DatasetConfig) -> list[RawRecord]:
    """Turn a cleaned DataFrame into ``RawRecord``s following *config*.

    Long tables yield one record per row. Wide tables (no segment column)
    yield one record per row and per entry of ``config.value_columns``, dated
    ``config.reference_year``. Identifiers are passed through as found, blank
    or missing ones included; the indexer decides what to keep.
    """
    records: list[RawRecord] = []
    for row in df.to_dict(orient="records"):
        region = _text(row.get(config.region_column))
        locale = _text(row.get(config.locale_column)) if config.locale_column else config.default_locale

        if config.segment_column:
            values = {year: _number(row.get(year)) for year in config.year_columns}
            records.append(RawRecord(region, _text(row.get(config.segment_column)), locale, values))
            continue

        for segment, column in config.value_columns.items():
            values = {config.reference_year: _number(row.get(column))}
            records.append(RawRecord(region, segment, locale, values))

    logger.info("Reshaped %s: %d records", config.key, len(records))
    return records


def records_to_frame(records: list[RawRecord]) -> pd.DataFrame:
    """Long format view of records: one row per (segment, region, locale, year)."""
    rows = [
        {
            "segment": r.segment,
            "region": r.region,
            "locale": r.locale,
            "year": year,
            "value": value,
        }
        for r in records
        for year, value in r.values.items()
    ]
    return pd.DataFrame(rows, columns=["segment", "region", "locale", "year", "value"])


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------


def _text(value) -> str | None:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def _number(value) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(number) else number

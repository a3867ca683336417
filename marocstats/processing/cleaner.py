"""Data cleaning and normalization utilities."""

from __future__ import annotations

import logging
import math

import pandas as pd

from marocstats.ingestion.datasets import DatasetConfig
from marocstats.reference import ABSENT_PLACEHOLDER

logger = logging.getLogger(__name__)


def strip_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip whitespace around column names, keeping their case and accents."""
    df = df.copy()
    df.columns = [str(col).strip() for col in df.columns]
    return df


def strip_strings(df: pd.DataFrame) -> pd.DataFrame:
    """Strip leading/trailing whitespace from string columns."""
    df = df.copy()
    str_cols = df.select_dtypes(include=["object", "string"]).columns
    for col in str_cols:
        df[col] = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)
    return df


def drop_header_rows(df: pd.DataFrame, column: str | None, markers: tuple[str, ...]) -> pd.DataFrame:
    """Remove title, repeated-header and footer rows whose *column* contains a marker."""
    if not column or not markers or column not in df.columns:
        return df
    values = df[column].astype(str)
    mask = pd.Series(False, index=df.index)
    for marker in markers:
        mask |= values.str.contains(marker, regex=False)
    removed = int(mask.sum())
    if removed:
        logger.debug("Removed %d header/title rows", removed)
    return df[~mask]


def drop_excluded_regions(df: pd.DataFrame, column: str, excluded: tuple[str, ...]) -> pd.DataFrame:
    if not excluded or column not in df.columns:
        return df
    mask = df[column].isin(excluded)
    return df[~mask]


def coerce_numeric(df: pd.DataFrame, columns: list[str] | tuple[str, ...]) -> pd.DataFrame:
    """Force columns to numeric.

    The ``-`` placeholder, empty cells and anything unparsable become NaN, never
    zero. Decimal commas are accepted.
    """
    df = df.copy()
    for col in columns:
        if col not in df.columns:
            continue
        series = df[col]
        if not pd.api.types.is_numeric_dtype(series):
            series = series.map(_numeric_text)
        df[col] = pd.to_numeric(series, errors="coerce")
    return df


def _numeric_text(value) -> str | None:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = "".join(str(value).split()).replace(",", ".")
    if text in ("", ABSENT_PLACEHOLDER):
        return None
    return text


def clean_dataframe(df: pd.DataFrame, config: DatasetConfig) -> pd.DataFrame:
    """Run the cleaning pipeline for a dataset schema.

    Rows with missing identifiers are not dropped here: the indexer filters
    them so that the rule applies to every record source.
    """
    df = strip_columns(df)
    df = strip_strings(df)
    df = drop_header_rows(df, config.segment_column, config.header_markers)
    df = drop_excluded_regions(df, config.region_column, config.excluded_regions)
    value_cols = list(config.year_columns) or list(config.value_columns.values())
    df = coerce_numeric(df, value_cols)
    logger.info("Cleaning complete (%s): %d rows x %d cols", config.key, len(df), len(df.columns))
    return df

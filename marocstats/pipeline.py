"""Full data pipeline: ingest → clean → reshape → index.

Run with:  python -m marocstats.pipeline
"""

from __future__ import annotations

import asyncio
import logging

import httpx
import pandas as pd

from marocstats.config import Settings, get_settings
from marocstats.context import DataContext, DatasetView
from marocstats.ingestion.datasets import DATASET_REGISTRY, DatasetConfig
from marocstats.ingestion.sources import MissingInputError, RawInputs, fetch_inputs
from marocstats.processing.cleaner import clean_dataframe
from marocstats.processing.indexer import build_index
from marocstats.processing.matcher import RegionMatcher
from marocstats.processing.query import QueryEngine
from marocstats.processing.transformer import frame_to_records

logger = logging.getLogger(__name__)


def build_dataset(df: pd.DataFrame, config: DatasetConfig) -> DatasetView:
    """Clean, reshape and index one table."""
    clean = clean_dataframe(df, config)
    records = frame_to_records(clean, config)
    index = build_index(records, config.years)
    engine = QueryEngine(
        index,
        reference=config.synthetic_reference,
        matcher=RegionMatcher(fallback_regions=config.synthetic_reference),
        export_columns=config.export_columns,
        default_locale=config.default_locale,
    )
    return DatasetView(config=config, records=records, index=index, engine=engine)


def build_context(inputs: RawInputs, settings: Settings | None = None) -> DataContext:
    settings = settings or get_settings()
    datasets = {
        "retirees": build_dataset(inputs.retirees, DATASET_REGISTRY["retirees"]),
        "unemployment": build_dataset(inputs.unemployment, DATASET_REGISTRY["unemployment"]),
    }
    return DataContext(
        datasets=datasets,
        features=inputs.features,
        name_property=settings.geo_name_property,
    )


async def load_context(
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> DataContext:
    """Fetch every input and build a fresh context.

    Raises ``MissingInputError`` when any input is unavailable; no partial
    context is ever returned.
    """
    settings = settings or get_settings()
    logger.info("=== Loading inputs ===")
    try:
        inputs = await fetch_inputs(settings, client=client)
    except MissingInputError:
        logger.error("Initialization aborted: a required input is unavailable", exc_info=True)
        raise
    logger.info("=== Building indexes ===")
    context = build_context(inputs, settings)
    logger.info("Context ready: %s", context.summary())
    return context


def load_context_sync(settings: Settings | None = None) -> DataContext:
    """Blocking wrapper for callers without a running event loop."""
    return asyncio.run(load_context(settings))


def run_pipeline() -> dict[str, int]:
    """Load everything once and report what was indexed."""
    context = load_context_sync()
    counts = context.summary()
    logger.info("=== Pipeline complete ===")
    logger.info("Loaded: %s", counts)
    return counts


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    run_pipeline()

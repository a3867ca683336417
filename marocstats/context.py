"""Loaded data shared by the API and the dashboard.

A ``DataContext`` is built once after every input loaded successfully and is
read-only afterwards. Reloading builds a new context and the caller swaps the
reference; nothing is updated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from marocstats.ingestion.datasets import DatasetConfig
from marocstats.models import MergedFeature, RawRecord
from marocstats.processing.indexer import DataIndex
from marocstats.processing.merge import merge_features
from marocstats.processing.query import QueryEngine


@dataclass
class DatasetView:
    config: DatasetConfig
    records: list[RawRecord]
    index: DataIndex
    engine: QueryEngine


@dataclass
class DataContext:
    datasets: dict[str, DatasetView]
    features: list[dict[str, Any]]
    name_property: str = "name"
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def dataset(self, key: str) -> DatasetView:
        """Return the view for *key*, raising ``KeyError`` for unknown datasets."""
        return self.datasets[key]

    def merged_features(self, year: str | None = None) -> list[MergedFeature]:
        """Boundaries joined with retiree counts, recomputed on every call."""
        view = self.dataset("retirees")
        return merge_features(
            self.features,
            view.index,
            matcher=view.engine.matcher,
            year=year or view.config.reference_year,
            name_property=self.name_property,
        )

    def summary(self) -> dict[str, int]:
        counts = {key: len(view.records) for key, view in self.datasets.items()}
        counts["features"] = len(self.features)
        return counts

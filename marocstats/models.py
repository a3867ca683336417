"""Domain records shared by the processing modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class RawRecord:
    """One observation row: a region/segment/locale cell and its yearly values."""

    region: str | None
    segment: str | None
    locale: str | None
    values: Mapping[str, float | None] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))


@dataclass(frozen=True)
class SeriesPoint:
    year: str
    value: float


@dataclass(frozen=True)
class LocaleSplit:
    urban: float | None
    rural: float | None


@dataclass(frozen=True)
class ScaleStats:
    min: float
    max: float
    mean: float


@dataclass(frozen=True)
class RegionSeries:
    name: str
    data: list[SeriesPoint]


@dataclass(frozen=True)
class Comparison:
    region_a: RegionSeries
    region_b: RegionSeries


@dataclass
class MergedFeature:
    """A boundary feature joined with its resolved retiree counts."""

    feature: dict[str, Any]
    name: str
    region: str | None
    total: float = 0.0
    masculin: float = 0.0
    feminin: float = 0.0

    @property
    def has_data(self) -> bool:
        return self.total > 0

    @property
    def feminin_share(self) -> float | None:
        """Share of women in the total, as a percentage with one decimal."""
        if not self.has_data:
            return None
        return round(self.feminin / self.total * 100, 1)

    @property
    def masculin_share(self) -> float | None:
        if not self.has_data:
            return None
        return round(self.masculin / self.total * 100, 1)

    def to_geojson(self) -> dict[str, Any]:
        """Return a new GeoJSON feature with the joined statistics as properties."""
        properties = dict(self.feature.get("properties") or {})
        properties.update({
            "region": self.region,
            "total": self.total,
            "masculin": self.masculin,
            "feminin": self.feminin,
            "feminin_share": self.feminin_share,
        })
        return {
            "type": "Feature",
            "geometry": self.feature.get("geometry"),
            "properties": properties,
        }

"""Registry of available datasets and their configurations."""

from __future__ import annotations

from dataclasses import dataclass, field

from marocstats.reference import (
    LOCALE_NATIONAL,
    LOCALE_RURAL,
    LOCALE_URBAN,
    SEGMENT_FEMALE,
    SEGMENT_MALE,
    SEGMENT_TOTAL,
    SYNTHETIC_UNEMPLOYMENT,
    UNEMPLOYMENT_YEARS,
)


@dataclass(frozen=True)
class DatasetConfig:
    """Schema of a flat statistics table.

    Long tables name their segment and locale columns and carry one column per
    year. Wide tables have no segment column: each entry of ``value_columns``
    maps a segment to the column holding its value for ``reference_year``.
    """

    key: str
    name: str
    description: str
    region_column: str
    unit: str
    segment_column: str | None = None
    locale_column: str | None = None
    year_columns: tuple[str, ...] = ()
    value_columns: dict[str, str] = field(default_factory=dict)
    reference_year: str | None = None
    default_locale: str = LOCALE_NATIONAL
    default_segment: str = SEGMENT_TOTAL
    excluded_regions: tuple[str, ...] = ()
    header_markers: tuple[str, ...] = ()
    synthetic_reference: dict[str, dict[str, float]] = field(default_factory=dict)
    export_columns: dict[str, str] = field(default_factory=dict)
    source: str = "HCP"

    @property
    def years(self) -> tuple[str, ...]:
        if self.year_columns:
            return self.year_columns
        return (self.reference_year,) if self.reference_year else ()

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.value_columns) or (SEGMENT_TOTAL, SEGMENT_MALE, SEGMENT_FEMALE)


DATASET_REGISTRY: dict[str, DatasetConfig] = {
    "retirees": DatasetConfig(
        key="retirees",
        name="Repartition des retraites par region",
        description="Nombre de retraites par region et par sexe (2022).",
        region_column="region",
        unit="retraites",
        value_columns={
            SEGMENT_TOTAL: "total",
            SEGMENT_MALE: "masculin",
            SEGMENT_FEMALE: "feminin",
        },
        reference_year="2022",
        excluded_regions=("TOTAL",),
        export_columns={LOCALE_NATIONAL: "Nombre de retraites"},
        source="CMR / CNSS",
    ),
    "unemployment": DatasetConfig(
        key="unemployment",
        name="Taux de chomage regional",
        description="Taux de chomage par region, sexe et milieu de residence, 2015-2023.",
        region_column="Région",
        unit="%",
        segment_column="Sexe",
        locale_column="Milieu",
        year_columns=UNEMPLOYMENT_YEARS,
        header_markers=("Taux de chômage", "Sexe"),
        synthetic_reference=SYNTHETIC_UNEMPLOYMENT,
        export_columns={
            LOCALE_NATIONAL: "Taux de Chômage National",
            LOCALE_URBAN: "Taux Urbain",
            LOCALE_RURAL: "Taux Rural",
        },
        source="HCP",
    ),
}

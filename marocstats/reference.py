"""Static reference tables for Moroccan regions.

The synonym table maps the region names used in the statistics tables to the
spellings found in external geographic data (accented, transliterated,
pre-2015 names). Its insertion order is significant: the region matcher walks
it top to bottom and the first satisfying entry wins.
"""

from __future__ import annotations

# Canonical name (as in the statistics tables) -> alternate spellings.
REGION_SYNONYMS: dict[str, tuple[str, ...]] = {
    "Tanger-Tétouan-Al Hoceïma": ("Tanger-Tetouan-Al Hoceima", "Tangier-Tetouan-Al Hoceima"),
    "Oriental": ("Oriental", "L'Oriental"),
    "Fès-Meknès": ("Fes-Meknes", "Fès-Meknès", "Fez-Meknes"),
    "Rabat-Salé-Kénitra": ("Rabat-Sale-Kenitra", "Rabat-Salé-Kénitra"),
    "Béni Mellal-Khénifra": ("Beni Mellal-Khenifra", "Béni Mellal-Khénifra"),
    "Casablanca-settat": ("Casablanca-Settat", "Grand Casablanca"),
    "Marrakech-safi": ("Marrakech-Safi", "Marrakesh-Safi"),
    "Drâa-Tafilalet": ("Draa-Tafilalet", "Drâa-Tafilalet"),
    "Souss-Massa": ("Souss-Massa", "Souss-Massa-Draa"),
    "Régions du Sud": ("Guelmim-Oued Noun", "Laayoune-Sakia El Hamra", "Dakhla-Oued Ed-Dahab"),
    "Ensemble": ("Ensemble", "National"),
}

# National aggregate bucket, never listed as a selectable region.
AGGREGATE_REGION = "Ensemble"

# ---------------------------------------------------------------------------
# Segments and locales
# ---------------------------------------------------------------------------

SEGMENT_TOTAL = "Total"
SEGMENT_MALE = "Masculin"
SEGMENT_FEMALE = "Féminin"

LOCALE_NATIONAL = "National"
LOCALE_URBAN = "Urbain"
LOCALE_RURAL = "Rural"

UNEMPLOYMENT_YEARS: tuple[str, ...] = (
    "2015", "2016", "2017", "2018", "2019", "2020", "2021", "2022", "2023",
)

# ---------------------------------------------------------------------------
# Gap filling
# ---------------------------------------------------------------------------

# Unemployment baselines (2019 level) for regions the survey tables do not
# break out. A synthetic value for year Y is
#   baseline + (index(Y) - SYNTHETIC_BASELINE_INDEX) * SYNTHETIC_YEARLY_STEP
# rounded to one decimal.
SYNTHETIC_UNEMPLOYMENT: dict[str, dict[str, float]] = {
    "Fès-Meknès": {LOCALE_NATIONAL: 12.5, LOCALE_URBAN: 15.2, LOCALE_RURAL: 8.3},
    "Rabat-Salé-Kénitra": {LOCALE_NATIONAL: 14.8, LOCALE_URBAN: 17.5, LOCALE_RURAL: 9.1},
    "Béni Mellal-Khénifra": {LOCALE_NATIONAL: 9.2, LOCALE_URBAN: 11.8, LOCALE_RURAL: 6.5},
    "Casablanca-settat": {LOCALE_NATIONAL: 16.5, LOCALE_URBAN: 18.9, LOCALE_RURAL: 10.2},
    "Marrakech-safi": {LOCALE_NATIONAL: 11.3, LOCALE_URBAN: 14.6, LOCALE_RURAL: 7.8},
    "Drâa-Tafilalet": {LOCALE_NATIONAL: 8.7, LOCALE_URBAN: 10.9, LOCALE_RURAL: 6.2},
    "Souss-Massa": {LOCALE_NATIONAL: 10.5, LOCALE_URBAN: 13.2, LOCALE_RURAL: 7.1},
    "Régions du Sud": {LOCALE_NATIONAL: 15.8, LOCALE_URBAN: 19.2, LOCALE_RURAL: 11.5},
}

SYNTHETIC_BASELINE_INDEX = 4  # 2019
SYNTHETIC_YEARLY_STEP = 0.3

# Placeholder written in exported cells that have no value.
ABSENT_PLACEHOLDER = "-"

# Colour-scale statistics returned when no region has a value.
DEFAULT_SCALE = (0.0, 20.0, 10.0)

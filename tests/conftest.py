"""Shared fixtures: small in-memory versions of the three inputs."""

from __future__ import annotations

import pandas as pd
import pytest

from marocstats.ingestion.sources import RawInputs
from marocstats.pipeline import build_context

YEARS = ["2015", "2016", "2017", "2018", "2019", "2020", "2021", "2022", "2023"]


def _row(sexe, region, milieu, values):
    row = {"Sexe": sexe, "Région": region, "Milieu": milieu}
    row.update(dict(zip(YEARS, values)))
    return row


@pytest.fixture
def unemployment_df() -> pd.DataFrame:
    """Simulates the unemployment CSV as parsed (every cell is text)."""
    return pd.DataFrame([
        _row("Total", "Ensemble", "National", ["9,7", "9,4", "10,2", "9,5", "9,2", "11,9", "12,3", "11,8", "13,0"]),
        _row("Total", "Oriental", "National", ["17,1", "15,5", "15,8", "16,3", "17,4", "18,7", "18,9", "20,8", "22,0"]),
        _row("Total", "Oriental", "Urbain", ["21,2", "19,6", "20,0", "20,5", "21,8", "22,9", "23,1", "25,5", "26,6"]),
        _row("Total", "Oriental", "Rural", ["-", "-", "-", "-", "-", "-", "-", "-", "-"]),
        _row("Total", "Tanger-Tétouan-Al Hoceïma", "National", ["9.4", "9.0", "-", "8.9", "", "10.7", "n/a", "10.5", "11.2"]),
        _row("Féminin", "Oriental", "National", ["25,4", "22,6", "23,1", "24,0", "25,9", "26,4", "27,0", "29,8", "31,2"]),
        _row("Sexe", "Région", "Milieu", YEARS),
        _row("Source : HCP", "", "", [""] * 9),
    ])


@pytest.fixture
def retirees_df() -> pd.DataFrame:
    """Simulates the retiree JSON array after loading."""
    return pd.DataFrame([
        {"region": "Oriental", "masculin": 4000, "feminin": 2000, "total": 6000},
        {"region": "Casablanca-Settat", "masculin": 75000, "feminin": 25000, "total": 100000},
        {"region": "Souss-Massa", "masculin": 0, "feminin": 0, "total": 0},
        {"region": "TOTAL", "masculin": 79000, "feminin": 27000, "total": 106000},
    ])


def _feature(name: str) -> dict:
    return {
        "type": "Feature",
        "properties": {"name": name},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[-3.0, 33.0], [-3.0, 34.0], [-2.0, 34.0], [-2.0, 33.0], [-3.0, 33.0]]],
        },
    }


@pytest.fixture
def features() -> list[dict]:
    return [
        _feature("L'Oriental"),
        _feature("Casablanca-Settat"),
        _feature("Souss-Massa"),
        _feature("Dakhla-Oued Ed-Dahab"),
    ]


@pytest.fixture
def context(unemployment_df, retirees_df, features):
    return build_context(RawInputs(features=features, retirees=retirees_df, unemployment=unemployment_df))

"""Tests for input fetching and parsing, without network access."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from marocstats.config import DATA_DIR, Settings
from marocstats.ingestion.sources import (
    MissingInputError,
    fetch_bytes,
    fetch_inputs,
    parse_geography,
    parse_retirees,
    parse_unemployment,
)
from marocstats.pipeline import load_context_sync

URL = "https://example.org/chomage.csv"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _fetch(handler, location=URL, retries=3):
    async with _client(handler) as client:
        return await fetch_bytes(client, location, retries=retries, backoff=0)


# ── Fetching ──────────────────────────────────────────────────────────────

class TestFetchBytes:
    def test_retries_transient_status(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, content=b"ok")

        assert asyncio.run(_fetch(handler)) == b"ok"
        assert len(calls) == 3

    def test_gives_up_after_retries(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(502)

        with pytest.raises(MissingInputError):
            asyncio.run(_fetch(handler, retries=2))
        assert len(calls) == 2

    def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(404)

        with pytest.raises(MissingInputError, match="404"):
            asyncio.run(_fetch(handler))
        assert len(calls) == 1

    def test_transport_error_is_retried(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MissingInputError):
            asyncio.run(_fetch(handler, retries=2))
        assert len(calls) == 2

    def test_local_file(self, tmp_path):
        path = tmp_path / "retraites.json"
        path.write_bytes(b"[]")
        assert asyncio.run(_fetch(lambda r: httpx.Response(500), location=str(path))) == b"[]"

    def test_missing_local_file(self, tmp_path):
        with pytest.raises(MissingInputError):
            asyncio.run(_fetch(lambda r: httpx.Response(500), location=str(tmp_path / "absent.csv")))


# ── Parsers ───────────────────────────────────────────────────────────────

class TestParsers:
    def test_geography_feature_collection(self):
        payload = json.dumps({"type": "FeatureCollection", "features": [{"type": "Feature"}]}).encode()
        assert parse_geography(payload) == [{"type": "Feature"}]

    def test_topojson_converted_to_features(self):
        payload = json.dumps({
            "type": "Topology",
            "objects": {
                "regions": {
                    "type": "GeometryCollection",
                    "geometries": [
                        {"type": "Polygon", "arcs": [[0]], "properties": {"name": "L'Oriental"}},
                    ],
                },
            },
            "arcs": [[[-3.0, 33.0], [-3.0, 34.0], [-2.0, 34.0], [-2.0, 33.0], [-3.0, 33.0]]],
        }).encode()
        features = parse_geography(payload)
        assert len(features) == 1
        assert features[0]["type"] == "Feature"
        assert features[0]["properties"]["name"] == "L'Oriental"
        assert features[0]["geometry"]["type"] in ("Polygon", "MultiPolygon")

    def test_invalid_json_rejected(self):
        with pytest.raises(MissingInputError):
            parse_geography(b"{not json")

    def test_retirees_must_be_array(self):
        with pytest.raises(MissingInputError):
            parse_retirees(b'{"region": "Oriental"}')
        df = parse_retirees('[{"region": "Oriental", "total": 6000}]'.encode())
        assert df["total"].tolist() == [6000]

    def test_unemployment_semicolon_detected(self):
        payload = "Sexe;Région;Milieu;2015\nTotal;Oriental;National;17,1\n".encode("utf-8-sig")
        df = parse_unemployment(payload)
        assert list(df.columns) == ["Sexe", "Région", "Milieu", "2015"]
        assert df["2015"].tolist() == ["17,1"]

    def test_unemployment_comma_detected(self):
        df = parse_unemployment(b"Sexe,R\xc3\xa9gion,Milieu,2015\nTotal,Oriental,National,-\n")
        assert df["Région"].tolist() == ["Oriental"]
        assert df["2015"].tolist() == ["-"]


# ── Loading ───────────────────────────────────────────────────────────────

def _bundled_settings(**overrides) -> Settings:
    values = {
        "geo_source": str(DATA_DIR / "regions.geojson"),
        "retirees_source": str(DATA_DIR / "retraites_2022.json"),
        "unemployment_source": str(DATA_DIR / "chomage_regional.csv"),
        "retry_backoff": 0.0,
    }
    values.update(overrides)
    return Settings(**values)


class TestFetchInputs:
    def test_any_missing_input_aborts(self, tmp_path):
        settings = _bundled_settings(retirees_source=str(tmp_path / "absent.json"))
        with pytest.raises(MissingInputError):
            asyncio.run(fetch_inputs(settings))

    def test_failure_cancels_pending_fetches(self, tmp_path):
        async def slow(request):
            await asyncio.sleep(0.2)
            return httpx.Response(200, content=b"{}")

        async def run():
            settings = _bundled_settings(
                geo_source="https://example.org/regions.geojson",
                retirees_source=str(tmp_path / "absent.json"),
                unemployment_source=URL,
            )
            async with _client(slow) as client:
                with pytest.raises(MissingInputError):
                    await fetch_inputs(settings, client=client)
            return [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]

        assert asyncio.run(run()) == []

    def test_bundled_data(self):
        inputs = asyncio.run(fetch_inputs(_bundled_settings()))
        assert len(inputs.features) == 12
        assert len(inputs.retirees) == 13

    def test_bundled_context(self):
        context = load_context_sync(_bundled_settings())
        engine = context.dataset("unemployment").engine
        assert engine.value_at("Fès-Meknès", "2023", "Total") == 14.5
        # 2015 is a gap in the table, filled from the baseline
        assert engine.value_at("Fès-Meknès", "2015", "Total") == 11.3
        merged = {m.name: m for m in context.merged_features()}
        assert merged["L'Oriental"].total == 50041
        assert all(m.has_data for m in merged.values())

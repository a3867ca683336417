"""Ingestion of the three static inputs: boundaries, retirees, unemployment.

Each source is either an http(s) URL or a local path. The three fetches run
concurrently and must all succeed; any failure surfaces as
``MissingInputError`` and aborts initialization.
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import geopandas as gpd
import httpx
import pandas as pd

from marocstats.config import Settings

logger = logging.getLogger(__name__)

RETRY_STATUSES = {408, 429, 500, 502, 503, 504}


class MissingInputError(RuntimeError):
    """A required input could not be fetched or parsed."""


@dataclass
class RawInputs:
    features: list[dict[str, Any]]
    retirees: pd.DataFrame
    unemployment: pd.DataFrame


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def build_timeout(settings: Settings) -> httpx.Timeout:
    # Timeouts (connect, read) in seconds
    return httpx.Timeout(settings.fetch_timeout, connect=min(settings.fetch_timeout, 10.0))


async def fetch_bytes(
    client: httpx.AsyncClient,
    location: str,
    retries: int = 3,
    backoff: float = 1.0,
) -> bytes:
    """Return the raw content of *location*, retrying transient HTTP failures."""
    if not _is_url(location):
        try:
            return await asyncio.to_thread(Path(location).read_bytes)
        except OSError as exc:
            raise MissingInputError(f"Cannot read {location}: {exc}") from exc

    wait = backoff
    for attempt in range(1, retries + 1):
        try:
            resp = await client.get(location, follow_redirects=True)
            if resp.status_code in RETRY_STATUSES and attempt < retries:
                logger.warning(
                    "HTTP %d from %s (attempt %d/%d), retrying",
                    resp.status_code, location, attempt, retries,
                )
                await asyncio.sleep(wait)
                wait *= 2
                continue
            resp.raise_for_status()
            return resp.content
        except httpx.HTTPStatusError as exc:
            raise MissingInputError(f"HTTP {exc.response.status_code} from {location}") from exc
        except httpx.TransportError as exc:
            if attempt >= retries:
                raise MissingInputError(
                    f"Fetching {location} failed after {retries} attempts: {exc}"
                ) from exc
            logger.warning(
                "Error fetching %s (attempt %d/%d): %s", location, attempt, retries, exc
            )
            await asyncio.sleep(wait)
            wait *= 2
    raise MissingInputError(f"Fetching {location} failed")


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def _decode_json(payload: bytes, label: str) -> Any:
    try:
        return json.loads(payload.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MissingInputError(f"Invalid JSON in {label}: {exc}") from exc


def parse_geography(payload: bytes) -> list[dict[str, Any]]:
    """Return the features of a GeoJSON FeatureCollection or TopoJSON topology."""
    data = _decode_json(payload, "geography")
    if isinstance(data, dict) and data.get("type") == "Topology":
        return _topology_features(payload)
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise MissingInputError("Geography input is not a GeoJSON FeatureCollection")
    features = data.get("features") or []
    logger.info("Loaded %d boundary features", len(features))
    return features


def _topology_features(payload: bytes) -> list[dict[str, Any]]:
    """Decode a TopoJSON topology into GeoJSON features (first object only)."""
    try:
        gdf = gpd.read_file(io.BytesIO(payload))
    except (RuntimeError, ValueError, OSError) as exc:
        raise MissingInputError(f"Invalid TopoJSON geography: {exc}") from exc
    if gdf.empty:
        raise MissingInputError("TopoJSON geography has no features")
    features = json.loads(gdf.to_json(drop_id=True))["features"]
    logger.info("Loaded %d boundary features from TopoJSON", len(features))
    return features


def parse_retirees(payload: bytes) -> pd.DataFrame:
    """Parse the flat ``[{region, masculin, feminin, total}, ...]`` array."""
    data = _decode_json(payload, "retirees")
    if not isinstance(data, list):
        raise MissingInputError("Retirees input must be a JSON array")
    df = pd.DataFrame.from_records([row for row in data if isinstance(row, dict)])
    logger.info("Loaded %d retiree rows", len(df))
    return df


def parse_unemployment(payload: bytes, sep: str | None = None) -> pd.DataFrame:
    """Parse the unemployment CSV, keeping every cell as text.

    Automatically detects the separator if not provided.
    """
    try:
        raw = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MissingInputError(f"Unemployment input is not UTF-8: {exc}") from exc
    if sep is None:
        first_line = raw.split("\n", maxsplit=1)[0]
        sep = ";" if first_line.count(";") > first_line.count(",") else ","
    try:
        df = pd.read_csv(
            io.StringIO(raw), sep=sep, dtype=str, keep_default_na=False, skip_blank_lines=True
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise MissingInputError(f"Invalid unemployment CSV: {exc}") from exc
    logger.info("Loaded %d unemployment rows x %d columns", len(df), len(df.columns))
    return df


# ---------------------------------------------------------------------------
# High-level loader
# ---------------------------------------------------------------------------


async def fetch_inputs(
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> RawInputs:
    """Fetch and parse the three inputs concurrently.

    The first failure cancels the fetches still in flight before the client
    is closed.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=build_timeout(settings))
    tasks = [
        asyncio.ensure_future(
            fetch_bytes(client, location, settings.fetch_retries, settings.retry_backoff)
        )
        for location in (
            settings.geo_source,
            settings.retirees_source,
            settings.unemployment_source,
        )
    ]
    try:
        geo, retirees, unemployment = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    finally:
        if owns_client:
            await client.aclose()

    return RawInputs(
        features=parse_geography(geo),
        retirees=parse_retirees(retirees),
        unemployment=parse_unemployment(unemployment),
    )

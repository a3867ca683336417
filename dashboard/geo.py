"""GeoJSON helpers for Morocco region maps."""

from __future__ import annotations

from typing import Any

from shapely.errors import GeometryTypeError
from shapely.geometry import shape

# Rough map bounds for Morocco including the southern provinces
LON_RANGE = [-17.5, -0.5]
LAT_RANGE = [20.5, 36.2]


def feature_id_key(name_property: str) -> str:
    """Plotly ``featureidkey`` for the property carrying the region name."""
    return f"properties.{name_property}"


def feature_centroid(feature: dict[str, Any]) -> tuple[float, float] | None:
    """Area centroid of the feature as (lon, lat), used to place a bubble.

    Falls back to a point inside the shape when the centroid lies outside it
    (concave or multi-part regions).
    """
    geometry = feature.get("geometry")
    if not geometry:
        return None
    try:
        geom = shape(geometry)
    except (GeometryTypeError, ValueError, KeyError, TypeError):
        return None
    if geom.is_empty:
        return None
    point = geom.centroid
    if not geom.contains(point):
        point = geom.representative_point()
    return point.x, point.y

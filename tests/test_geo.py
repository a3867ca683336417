"""Tests for the map helpers used by the dashboard."""

from __future__ import annotations

import pytest
from shapely.geometry import Point, shape

from dashboard.geo import feature_centroid, feature_id_key


def _polygon(ring):
    return {"type": "Feature", "properties": {}, "geometry": {"type": "Polygon", "coordinates": [ring]}}


class TestFeatureCentroid:
    def test_area_centroid_ignores_vertex_density(self):
        dense_edge = [[10.0, y / 10] for y in range(1, 100)]
        ring = [[0.0, 0.0], [10.0, 0.0], *dense_edge, [10.0, 10.0], [0.0, 10.0], [0.0, 0.0]]
        lon, lat = feature_centroid(_polygon(ring))
        assert lon == pytest.approx(5.0)
        assert lat == pytest.approx(5.0)

    def test_concave_region_gets_point_inside(self):
        ring = [[0, 0], [10, 0], [10, 10], [8, 10], [8, 2], [2, 2], [2, 10], [0, 10], [0, 0]]
        feature = _polygon(ring)
        lon, lat = feature_centroid(feature)
        assert shape(feature["geometry"]).contains(Point(lon, lat))

    def test_multipolygon(self):
        feature = {
            "type": "Feature",
            "geometry": {
                "type": "MultiPolygon",
                "coordinates": [
                    [[[0, 0], [2, 0], [2, 2], [0, 2], [0, 0]]],
                    [[[0, 4], [2, 4], [2, 6], [0, 6], [0, 4]]],
                ],
            },
        }
        lon, lat = feature_centroid(feature)
        assert shape(feature["geometry"]).contains(Point(lon, lat))

    def test_missing_geometry(self):
        assert feature_centroid({"type": "Feature", "geometry": None}) is None
        assert feature_centroid({"type": "Feature"}) is None


class TestFeatureIdKey:
    def test_follows_name_property(self):
        assert feature_id_key("name") == "properties.name"
        assert feature_id_key("nom_region") == "properties.nom_region"

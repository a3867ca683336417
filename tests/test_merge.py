"""Tests for the join of boundary features with retiree counts."""

from __future__ import annotations

import copy

from marocstats.processing.merge import bubble_features, find_merged, merge_features


class TestMergeFeatures:
    def test_one_entry_per_feature_in_order(self, context, features):
        merged = context.merged_features()
        assert [m.name for m in merged] == [f["properties"]["name"] for f in features]

    def test_synonym_resolution_and_shares(self, context):
        oriental = context.merged_features()[0]
        assert oriental.region == "Oriental"
        assert oriental.total == 6000
        assert oriental.feminin_share == 33.3
        assert oriental.masculin_share == 66.7

    def test_unresolved_feature_has_zero_counts(self, context):
        dakhla = context.merged_features()[3]
        assert dakhla.region is None
        assert (dakhla.total, dakhla.masculin, dakhla.feminin) == (0.0, 0.0, 0.0)
        assert dakhla.feminin_share is None

    def test_zero_total_is_not_a_bubble(self, context):
        bubbles = bubble_features(context.merged_features())
        assert [b.region for b in bubbles] == ["Oriental", "Casablanca-Settat"]
        assert all(b.total > 0 for b in bubbles)

    def test_custom_name_property(self, context):
        view = context.dataset("retirees")
        features = [{"type": "Feature", "properties": {"nom": "Casablanca-Settat"}, "geometry": None}]
        merged = merge_features(features, view.index, name_property="nom")
        assert merged[0].total == 100000
        assert merged[0].feminin_share == 25.0

    def test_feature_without_properties(self, context):
        view = context.dataset("retirees")
        merged = merge_features([{"type": "Feature", "geometry": None}], view.index)
        assert merged[0].region is None
        assert not merged[0].has_data


class TestGeoJSON:
    def test_input_feature_is_not_mutated(self, context, features):
        before = copy.deepcopy(features)
        for m in context.merged_features():
            m.to_geojson()
        assert features == before

    def test_joined_properties(self, context):
        out = context.merged_features()[0].to_geojson()
        assert out["type"] == "Feature"
        assert out["geometry"]["type"] == "Polygon"
        assert out["properties"]["name"] == "L'Oriental"
        assert out["properties"]["region"] == "Oriental"
        assert out["properties"]["feminin_share"] == 33.3


class TestFindMerged:
    def test_by_boundary_or_region_name(self, context):
        merged = context.merged_features()
        assert find_merged(merged, "L'Oriental").region == "Oriental"
        assert find_merged(merged, "Oriental").name == "L'Oriental"

    def test_by_loose_spelling(self, context):
        assert find_merged(context.merged_features(), "casablanca settat").total == 100000

    def test_unknown(self, context):
        assert find_merged(context.merged_features(), "Atlantis") is None

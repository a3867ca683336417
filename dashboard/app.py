"""MarocStats — Streamlit interactive dashboard."""

from __future__ import annotations

import io
import json
import math

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from dashboard.geo import LAT_RANGE, LON_RANGE, feature_centroid, feature_id_key
from marocstats.context import DataContext
from marocstats.ingestion.sources import MissingInputError
from marocstats.pipeline import load_context_sync
from marocstats.processing.merge import bubble_features, find_merged
from marocstats.reference import (
    LOCALE_NATIONAL,
    LOCALE_RURAL,
    LOCALE_URBAN,
    SEGMENT_FEMALE,
    SEGMENT_MALE,
    SEGMENT_TOTAL,
)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="MarocStats — Statistiques regionales",
    page_icon="🗺️",
    layout="wide",
    initial_sidebar_state="expanded",
)

MALE_COLOR = "#3498db"
FEMALE_COLOR = "#e74c3c"


@st.cache_resource
def get_context() -> DataContext:
    return load_context_sync()


def load_or_stop() -> DataContext:
    try:
        return get_context()
    except MissingInputError as exc:
        st.error(f"Erreur lors du chargement des donnees : {exc}")
        st.stop()


def format_number(value: float | None) -> str:
    if value is None:
        return "Donnee indisponible"
    return f"{value:,.0f}".replace(",", " ")


def download_button_csv(df: pd.DataFrame, filename: str, label: str = "Telecharger CSV"):
    """Render a CSV download button."""
    buf = io.BytesIO()
    df.to_csv(buf, index=False)
    st.download_button(label, buf.getvalue(), file_name=filename, mime="text/csv")


def download_button_excel(df: pd.DataFrame, filename: str, label: str = "Telecharger Excel"):
    """Render an Excel download button."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name="data")
    st.download_button(label, buf.getvalue(), file_name=filename, mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")


def selected_points(event) -> list[dict]:
    """Points of a plotly selection event, empty when nothing was clicked."""
    if not event:
        return []
    selection = event.get("selection") if isinstance(event, dict) else getattr(event, "selection", None)
    if not selection:
        return []
    return list(selection.get("points", []))


def _point_region(point: dict) -> str | None:
    custom = point.get("customdata")
    if isinstance(custom, list):
        custom = custom[0] if custom else None
    return custom or point.get("x")


def apply_selection(event, widget_key: str, state_key: str):
    """Toggle the selected region from a new click on a chart.

    Selections persist across reruns, so only a selection that differs from
    the last one handled for this chart counts as a click. Clicking the
    selected region again clears the selection.
    """
    regions = [r for r in (_point_region(p) for p in selected_points(event)) if r]
    last_key = f"_{widget_key}_last"
    if regions == st.session_state.get(last_key, []):
        return
    st.session_state[last_key] = regions
    if not regions:
        return
    region = regions[0]
    st.session_state[state_key] = None if st.session_state.get(state_key) == region else region
    st.rerun()


def base_geo_layout(fig: go.Figure, height: int = 650):
    fig.update_geos(
        visible=False,
        projection_type="mercator",
        lonaxis_range=LON_RANGE,
        lataxis_range=LAT_RANGE,
    )
    fig.update_layout(margin=dict(l=0, r=0, t=40, b=0), height=height, template="plotly_white")


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

st.sidebar.title("🗺️ MarocStats")
st.sidebar.markdown("**Statistiques regionales du Maroc**  \nRetraites et chomage")
st.sidebar.markdown("---")

page = st.sidebar.radio(
    "Navigation",
    [
        "Retraites par region",
        "Chomage regional",
        "Export",
    ],
)

st.sidebar.markdown("---")
if st.sidebar.button("Recharger les donnees"):
    get_context.clear()
st.sidebar.caption("Sources : HCP, CMR / CNSS.")


# ---------------------------------------------------------------------------
# Page: Retraites par region
# ---------------------------------------------------------------------------

def page_retirees(context: DataContext):
    st.title("👵 Retraites par region (2022)")
    st.session_state.setdefault("retiree_region", None)
    st.session_state.setdefault("retiree_sorted", False)

    merged = context.merged_features()
    with_data = bubble_features(merged)
    if not with_data:
        st.warning("Aucune region ne correspond aux donnees des retraites.")
        return

    geojson = {"type": "FeatureCollection", "features": [m.feature for m in merged]}
    selected = st.session_state["retiree_region"]

    # Base boundaries (all features) + proportional bubbles (features with data)
    fig = go.Figure(go.Choropleth(
        geojson=geojson,
        featureidkey=feature_id_key(context.name_property),
        locations=[m.name for m in merged],
        z=[1 if m.region == selected and selected else 0 for m in merged],
        colorscale=[[0, "#ecf0f1"], [1, "#f39c12"]],
        showscale=False,
        marker_line_color="white",
        hoverinfo="skip",
    ))
    centroids = [feature_centroid(m.feature) for m in with_data]
    max_total = max(m.total for m in with_data)
    fig.add_trace(go.Scattergeo(
        lon=[c[0] if c else None for c in centroids],
        lat=[c[1] if c else None for c in centroids],
        customdata=[m.region for m in with_data],
        text=[
            f"<b>{m.name}</b><br>Total : {format_number(m.total)}"
            f"<br>Masculin : {format_number(m.masculin)}"
            f"<br>Feminin : {format_number(m.feminin)}"
            f"<br>% Feminin : {m.feminin_share}%"
            for m in with_data
        ],
        hoverinfo="text",
        marker=dict(
            size=[2 * 50 * math.sqrt(m.total / max_total) for m in with_data],
            color=["#f39c12" if m.region == selected else "#2980b9" for m in with_data],
            opacity=0.75,
            line=dict(color="white", width=1),
        ),
        name="Retraites",
    ))
    base_geo_layout(fig)
    fig.update_layout(title="Nombre de retraites par region", showlegend=False)

    col_map, col_side = st.columns([3, 2])
    with col_map:
        event = st.plotly_chart(fig, use_container_width=True, on_select="rerun", key="retiree_map")
        apply_selection(event, "retiree_map", "retiree_region")

    with col_side:
        sort_label = "Ordre alphabetique" if st.session_state["retiree_sorted"] else "Trier par valeur"
        c1, c2 = st.columns(2)
        if c1.button(sort_label):
            st.session_state["retiree_sorted"] = not st.session_state["retiree_sorted"]
            st.rerun()
        if c2.button("Reinitialiser la selection"):
            st.session_state["retiree_region"] = None
            st.rerun()

        bars = pd.DataFrame([
            {"region": m.region, "total": m.total, "masculin": m.masculin, "feminin": m.feminin}
            for m in with_data
        ]).drop_duplicates(subset=["region"])
        if st.session_state["retiree_sorted"]:
            bars = bars.sort_values("total", ascending=False)
        fig_bar = px.bar(
            bars,
            x="region",
            y="total",
            custom_data=["region"],
            title="Nombre de retraites",
            labels={"total": "Retraites", "region": ""},
        )
        fig_bar.update_traces(marker_color=[
            "#f39c12" if r == st.session_state["retiree_region"] else "#2980b9" for r in bars["region"]
        ])
        fig_bar.update_layout(template="plotly_white", xaxis_tickangle=-45, height=450)
        bar_event = st.plotly_chart(fig_bar, use_container_width=True, on_select="rerun", key="retiree_bars")
        apply_selection(bar_event, "retiree_bars", "retiree_region")

    # Donut chart for the selected region
    st.markdown("---")
    region = st.session_state["retiree_region"]
    current = find_merged(with_data, region, context.dataset("retirees").engine.matcher) if region else None
    if current is None:
        st.info("Selectionnez une region pour voir la repartition Masculin/Feminin.")
        return

    fig_pie = go.Figure(go.Pie(
        labels=[SEGMENT_MALE, SEGMENT_FEMALE],
        values=[current.masculin, current.feminin],
        hole=0.6,
        marker=dict(colors=[MALE_COLOR, FEMALE_COLOR], line=dict(color="white", width=3)),
        sort=False,
        textinfo="percent",
    ))
    fig_pie.update_layout(
        title=f"Repartition par sexe — {current.name}",
        annotations=[dict(text=f"{format_number(current.total)}<br>retraites", showarrow=False, font_size=18)],
        template="plotly_white",
    )
    st.plotly_chart(fig_pie, use_container_width=True)


# ---------------------------------------------------------------------------
# Page: Chomage regional
# ---------------------------------------------------------------------------

def page_unemployment(context: DataContext):
    st.title("📉 Taux de chomage regional")
    view = context.dataset("unemployment")
    engine = view.engine
    st.session_state.setdefault("unemployment_region", None)

    c1, c2, c3 = st.columns(3)
    years = list(view.config.years)
    year = c1.selectbox("Annee", years, index=len(years) - 1)
    segments = view.index.segments() or [SEGMENT_TOTAL]
    segment = c2.selectbox("Sexe", segments)
    locale = c3.selectbox("Milieu", [LOCALE_NATIONAL, LOCALE_URBAN, LOCALE_RURAL])

    rows = []
    for feature in context.features:
        name = str((feature.get("properties") or {}).get(context.name_property) or "")
        region = engine.resolve(name, segment)
        value = engine.value_at(region, year, segment, locale) if region else None
        rows.append({"name": name, "region": region, "value": value})
    data = pd.DataFrame(rows)

    stats = engine.color_scale_stats(year, segment)
    m1, m2, m3 = st.columns(3)
    m1.metric("Minimum", f"{stats.min:.1f} %")
    m2.metric("Moyenne", f"{stats.mean:.1f} %")
    m3.metric("Maximum", f"{stats.max:.1f} %")

    fig = px.choropleth(
        data,
        geojson={"type": "FeatureCollection", "features": context.features},
        locations="name",
        featureidkey=feature_id_key(context.name_property),
        color="value",
        custom_data=["region"],
        hover_name="name",
        hover_data={"value": ":.1f", "region": True, "name": False},
        range_color=(stats.min, stats.max),
        color_continuous_scale="Blues",
        labels={"value": "Taux (%)", "region": "Region statistique"},
        title=f"Taux de chomage {locale.lower()} — {segment}, {year}",
    )
    base_geo_layout(fig)
    event = st.plotly_chart(fig, use_container_width=True, on_select="rerun", key="unemployment_map")
    apply_selection(event, "unemployment_map", "unemployment_region")

    regions = engine.available_regions(segment)
    if not regions:
        st.warning("Aucune region disponible pour ce segment.")
        return
    current = st.session_state["unemployment_region"]
    region = st.selectbox(
        "Region",
        regions,
        index=regions.index(current) if current in regions else 0,
    )
    st.session_state["unemployment_region"] = region

    col1, col2 = st.columns(2)
    with col1:
        split = engine.urban_rural_split(region, year, segment)
        split_df = pd.DataFrame({
            "milieu": [LOCALE_URBAN, LOCALE_RURAL],
            "taux": [split.urban, split.rural],
        }).dropna()
        if split_df.empty:
            st.info("Donnees urbain/rural indisponibles pour cette region.")
        else:
            fig_split = px.bar(
                split_df, x="milieu", y="taux",
                title=f"Urbain vs Rural — {region} ({year})",
                labels={"taux": "Taux (%)", "milieu": ""},
                color="milieu",
                color_discrete_map={LOCALE_URBAN: "#2563eb", LOCALE_RURAL: "#16a34a"},
            )
            fig_split.update_layout(template="plotly_white", showlegend=False)
            st.plotly_chart(fig_split, use_container_width=True)

    with col2:
        series = engine.temporal_series(region, segment, locale)
        if not series:
            st.info("Evolution indisponible pour cette region.")
        else:
            fig_ts = go.Figure(go.Scatter(
                x=[p.year for p in series], y=[p.value for p in series],
                mode="lines+markers", name=region, line=dict(color="#2563eb"),
            ))
            fig_ts.update_layout(
                title=f"Evolution 2015-2023 — {region}",
                xaxis_title="Annee", yaxis_title="Taux (%)", template="plotly_white",
            )
            st.plotly_chart(fig_ts, use_container_width=True)

    # Comparison
    st.markdown("---")
    st.subheader("Comparaison entre deux regions")
    cc1, cc2 = st.columns(2)
    region_a = cc1.selectbox("Region A", regions, index=0, key="compare_a")
    region_b = cc2.selectbox("Region B", regions, index=min(1, len(regions) - 1), key="compare_b")
    comparison = engine.comparison_series(region_a, region_b, segment)
    if comparison is None:
        st.info("Comparaison indisponible pour ces regions.")
        return
    fig_cmp = go.Figure()
    for serie, color in ((comparison.region_a, "#2563eb"), (comparison.region_b, "#dc2626")):
        fig_cmp.add_trace(go.Scatter(
            x=[p.year for p in serie.data], y=[p.value for p in serie.data],
            mode="lines+markers", name=serie.name, line=dict(color=color),
        ))
    fig_cmp.update_layout(xaxis_title="Annee", yaxis_title="Taux (%)", template="plotly_white")
    st.plotly_chart(fig_cmp, use_container_width=True)


# ---------------------------------------------------------------------------
# Page: Export
# ---------------------------------------------------------------------------

def page_export(context: DataContext):
    st.title("📥 Export des donnees")
    key = st.selectbox(
        "Jeu de donnees",
        list(context.datasets),
        format_func=lambda k: context.dataset(k).config.name,
    )
    view = context.dataset(key)
    years = list(view.config.years)
    c1, c2 = st.columns(2)
    year = c1.selectbox("Annee", years, index=len(years) - 1)
    segment = c2.selectbox("Segment", view.index.segments() or [view.config.default_segment])

    rows = view.engine.export_rows(year, segment)
    df = pd.DataFrame(rows, columns=["Région", *view.config.export_columns.values()])
    st.dataframe(df, use_container_width=True, hide_index=True)

    col1, col2, col3 = st.columns(3)
    with col1:
        download_button_csv(df, f"{key}_{segment}_{year}.csv")
    with col2:
        download_button_excel(df, f"{key}_{segment}_{year}.xlsx")
    with col3:
        payload = json.dumps(view.engine.export_records(year, segment), ensure_ascii=False, indent=2)
        st.download_button(
            "Telecharger JSON", payload.encode("utf-8"),
            file_name=f"{key}_{segment}_{year}.json", mime="application/json",
        )


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

PAGES = {
    "Retraites par region": page_retirees,
    "Chomage regional": page_unemployment,
    "Export": page_export,
}

PAGES[page](load_or_stop())

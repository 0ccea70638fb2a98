import asyncio
import logging

import streamlit as st

from covidtracker.charts import build_metric_chart, metric_color
from covidtracker.config import LOCAL_DATA_DIR, NATIONWIDE
from covidtracker.covid_client import CovidTrackingClient, LocalCovidSource
from covidtracker.data_services import refresh_store
from covidtracker.errors import RegionNotFound
from covidtracker.models import Metric, TimeScale, ViewSelection
from covidtracker.state import DatasetStore
from covidtracker.ui_theme import PLOT_CONFIG, inject_base_theme, metric_readout, panel_card
from covidtracker.utils import format_count, format_date
from covidtracker.view_state import compute_view, region_options, scrub

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("covidtracker.streamlit")

st.set_page_config(page_title="COVID Tracker", page_icon="📈", layout="centered")
inject_base_theme()


@st.cache_resource
def get_store() -> DatasetStore:
    """One in-memory snapshot per server process."""
    return DatasetStore()


def get_source():
    if LOCAL_DATA_DIR is not None:
        return LocalCovidSource(LOCAL_DATA_DIR)
    return CovidTrackingClient()


def load_data(store: DatasetStore) -> None:
    with st.spinner("Fetching national and state data..."):
        result = asyncio.run(refresh_store(get_source(), store))
    if not result.national:
        st.warning("Nationwide data unavailable.")
    if not result.regions:
        st.warning("State data unavailable.")


store = get_store()

st.title("COVID-19 in the US")
st.caption("Source: [The COVID Tracking Project](https://covidtracking.com/)")

if st.sidebar.button("Refresh data") or not (store.has_national or store.has_regions):
    load_data(store)

regions = region_options(store) or (NATIONWIDE,)
region = st.sidebar.selectbox("Region", regions, index=0, disabled=not store.has_regions)
metric = st.sidebar.radio(
    "Metric",
    [Metric.NEGATIVE, Metric.POSITIVE, Metric.DEATH],
    index=1,
    format_func=lambda item: item.label,
)
time_scale = st.sidebar.radio(
    "Time scale",
    [TimeScale.MONTH, TimeScale.THREEMONTH, TimeScale.MAX],
    index=2,
    format_func=lambda item: item.label,
)

selection = ViewSelection(region=region, metric=metric, time_scale=time_scale)
try:
    view = compute_view(selection, store)
except RegionNotFound as exc:
    logger.warning("%s; showing nationwide data instead", exc)
    st.warning(str(exc))
    view = compute_view(ViewSelection(metric=metric, time_scale=time_scale), store)

if view.is_empty:
    st.info("No data to display yet.")
    st.stop()

chart_key = f"chart-{view.selection.region}-{metric.name}-{time_scale.name}"
displayed = view.displayed
selected = st.session_state.get(chart_key)
if selected and selected.selection.points:
    displayed = scrub(view, int(selected.selection.points[0]["point_index"]))

with panel_card(view.selection.region, f"{metric.label} · {time_scale.label}"):
    st.plotly_chart(
        build_metric_chart(view.adapter, highlight_index=displayed.index),
        config=PLOT_CONFIG,
        on_select="rerun",
        selection_mode="points",
        key=chart_key,
    )
    metric_readout(format_count(displayed.value), format_date(displayed.record.date), metric_color(metric))

"""NiceGUI dashboard for the COVID tracker.

Fetches the national and per-state daily series once per page load (or on
demand), then lets the user switch metric, time window and state and scrub
across the chart.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Optional

from nicegui import app, ui

from covidtracker.charts import build_metric_chart, create_placeholder_chart, metric_color
from covidtracker.config import LOCAL_DATA_DIR, NATIONWIDE, STORAGE_SECRET
from covidtracker.covid_client import CovidSource, CovidTrackingClient, LocalCovidSource
from covidtracker.data_services import refresh_store
from covidtracker.errors import RegionNotFound
from covidtracker.models import DisplayedPoint, Metric, TimeScale
from covidtracker.state import AppState
from covidtracker.utils import format_count, format_date
from covidtracker.view_state import compute_view, resolve_selection, scrub

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("covidtracker.app")

STATE = AppState()
DEFAULT_THEME = "dark"
THEME_STORAGE_KEY = "ui_theme"
DARK_BODY_CLASSES = "dark-theme bg-slate-950 text-slate-100"
LIGHT_BODY_CLASSES = "light-theme bg-amber-50 text-slate-900"
THEME_CLASS_RESET = f"{DARK_BODY_CLASSES} {LIGHT_BODY_CLASSES}"

METRIC_OPTIONS = {metric.value: metric.label for metric in (Metric.NEGATIVE, Metric.POSITIVE, Metric.DEATH)}
TIME_OPTIONS = {scale.name: scale.label for scale in (TimeScale.MONTH, TimeScale.THREEMONTH, TimeScale.MAX)}


def apply_theme_classes(theme: str) -> None:
    """Apply the selected theme classes to the document body."""
    body = ui.query("body")
    body.classes(
        remove=THEME_CLASS_RESET,
        add=LIGHT_BODY_CLASSES if theme == "light" else DARK_BODY_CLASSES,
    )


def set_active_theme(theme: str, storage: Optional[dict[str, Any]] = None) -> None:
    """Persist and apply the active theme."""
    STATE.theme = theme if theme in {"dark", "light"} else DEFAULT_THEME
    if storage is not None:
        storage[THEME_STORAGE_KEY] = STATE.theme
    apply_theme_classes(STATE.theme)


def get_source() -> CovidSource:
    if LOCAL_DATA_DIR is not None:
        return LocalCovidSource(LOCAL_DATA_DIR)
    return CovidTrackingClient()


# ============================================================================
# UI update functions
# ============================================================================

@dataclass
class UIRefs:
    """References to all UI components for updates."""
    metric_label: Any
    date_label: Any
    status_label: Any
    metric_radio: Any
    time_radio: Any
    region_select: Any
    chart: Any
    loading_spinner: Any


def update_info_for_point(refs: UIRefs, point: Optional[DisplayedPoint]) -> None:
    """Show the count and date of the displayed day below the chart."""
    if point is None:
        refs.metric_label.text = "--"
        refs.date_label.text = "No data yet"
        return
    refs.metric_label.text = format_count(point.value)
    refs.metric_label.style(f"color: {metric_color(point.metric)}")
    refs.date_label.text = format_date(point.record.date)


def update_controls(refs: UIRefs) -> None:
    """Mirror the current selection and data readiness into the controls."""
    selection = resolve_selection(STATE.selection)
    has_data = STATE.store.has_national or STATE.store.has_regions
    refs.metric_radio.value = selection.metric.value
    refs.time_radio.value = selection.time_scale.name
    refs.metric_radio.set_enabled(has_data)
    refs.time_radio.set_enabled(has_data)

    if STATE.view is not None and STATE.view.regions:
        refs.region_select.set_options(list(STATE.view.regions), value=selection.region)
        refs.region_select.enable()
    else:
        refs.region_select.set_options([NATIONWIDE], value=NATIONWIDE)
        refs.region_select.disable()


def update_display(refs: UIRefs) -> None:
    """Recompute the view from the current selection and redraw everything."""
    try:
        view = compute_view(STATE.selection, STATE.store)
    except RegionNotFound as exc:
        logger.warning("%s; showing nationwide data instead", exc)
        STATE.selection = replace(resolve_selection(STATE.selection), region=NATIONWIDE)
        view = compute_view(STATE.selection, STATE.store)

    STATE.selection = view.selection
    STATE.view = view
    STATE.scrub_index = None
    update_controls(refs)

    displayed = view.displayed
    try:
        figure = build_metric_chart(
            view.adapter,
            highlight_index=displayed.index if displayed else None,
            theme=STATE.theme,
        )
    except Exception as e:
        logger.error(f"✗ Failed to build metric chart: {e}")
        figure = create_placeholder_chart("Chart unavailable", theme=STATE.theme)
    refs.chart.update_figure(figure)
    update_info_for_point(refs, displayed)


def handle_scrub(refs: UIRefs, event: Any) -> None:
    """Update the labels for the day under the pointer."""
    if STATE.view is None:
        return
    points = (event.args or {}).get("points") or []
    for point in points:
        if point.get("curveNumber", 0) != 0:
            continue
        index = point.get("pointIndex", point.get("pointNumber"))
        if index is None:
            continue
        STATE.scrub_index = int(index)
        update_info_for_point(refs, scrub(STATE.view, STATE.scrub_index))
        return


def on_metric_change(refs: UIRefs, value: Optional[str]) -> None:
    if not value:
        return
    metric = Metric(value)
    selection = resolve_selection(STATE.selection)
    if metric is selection.metric:
        return
    STATE.selection = replace(selection, metric=metric)
    update_display(refs)


def on_time_scale_change(refs: UIRefs, value: Optional[str]) -> None:
    if not value:
        return
    time_scale = TimeScale[value]
    selection = resolve_selection(STATE.selection)
    if time_scale is selection.time_scale:
        return
    STATE.selection = replace(selection, time_scale=time_scale)
    update_display(refs)


def on_region_change(refs: UIRefs, value: Optional[str]) -> None:
    if not value:
        return
    selection = resolve_selection(STATE.selection)
    if value == selection.region:
        return
    STATE.selection = replace(selection, region=value)
    update_display(refs)


async def refresh_data(refs: UIRefs) -> None:
    """Fetch both datasets; each one is displayed as soon as it arrives."""
    refs.loading_spinner.set_visibility(True)
    refs.status_label.text = "$ fetch --national --states"
    try:
        result = await refresh_store(get_source(), STATE.store, on_ingest=lambda _slot: update_display(refs))
    finally:
        refs.loading_spinner.set_visibility(False)

    if result.national and result.regions:
        refs.status_label.text = f"✓ {len(STATE.store.national or ())} days · {len(STATE.store.regions)} states"
    elif result.national:
        refs.status_label.text = "⚠ State data unavailable; showing nationwide data only"
    elif result.regions:
        refs.status_label.text = "⚠ Nationwide data unavailable; pick a state"
    else:
        refs.status_label.text = "✗ Could not load data. Try refreshing."


# ============================================================================
# Main UI
# ============================================================================

@ui.page("/")
async def index_page() -> None:
    """Main dashboard page."""
    storage = app.storage.user
    initial_theme = storage.get(THEME_STORAGE_KEY) or DEFAULT_THEME
    set_active_theme(initial_theme, storage)
    ui.page_title("COVID Tracker")

    load_task: Optional[asyncio.Task] = None
    refs: Optional[UIRefs] = None

    def schedule_refresh() -> None:
        nonlocal load_task
        if refs is None or (load_task and not load_task.done()):
            return
        load_task = asyncio.create_task(refresh_data(refs))

    def on_theme_toggle(value: str) -> None:
        set_active_theme(value or DEFAULT_THEME, storage)
        if refs:
            update_display(refs)

    with ui.column().classes("w-full max-w-4xl mx-auto py-10 gap-6"):
        with ui.row().classes("items-center gap-3 w-full flex-wrap"):
            ui.label("COVID Tracker").classes("text-3xl font-bold text-violet-300 tracking-tight")
            with ui.row().classes("items-center gap-3 ml-auto shrink-0"):
                loading_spinner = ui.spinner(size="lg", color="violet")
                loading_spinner.set_visibility(False)
                ui.button("Refresh", on_click=schedule_refresh).props('flat dense color="violet"').classes("refresh-button")
                ui.label("Theme").classes("text-xs uppercase tracking-widest text-slate-400")
                toggle = ui.switch(
                    value=STATE.theme == "light",
                    on_change=lambda event: on_theme_toggle("light" if event.value else "dark"),
                ).props('dense color="purple" keep-color')
                toggle.classes("theme-toggle-simple")
        status_label = ui.label("").classes("status-line text-sm text-slate-500 font-mono")

        with ui.card().classes("chart-card w-full bg-slate-900 border border-slate-700 shadow-lg"):
            with ui.row().classes("w-full items-center gap-4"):
                ui.label("Region").classes("text-xs uppercase tracking-widest text-slate-400 font-bold")
                region_select = ui.select(
                    [NATIONWIDE],
                    value=NATIONWIDE,
                    on_change=lambda event: on_region_change(refs, event.value) if refs else None,
                ).classes("region-select w-64 text-sm").props('dark outlined dense color="violet"')
                region_select.disable()

            chart = ui.plotly(create_placeholder_chart("Loading...", theme=STATE.theme)).classes("w-full")

            with ui.row().classes("w-full items-end justify-between"):
                metric_label = ui.label("--").classes("metric-label text-3xl font-bold")
                date_label = ui.label("").classes("date-label text-sm text-slate-400 font-mono")

            with ui.row().classes("w-full gap-8"):
                time_radio = ui.radio(
                    TIME_OPTIONS,
                    value=TimeScale.MAX.name,
                    on_change=lambda event: on_time_scale_change(refs, event.value) if refs else None,
                ).props("inline").classes("time-radio")
                metric_radio = ui.radio(
                    METRIC_OPTIONS,
                    value=Metric.POSITIVE.value,
                    on_change=lambda event: on_metric_change(refs, event.value) if refs else None,
                ).props("inline").classes("metric-radio")

    refs = UIRefs(
        metric_label=metric_label,
        date_label=date_label,
        status_label=status_label,
        metric_radio=metric_radio,
        time_radio=time_radio,
        region_select=region_select,
        chart=chart,
        loading_spinner=loading_spinner,
    )
    chart.on("plotly_hover", lambda event: handle_scrub(refs, event))

    if STATE.store.has_national or STATE.store.has_regions:
        update_display(refs)
    else:
        update_controls(refs)
        schedule_refresh()


@ui.page("/health")
def healthcheck() -> None:
    """Health check endpoint."""
    ui.label("ok")


if __name__ in {"__main__", "__mp_main__"}:
    port = int(os.environ.get("PORT", "8080"))
    reload_enabled = os.environ.get("NICEGUI_RELOAD", "false").lower() in {"1", "true", "yes"}

    ui.run(
        title="COVID Tracker",
        host="0.0.0.0",
        port=port,
        reload=reload_enabled,
        storage_secret=STORAGE_SECRET,
    )

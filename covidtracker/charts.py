from __future__ import annotations

from typing import Dict, Optional

import plotly.graph_objects as go

from .chart_adapter import ChartAdapter
from .config import COLOR_DEATH, COLOR_NEGATIVE, COLOR_POSITIVE
from .models import Metric

ChartTheme = Dict[str, str]

CHART_THEMES: Dict[str, ChartTheme] = {
    "dark": {
        "template": "plotly_dark",
        "paper_bg": "#1f2335",
        "plot_bg": "#252a3f",
        "font_color": "#f1f5f9",
        "grid_color": "#343c55",
        "muted_text": "#cbd5f5",
        "marker_outline": "#0f172a",
    },
    "light": {
        "template": "plotly_white",
        "paper_bg": "#fff9ef",
        "plot_bg": "#fff3df",
        "font_color": "#3c2e12",
        "grid_color": "#f3d9a2",
        "muted_text": "#a16207",
        "marker_outline": "#fff9ef",
    },
}

METRIC_COLORS: Dict[Metric, str] = {
    Metric.POSITIVE: COLOR_POSITIVE,
    Metric.NEGATIVE: COLOR_NEGATIVE,
    Metric.DEATH: COLOR_DEATH,
}


def _get_chart_theme(theme: str) -> ChartTheme:
    return CHART_THEMES.get(theme, CHART_THEMES["dark"])


def metric_color(metric: Metric) -> str:
    return METRIC_COLORS[metric]


def create_placeholder_chart(title: str = "Loading...", height: int = 360, theme: str = "dark") -> go.Figure:
    palette = _get_chart_theme(theme)
    fig = go.Figure()
    fig.update_layout(
        template=palette["template"],
        paper_bgcolor=palette["paper_bg"],
        plot_bgcolor=palette["plot_bg"],
        font=dict(color=palette["font_color"], family="JetBrains Mono, Consolas, monospace", size=11),
        title=dict(text=title, font=dict(size=14, color=palette["muted_text"])),
        xaxis=dict(showgrid=True, gridcolor=palette["grid_color"], showticklabels=False),
        yaxis=dict(showgrid=True, gridcolor=palette["grid_color"], showticklabels=False),
        height=height,
        margin=dict(t=60, r=20, b=40, l=50),
    )
    return fig


def build_metric_chart(
    adapter: ChartAdapter,
    highlight_index: Optional[int] = None,
    theme: str = "dark",
    height: int = 360,
) -> go.Figure:
    """Line chart of the adapter's slice with a marker on the displayed day."""
    if len(adapter) == 0:
        return create_placeholder_chart("No data yet", height=height, theme=theme)

    df_plot = adapter.to_frame()
    palette = _get_chart_theme(theme)
    color = metric_color(adapter.metric)

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=df_plot["date"],
            y=df_plot["value"],
            mode="lines",
            line=dict(color=color, width=2),
            name=adapter.metric.label,
            hovertemplate="<b>%{y:,}</b><br>%{x|%b %d, %Y}<extra></extra>",
        )
    )

    if highlight_index is not None and 0 <= highlight_index < len(df_plot):
        point = df_plot.iloc[highlight_index]
        fig.add_trace(
            go.Scatter(
                x=[point["date"]],
                y=[point["value"]],
                mode="markers",
                marker=dict(size=10, color=color, line=dict(width=2, color=palette["marker_outline"])),
                name="Selected",
                hoverinfo="skip",
            )
        )

    fig.update_layout(
        template=palette["template"],
        paper_bgcolor=palette["paper_bg"],
        plot_bgcolor=palette["plot_bg"],
        font=dict(color=palette["font_color"], family="JetBrains Mono, Consolas, monospace", size=11),
        showlegend=False,
        hovermode="x unified",
        margin=dict(t=30, r=20, b=40, l=60),
        height=height,
    )
    fig.update_yaxes(title=f"{adapter.metric.label} increase", gridcolor=palette["grid_color"], title_font=dict(color=palette["muted_text"]))
    fig.update_xaxes(title=None, gridcolor=palette["grid_color"])
    return fig


__all__ = [
    "CHART_THEMES",
    "METRIC_COLORS",
    "build_metric_chart",
    "create_placeholder_chart",
    "metric_color",
]

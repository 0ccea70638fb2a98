from __future__ import annotations

import html
from contextlib import contextmanager

import streamlit as st

THEME_BG = '#0b1221'
THEME_SURFACE = '#111a2e'
THEME_BORDER = 'rgba(93, 220, 255, 0.12)'
THEME_TEXT = '#e5ecff'
THEME_MUTED = '#8f9acb'

PLOT_CONFIG = {
    'displayModeBar': False,
    'responsive': True,
}

_CSS = f"""
<style>
@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;600;700&family=JetBrains+Mono:wght@400;600&display=swap');

:root {{
    --ct-bg: {THEME_BG};
    --ct-surface: {THEME_SURFACE};
    --ct-border: {THEME_BORDER};
    --ct-text: {THEME_TEXT};
    --ct-muted: {THEME_MUTED};
}}

html, body, [class*="css"]  {{
    background: var(--ct-bg) !important;
    color: var(--ct-text) !important;
    font-family: 'Inter', system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif !important;
}}

.block-container {{
    padding: 2.5rem 1.8rem 3rem;
    max-width: 1000px;
}}

.panel-card {{
    background: rgba(17, 26, 46, 0.92);
    border: 1px solid var(--ct-border);
    border-radius: 24px;
    padding: 1.4rem;
}}

.panel-title {{
    display: flex;
    align-items: center;
    justify-content: space-between;
    gap: 1rem;
    margin-bottom: 1rem;
}}

.panel-title h3 {{
    margin: 0;
    font-size: 1.2rem;
}}

.panel-title span {{
    font-size: 0.8rem;
    color: var(--ct-muted);
}}

.metric-value {{
    display: block;
    font-size: 2.1rem;
    font-family: 'JetBrains Mono', 'Fira Code', monospace;
}}

.metric-caption {{
    margin-top: 0.3rem;
    font-size: 0.8rem;
    color: var(--ct-muted);
}}

.stPlotlyChart {{
    border-radius: 14px;
    overflow: hidden;
}}
</style>
"""


def inject_base_theme() -> None:
    """Render the global CSS theme into the Streamlit app."""
    st.markdown(_CSS, unsafe_allow_html=True)


@contextmanager
def panel_card(title: str, subtitle: str | None = None):
    """Render a stylized container that matches the dashboard theme."""
    safe_title = html.escape(title)
    subtitle_html = f'<span>{html.escape(subtitle)}</span>' if subtitle else ''
    st.markdown(
        f"""
        <div class="panel-card">
            <div class="panel-title">
                <h3>{safe_title}</h3>
                {subtitle_html}
            </div>
        """,
        unsafe_allow_html=True,
    )
    try:
        yield
    finally:
        st.markdown("</div>", unsafe_allow_html=True)


def metric_readout(value: str, caption: str, color: str) -> None:
    """Large count with the date underneath, colored by metric."""
    st.markdown(
        f"""
        <span class="metric-value" style="color: {html.escape(color)}">{html.escape(value)}</span>
        <div class="metric-caption">{html.escape(caption)}</div>
        """,
        unsafe_allow_html=True,
    )

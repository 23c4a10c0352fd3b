"""
Analyst Console - Custom CSS Styles
Dark trading-terminal theme plus small HTML component builders.
"""

from html import escape
from typing import List
from urllib.parse import urlparse

from technical_data import GroundingSource

# =============================================================================
# DARK THEME CSS
# =============================================================================

ANALYST_CUSTOM_CSS = """
<style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap');

    :root {
        --bg-primary: #0D1117;
        --bg-secondary: #161B22;
        --bg-card: #1C2128;
        --border-color: #30363D;

        --text-primary: #F0F6FC;
        --text-secondary: #8B949E;

        --accent-green: #3FB950;
        --accent-green-glow: rgba(63, 185, 80, 0.15);
        --accent-blue: #58A6FF;
        --accent-blue-glow: rgba(88, 166, 255, 0.15);
        --accent-yellow: #D29922;
        --accent-yellow-glow: rgba(210, 153, 34, 0.15);
        --accent-red: #F85149;
        --accent-red-glow: rgba(248, 81, 73, 0.15);

        --radius-md: 8px;
        --radius-lg: 12px;
    }

    .stApp {
        font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif !important;
        background: linear-gradient(180deg, #0D1117 0%, #161B22 100%) !important;
    }

    .stButton > button[kind="primary"] {
        background: linear-gradient(135deg, #0284c7 0%, #1d4ed8 100%) !important;
        color: white !important;
        border: none !important;
        border-radius: var(--radius-md) !important;
        font-weight: 600 !important;
    }

    /* Section header */
    .section-header {
        display: flex;
        align-items: center;
        gap: 12px;
        margin: 8px 0 12px 0;
    }
    .section-title { margin: 0; color: var(--accent-blue); font-weight: 600; }
    .section-subtitle { margin: 0; color: var(--text-secondary); font-size: 13px; }

    /* Recovery banner */
    .recovery-banner {
        border-left: 4px solid var(--accent-yellow);
        background: linear-gradient(135deg, var(--bg-card) 0%, var(--accent-yellow-glow) 100%);
        border-radius: var(--radius-md);
        padding: 12px 16px;
        margin-bottom: 12px;
        color: var(--text-primary);
    }

    /* Conviction badge */
    .status-badge {
        display: inline-flex;
        align-items: center;
        gap: 6px;
        padding: 4px 12px;
        border-radius: 20px;
        font-size: 12px;
        font-weight: 600;
        text-transform: uppercase;
        letter-spacing: 0.3px;
    }
    .conviction-high { background: var(--accent-green-glow); color: var(--accent-green); border: 1px solid var(--accent-green); }
    .conviction-moderate { background: var(--accent-yellow-glow); color: var(--accent-yellow); border: 1px solid var(--accent-yellow); }
    .conviction-low { background: var(--accent-red-glow); color: var(--accent-red); border: 1px solid var(--accent-red); }
    .conviction-na { background: var(--accent-blue-glow); color: var(--accent-blue); border: 1px solid var(--accent-blue); }

    /* Social summary */
    .social-box {
        background: var(--bg-card);
        border: 1px solid var(--border-color);
        border-radius: var(--radius-lg);
        padding: 16px 20px;
        color: var(--text-primary);
        line-height: 1.6;
    }

    /* Sources */
    .source-pill {
        display: inline-block;
        margin: 0 6px 6px 0;
        padding: 6px 12px;
        border-radius: 20px;
        background: var(--bg-secondary);
        border: 1px solid var(--border-color);
        color: var(--accent-blue) !important;
        font-size: 12px;
        text-decoration: none;
    }

    /* Empty state */
    .empty-state {
        border: 2px dashed var(--border-color);
        border-radius: var(--radius-lg);
        padding: 48px;
        text-align: center;
        color: var(--text-secondary);
        min-height: 300px;
    }
</style>
"""


def inject_custom_css():
    """Inject custom CSS into the Streamlit app."""
    import streamlit as st
    st.markdown(ANALYST_CUSTOM_CSS, unsafe_allow_html=True)


# =============================================================================
# HTML COMPONENT BUILDERS
# =============================================================================

def render_section_header(icon: str, title: str, subtitle: str = "") -> str:
    """Render a clean section header."""
    return f"""
    <div class="section-header">
        <span style="font-size: 24px;">{icon}</span>
        <div>
            <h3 class="section-title">{escape(title)}</h3>
            {f'<p class="section-subtitle">{escape(subtitle)}</p>' if subtitle else ''}
        </div>
    </div>
    """


def render_recovery_banner(price: str = "") -> str:
    price_note = f" (price: <b>{escape(price)}</b>)" if price else ""
    return f"""
    <div class="recovery-banner">
        ♻️ <b>Recovered your last session</b>{price_note}. Save it as a preset, clear it, or keep working.
    </div>
    """


def render_conviction_badge(score: float, label: str, reason: str = "") -> str:
    """Pill showing the extracted AI conviction score."""
    css = {
        'High': 'conviction-high',
        'Moderate': 'conviction-moderate',
        'Low': 'conviction-low',
    }.get(label, 'conviction-na')

    score_text = f"{score:g}/10" if score > 0 else "N/A"
    reason_html = f'<span style="color: var(--text-secondary); margin-left: 10px;">{escape(reason)}</span>' if reason else ''
    return f"""
    <div style="margin: 8px 0 16px 0;">
        <span class="status-badge {css}">AI Conviction {score_text} · {label}</span>
        {reason_html}
    </div>
    """


def render_social_box(summary: str) -> str:
    return f'<div class="social-box">{escape(summary)}</div>'


def is_web_url(uri: str) -> bool:
    parsed = urlparse((uri or '').strip())
    return parsed.scheme.lower() in ('http', 'https') and bool(parsed.netloc)


def _source_pill(source: GroundingSource) -> str:
    if not is_web_url(source.uri):
        return f'<span class="source-pill">{escape(source.title)}</span>'
    return (f'<a class="source-pill" href="{escape(source.uri.strip(), quote=True)}" target="_blank" '
            f'rel="noreferrer">{escape(source.title)} ↗</a>')


def render_sources(sources: List[GroundingSource]) -> str:
    """Link pills for the grounding sources. Only http(s) URIs become links."""
    if not sources:
        return ""
    pills = "".join(_source_pill(s) for s in sources)
    return f"""
    <div>
        <h4 style="color: var(--text-secondary); text-transform: uppercase; font-size: 13px; letter-spacing: 0.5px;">Sources &amp; References</h4>
        {pills}
    </div>
    """


def render_empty_state() -> str:
    return """
    <div class="empty-state">
        <div style="font-size: 48px; opacity: 0.3;">🧠</div>
        <p style="font-size: 18px; font-weight: 500;">Ready to Analyze</p>
        <p style="font-size: 13px; opacity: 0.7;">Select a ticker and fill in the technical levels to generate a professional market report.</p>
    </div>
    """

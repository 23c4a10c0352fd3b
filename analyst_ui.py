"""
Analyst Console - Streamlit UI components
Ticker selector, technical input form, preset bar, recovery banner,
confirmation prompt and the analysis display.
"""

import logging
from typing import Callable, Dict, Optional

import plotly.graph_objects as go
import streamlit as st

from analyst_styles import (
    render_conviction_badge,
    render_empty_state,
    render_recovery_banner,
    render_section_header,
    render_social_box,
    render_sources,
)
from errors import AnalysisRequestError, MissingApiKeyError, PresetNotFoundError
from form_state import ConfirmationGate, FormStateController
from preset_manager import PresetManager
from price_helper import fetch_current_price, format_price
from recovery import RecoveryFlow
from report_export import build_markdown_export, generate_pdf_report
from technical_data import PRESET_TICKERS, TIMEFRAME_LABELS, TIMEFRAMES, TechnicalData
from utils.report_parser import conviction_label, process_report
from utils.share_links import build_mailto_url, build_share_text, build_tweet_url, report_filename

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = "Failed to generate analysis. Please check your network and API Key."

# (group, key) -> (label, placeholder)
_SR_PLACEHOLDER = {'2h': '96k'}
FIELD_GROUPS = [
    ('support_resistance', "Support / Resistance", "📈",
     [(tf, f"{tf} Level", f"e.g. {_SR_PLACEHOLDER.get(tf, '95k')}") for tf in TIMEFRAMES]),
    ('weekly_sweep', "Weekly Sweeps (Liquidity)", "📊",
     [('sweep1', "Last Sweep (Event 1)", "e.g. Swept Monday Low at 94,200"),
      ('sweep2', "Previous Sweep (Event 2)", "e.g. Swept Previous Week High at 98,000")]),
    ('fvg_fibs', "FVG Fibs", "#️⃣",
     [(tf, f"{tf} FVG", "e.g. 0.5 @ 96,100") for tf in TIMEFRAMES]),
    ('candle_fibs', "Candle Fibs", "🎯",
     [(tf, f"{tf} Candle", "e.g. 0.618 @ 95,800") for tf in TIMEFRAMES]),
    ('time_fibs', "Time Vertical Fibs", "🕒",
     [('t0', "Time 0.0 (Start)", "Date/Time"),
      ('t0_618', "Time 0.618", "Date/Time"),
      ('t0_786', "Time 0.786", "Date/Time"),
      ('t1_618', "Time 1.618 (Extension)", "Date/Time")]),
]


def _widget_key(group: str, key: str) -> str:
    return f"in_{group}_{key}"


def clear_analysis():
    st.session_state['analysis'] = None
    st.session_state['processed'] = None
    st.session_state['analysis_error'] = None


# ═══════════════════════════════════════════════════════════════════════════════
# ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════

def perform_analysis(client_factory: Callable, ticker: str, data: TechnicalData) -> Dict:
    """
    Run one analysis round trip.

    Returns:
        {'response', 'processed', 'error'}; error is a user-facing message
        and the other two are None when it is set.
    """
    result = {'response': None, 'processed': None, 'error': None}
    try:
        client = client_factory()
        response = client.analyze(ticker, data)
    except MissingApiKeyError as e:
        logger.error("Gemini not configured: %s", e)
        result['error'] = f"{ANALYSIS_ERROR_MESSAGE} ({e})"
        return result
    except AnalysisRequestError:
        result['error'] = ANALYSIS_ERROR_MESSAGE
        return result

    result['response'] = response
    result['processed'] = process_report(response.markdown)
    return result


def build_conviction_gauge(score: float) -> go.Figure:
    """0-10 gauge for the extracted conviction score."""
    label = conviction_label(score)
    bar_color = {'High': '#3FB950', 'Moderate': '#D29922', 'Low': '#F85149'}.get(label, '#58A6FF')

    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=score,
        number={'suffix': "/10", 'valueformat': '.1f'},
        title={'text': f"AI Conviction · {label}"},
        gauge={
            'axis': {'range': [0, 10]},
            'bar': {'color': bar_color},
            'steps': [
                {'range': [0, 4], 'color': 'rgba(248, 81, 73, 0.15)'},
                {'range': [4, 7], 'color': 'rgba(210, 153, 34, 0.15)'},
                {'range': [7, 10], 'color': 'rgba(63, 185, 80, 0.15)'},
            ],
        },
    ))
    fig.update_layout(
        height=220,
        margin=dict(l=20, r=20, t=50, b=10),
        paper_bgcolor='rgba(0,0,0,0)',
        font={'color': '#E6EDF3'},
    )
    return fig


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIRMATION PROMPT
# ═══════════════════════════════════════════════════════════════════════════════

def render_confirmation(gate: ConfirmationGate):
    """Inline confirm/cancel prompt for the pending destructive action."""
    if not gate.is_pending:
        return

    st.warning(gate.pending.message, icon="⚠️")
    col1, col2, _ = st.columns([1, 1, 3])
    with col1:
        st.button("Continue", key=f"confirm_{gate.pending.kind}", type="primary",
                  on_click=gate.resolve)
    with col2:
        st.button("Cancel", key=f"cancel_{gate.pending.kind}", on_click=gate.cancel)


# ═══════════════════════════════════════════════════════════════════════════════
# TICKER SELECTOR
# ═══════════════════════════════════════════════════════════════════════════════

def _on_custom_ticker(form: FormStateController):
    typed = st.session_state.get('custom_ticker', '').upper()
    form.request_ticker_change(typed)


def render_ticker_selector(form: FormStateController):
    st.markdown(render_section_header("📡", "Select Asset"), unsafe_allow_html=True)

    cols = st.columns(4)
    for i, ticker in enumerate(PRESET_TICKERS):
        with cols[i % 4]:
            st.button(
                ticker,
                key=f"ticker_{i}",
                type="primary" if ticker == form.ticker else "secondary",
                use_container_width=True,
                on_click=form.request_ticker_change,
                args=(ticker,),
            )

    st.session_state['custom_ticker'] = form.ticker
    st.text_input(
        "Custom ticker",
        key='custom_ticker',
        placeholder="Or enter custom ticker (e.g. SOLUSD, DOGE)",
        on_change=_on_custom_ticker,
        args=(form,),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PRESETS
# ═══════════════════════════════════════════════════════════════════════════════

def _load_selected_preset(form: FormStateController, presets: PresetManager):
    preset_id = st.session_state.get('preset_select')
    if not preset_id:
        return
    try:
        form.request_preset_load(preset_id, presets)
    except PresetNotFoundError as e:
        st.session_state['preset_notice'] = str(e)
    st.session_state['preset_select'] = None


def save_preset_from_state(state, form: FormStateController, presets: PresetManager):
    """Save button callback. A blank name leaves the save input open."""
    preset = presets.save(state.get('preset_name', ''), form.data)
    if preset is not None:
        state['preset_name'] = ''
        state['show_save_input'] = False
        state['preset_notice'] = f"Saved preset '{preset.name}'"
    return preset


def _request_delete(gate: ConfirmationGate, presets: PresetManager, preset_id: str, name: str):
    gate.request('delete_preset', f"Delete preset '{name}'? This cannot be undone.",
                 lambda: presets.delete(preset_id))


def render_preset_bar(form: FormStateController, presets: PresetManager, gate: ConfirmationGate):
    options = [p.id for p in presets.presets]
    labels = {p.id: presets.option_label(p) for p in presets.presets}

    col1, col2 = st.columns([3, 2])
    with col1:
        st.selectbox(
            "📂 Load Preset",
            options=options,
            index=None,
            key='preset_select',
            placeholder="Select a preset...",
            format_func=lambda pid: labels.get(pid, pid),
            on_change=_load_selected_preset,
            args=(form, presets),
        )
    with col2:
        if st.session_state.get('show_save_input'):
            st.text_input("Preset Name", key='preset_name', placeholder="Preset Name")
            s1, s2 = st.columns(2)
            with s1:
                st.button("✓ Save", key='preset_save', on_click=save_preset_from_state,
                          args=(st.session_state, form, presets))
            with s2:
                st.button("✕", key='preset_cancel',
                          on_click=lambda: st.session_state.update(show_save_input=False))
        else:
            st.write("")
            st.button("💾 Save Current", key='preset_open_save', use_container_width=True,
                      on_click=lambda: st.session_state.update(show_save_input=True))

    notice = st.session_state.pop('preset_notice', None)
    if notice:
        st.caption(notice)

    if len(presets):
        with st.expander(f"Manage presets ({len(presets)})"):
            st.dataframe(presets.as_dataframe(), use_container_width=True, hide_index=True)
            for p in presets.presets:
                st.button(f"🗑️ {p.name}", key=f"del_{p.id}",
                          on_click=_request_delete, args=(gate, presets, p.id, p.name))


# ═══════════════════════════════════════════════════════════════════════════════
# RECOVERY BANNER
# ═══════════════════════════════════════════════════════════════════════════════

def promote_from_state(state, recovery: RecoveryFlow, presets: PresetManager):
    preset = recovery.promote(state.get('recovery_name', ''), presets)
    if preset is not None:
        state['preset_notice'] = f"Saved preset '{preset.name}'"
    return preset


def render_recovery_banner_section(recovery: RecoveryFlow, presets: PresetManager, gate: ConfirmationGate):
    if not recovery.banner_visible:
        return

    st.markdown(render_recovery_banner(recovery.form.data.current_price), unsafe_allow_html=True)
    col1, col2, col3, col4 = st.columns([3, 1, 1, 1])
    with col1:
        st.text_input("Preset name", key='recovery_name', placeholder="Name this session",
                      label_visibility="collapsed")
    with col2:
        st.button("Save as preset", key='recovery_promote', on_click=promote_from_state,
                  args=(st.session_state, recovery, presets))
    with col3:
        st.button("Clear", key='recovery_clear', on_click=recovery.request_clear, args=(gate,))
    with col4:
        st.button("Dismiss", key='recovery_dismiss', on_click=recovery.dismiss)


# ═══════════════════════════════════════════════════════════════════════════════
# TECHNICAL FORM
# ═══════════════════════════════════════════════════════════════════════════════

def _sync_widgets(data: TechnicalData):
    """Push the controller's value into the widget state before drawing."""
    st.session_state['in_current_price'] = data.current_price
    st.session_state['in_time_fibs_timeframe'] = data.time_fibs_timeframe
    for group, _, _, fields in FIELD_GROUPS:
        values = getattr(data, group)
        for key, _, _ in fields:
            st.session_state[_widget_key(group, key)] = values[key]


def _on_field_change(form: FormStateController, group: str, key: str):
    form.set_field(group, key, st.session_state[_widget_key(group, key)])


def _on_price_change(form: FormStateController):
    form.set_current_price(st.session_state['in_current_price'])


def _on_timeframe_change(form: FormStateController):
    form.set_time_fibs_timeframe(st.session_state['in_time_fibs_timeframe'])


def _fill_live_price(form: FormStateController):
    price = fetch_current_price(form.ticker)
    if price is None:
        st.session_state['price_notice'] = f"No live price available for {form.ticker}"
    else:
        form.set_current_price(format_price(price))


def render_technical_form(form: FormStateController):
    _sync_widgets(form.data)

    col1, col2 = st.columns([4, 1])
    with col1:
        st.text_input(
            "Current Price / Context",
            key='in_current_price',
            placeholder="e.g. 96,500 or 'Consolidating at range high'",
            on_change=_on_price_change,
            args=(form,),
        )
    with col2:
        st.write("")
        st.button("⚡ Live", key='fill_price', help="Fill with the latest market price",
                  on_click=_fill_live_price, args=(form,))

    notice = st.session_state.pop('price_notice', None)
    if notice:
        st.caption(notice)

    for group, label, icon, fields in FIELD_GROUPS:
        with st.container(border=True):
            if group == 'time_fibs':
                head, ctx = st.columns([3, 1])
                with head:
                    st.markdown(f"**{icon} {label}**")
                with ctx:
                    st.selectbox(
                        "Context",
                        options=TIMEFRAMES,
                        key='in_time_fibs_timeframe',
                        format_func=lambda tf: f"{TIMEFRAME_LABELS[tf]} Chart",
                        on_change=_on_timeframe_change,
                        args=(form,),
                    )
            else:
                st.markdown(f"**{icon} {label}**")

            cols = st.columns(2)
            for i, (key, field_label, placeholder) in enumerate(fields):
                with cols[i % 2]:
                    st.text_input(
                        field_label,
                        key=_widget_key(group, key),
                        placeholder=placeholder,
                        on_change=_on_field_change,
                        args=(form, group, key),
                    )


def _start_analysis():
    clear_analysis()
    st.session_state['is_analyzing'] = True


def run_pending_analysis(state, client_factory: Callable, ticker: str, data: TechnicalData) -> bool:
    """
    Run the flagged analysis request, if any, and store its outcome in state.

    The busy flag is always cleared afterwards. Returns True if a request ran.
    """
    if not state.get('is_analyzing'):
        return False
    try:
        result = perform_analysis(client_factory, ticker, data)
    finally:
        state['is_analyzing'] = False

    state['analysis'] = result['response']
    state['processed'] = result['processed']
    state['analysis_error'] = result['error']
    return True


def render_analyze_button(form: FormStateController, client_factory: Callable):
    # the click only raises the flag; the request runs on the next rerun
    # while the button is drawn disabled
    busy = st.session_state.get('is_analyzing', False)
    label = "Processing Analysis..." if busy else "Generate AI Analysis"
    st.button(label, key='analyze', type="primary", disabled=busy, use_container_width=True,
              on_click=_start_analysis)
    if not busy:
        return

    with st.spinner("Processing Analysis..."):
        run_pending_analysis(st.session_state, client_factory, form.ticker, form.data)
    st.rerun()


# ═══════════════════════════════════════════════════════════════════════════════
# ANALYSIS DISPLAY
# ═══════════════════════════════════════════════════════════════════════════════

def render_analysis_display(ticker: str):
    error: Optional[str] = st.session_state.get('analysis_error')
    response = st.session_state.get('analysis')
    processed = st.session_state.get('processed')

    if error:
        st.error(error)
        return

    if response is None or processed is None:
        st.markdown(render_empty_state(), unsafe_allow_html=True)
        return

    st.markdown(render_section_header("✨", "AI Technical Analysis", ticker), unsafe_allow_html=True)

    label = conviction_label(processed.confidence_score)
    if processed.confidence_score > 0:
        st.plotly_chart(build_conviction_gauge(processed.confidence_score), use_container_width=True)
    st.markdown(render_conviction_badge(processed.confidence_score, label, processed.conviction_reason),
                unsafe_allow_html=True)

    st.markdown(processed.display_markdown)

    if processed.social_summary:
        st.markdown(render_section_header("🐦", "Social Media Summary"), unsafe_allow_html=True)
        st.markdown(render_social_box(processed.social_summary), unsafe_allow_html=True)

    sources_html = render_sources(response.grounding_sources)
    if sources_html:
        st.markdown(sources_html, unsafe_allow_html=True)

    render_share_actions(ticker, processed, response.grounding_sources)


def render_share_actions(ticker: str, processed, sources):
    st.markdown("---")
    share_text = build_share_text(ticker, processed.social_summary, processed.display_markdown)
    full_markdown = build_markdown_export(ticker, processed, sources)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.link_button("Share on X", build_tweet_url(share_text), use_container_width=True)
    with col2:
        st.link_button("Email", build_mailto_url(f"{ticker} Technical Analysis", full_markdown),
                       use_container_width=True)
    with col3:
        st.download_button(
            label="Markdown",
            data=full_markdown,
            file_name=report_filename(ticker, 'md'),
            mime="text/markdown",
            use_container_width=True,
            key='download_md',
        )
    with col4:
        try:
            pdf_bytes = generate_pdf_report(ticker, processed, sources)
            st.download_button(
                label="PDF",
                data=pdf_bytes,
                file_name=report_filename(ticker, 'pdf'),
                mime="application/pdf",
                use_container_width=True,
                key='download_pdf',
            )
        except Exception as e:
            logger.exception("PDF export failed")
            st.button("PDF", disabled=True, use_container_width=True, help=f"PDF export failed: {e}")

    with st.expander("📋 Copy report"):
        st.code(full_markdown, language='markdown')

import sys
import os
sys.path.append(os.path.dirname(__file__))

import logging

import streamlit as st

from analyst_store import JsonFileStore
from analyst_styles import inject_custom_css
from analyst_ui import (
    clear_analysis,
    render_analysis_display,
    render_analyze_button,
    render_confirmation,
    render_preset_bar,
    render_recovery_banner_section,
    render_technical_form,
    render_ticker_selector,
)
from config import configure_logging, load_config
from form_state import AutoSaveSlot, ConfirmationGate, FormStateController
from gemini_analyst import create_gemini_client
from preset_manager import PresetManager
from recovery import RecoveryFlow

APP_VERSION = "v1.3.0"

logger = logging.getLogger(__name__)


def init_session():
    """Build the per-session object graph once; Streamlit reruns reuse it."""
    if 'form' in st.session_state:
        return

    config = load_config()
    configure_logging(config['log_level'])

    store = JsonFileStore(config['data_dir'])
    autosave = AutoSaveSlot(store)
    gate = ConfirmationGate()
    form = FormStateController(autosave, ticker=config['default_ticker'], gate=gate,
                               on_reset=clear_analysis)
    presets = PresetManager(store)
    recovery = RecoveryFlow(form, autosave, ttl_hours=config['autosave_ttl_hours'])
    recovery.check()

    st.session_state['config'] = config
    st.session_state['gate'] = gate
    st.session_state['form'] = form
    st.session_state['presets'] = presets
    st.session_state['recovery'] = recovery
    st.session_state['is_analyzing'] = False
    clear_analysis()
    logger.info("Session initialised (data dir %s)", config['data_dir'])


def get_client():
    """Lazily create the Gemini client; a missing key only fails on analyze."""
    if st.session_state.get('client') is None:
        st.session_state['client'] = create_gemini_client(st.session_state['config'])
    return st.session_state['client']


st.set_page_config(
    page_title="Crypto Analyst",
    page_icon="🧠",
    layout="wide",
)

init_session()
inject_custom_css()

form = st.session_state['form']
presets = st.session_state['presets']
gate = st.session_state['gate']
recovery = st.session_state['recovery']

# Header
head_left, head_right = st.columns([5, 1])
with head_left:
    st.title("🧠 Crypto Analyst")
    st.caption(f"Powered by Google Gemini · {st.session_state['config']['model']}")
with head_right:
    st.caption(APP_VERSION)

render_confirmation(gate)
render_recovery_banner_section(recovery, presets, gate)

input_col, output_col = st.columns([5, 7], gap="large")

with input_col:
    render_ticker_selector(form)
    render_preset_bar(form, presets, gate)
    render_technical_form(form)
    render_analyze_button(form, get_client)

with output_col:
    render_analysis_display(form.ticker)

"""
Analyst Console - Configuration
All tunables live in DEFAULT_CONFIG; environment variables override them.
"""

import logging
import os
from typing import Dict, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURATION - All tunable parameters
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_CONFIG = {
    # Persistence
    'data_dir': '.analyst_data',
    'autosave_ttl_hours': 0,  # 0 = recovered sessions never expire

    # Gemini
    'model': 'gemini-1.5-pro',
    'use_search': True,  # google search grounding
    'temperature': 0.4,
    'max_output_tokens': 4096,

    # UI
    'default_ticker': 'BTCUSD',
    'log_level': 'INFO',
}

# env var -> (config key, parser)
_ENV_OVERRIDES = {
    'ANALYST_DATA_DIR': ('data_dir', str),
    'ANALYST_AUTOSAVE_TTL_HOURS': ('autosave_ttl_hours', float),
    'ANALYST_MODEL': ('model', str),
    'ANALYST_USE_SEARCH': ('use_search', lambda v: v.strip().lower() in ('1', 'true', 'yes', 'on')),
    'ANALYST_TEMPERATURE': ('temperature', float),
    'ANALYST_MAX_OUTPUT_TOKENS': ('max_output_tokens', int),
    'ANALYST_DEFAULT_TICKER': ('default_ticker', str),
    'ANALYST_LOG_LEVEL': ('log_level', str),
}

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


def load_config(environ: Optional[Dict[str, str]] = None) -> Dict:
    """
    Build the runtime configuration.

    Args:
        environ: Mapping to read overrides from (default: os.environ)

    Returns:
        A fresh dict, DEFAULT_CONFIG overlaid with any valid env overrides.
    """
    environ = os.environ if environ is None else environ
    config = dict(DEFAULT_CONFIG)

    for env_name, (key, parse) in _ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == '':
            continue
        try:
            config[key] = parse(raw)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", env_name, raw)

    return config


def get_api_key(environ: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Resolve the Gemini API key from env vars, then Streamlit secrets."""
    environ = os.environ if environ is None else environ
    api_key = environ.get("GOOGLE_API_KEY") or environ.get("GEMINI_API_KEY")
    if api_key:
        return api_key

    try:
        import streamlit as st
        return st.secrets.get("GOOGLE_API_KEY") or st.secrets.get("GEMINI_API_KEY")
    except Exception:
        # no secrets.toml (or not running under streamlit)
        return None


def configure_logging(level: str = 'INFO'):
    """Attach one stream handler to the root logger (idempotent across reruns)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not any(getattr(h, '_analyst_handler', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._analyst_handler = True
        root.addHandler(handler)

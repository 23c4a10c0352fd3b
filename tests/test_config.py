"""
Configuration overrides and API key lookup.
"""
import logging

import pytest

from config import DEFAULT_CONFIG, configure_logging, get_api_key, load_config

pytestmark = pytest.mark.unit


class TestLoadConfig:

    def test_defaults(self):
        config = load_config({})
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_overrides_are_parsed(self):
        config = load_config({
            "ANALYST_DATA_DIR": "/tmp/analyst",
            "ANALYST_AUTOSAVE_TTL_HOURS": "24",
            "ANALYST_USE_SEARCH": "false",
            "ANALYST_MAX_OUTPUT_TOKENS": "2048",
            "ANALYST_TEMPERATURE": "0.2",
        })
        assert config["data_dir"] == "/tmp/analyst"
        assert config["autosave_ttl_hours"] == 24.0
        assert config["use_search"] is False
        assert config["max_output_tokens"] == 2048
        assert config["temperature"] == 0.2

    def test_invalid_value_keeps_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_config({"ANALYST_MAX_OUTPUT_TOKENS": "lots"})
        assert config["max_output_tokens"] == DEFAULT_CONFIG["max_output_tokens"]
        assert "ANALYST_MAX_OUTPUT_TOKENS" in caplog.text

    def test_empty_value_is_ignored(self):
        assert load_config({"ANALYST_MODEL": ""})["model"] == DEFAULT_CONFIG["model"]


class TestApiKey:

    def test_google_key_wins(self):
        assert get_api_key({"GOOGLE_API_KEY": "g", "GEMINI_API_KEY": "m"}) == "g"

    def test_gemini_key_fallback(self):
        assert get_api_key({"GEMINI_API_KEY": "m"}) == "m"


class TestLogging:

    def test_handler_added_once(self):
        root = logging.getLogger()
        configure_logging("DEBUG")
        configure_logging("INFO")
        tagged = [h for h in root.handlers if getattr(h, "_analyst_handler", False)]
        assert len(tagged) == 1
        assert root.level == logging.INFO
        for h in tagged:
            root.removeHandler(h)

"""
pytest configuration for the analyst console test suite.

Marks:
  @pytest.mark.unit    - fast, no network, no LLM

Run:
  pytest tests/ -m unit
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from analyst_store import JsonFileStore, MemoryStore
from form_state import AutoSaveSlot, ConfirmationGate, FormStateController
from technical_data import TechnicalData


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast unit tests, no network or LLM")


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def tmp_store(tmp_path):
    return JsonFileStore(str(tmp_path / "data"))


@pytest.fixture
def autosave(memory_store):
    return AutoSaveSlot(memory_store)


@pytest.fixture
def gate():
    return ConfirmationGate()


@pytest.fixture
def form(autosave, gate):
    return FormStateController(autosave, ticker="BTCUSD", gate=gate)


@pytest.fixture
def sample_data():
    data = TechnicalData.empty()
    data.current_price = "96,500"
    data.support_resistance["2h"] = "96k"
    data.support_resistance["1W"] = "88k"
    data.weekly_sweep["sweep1"] = "Swept Monday Low at 94,200"
    data.fvg_fibs["4h"] = "0.5 @ 96,100"
    data.candle_fibs["1D"] = "0.618 @ 95,800"
    data.time_fibs["t0"] = "2026-10-01 00:00"
    data.time_fibs["t0_618"] = "2026-10-12 08:00"
    data.time_fibs_timeframe = "4h"
    return data


class MockResponse:
    """Stands in for a google.generativeai GenerateContentResponse."""

    def __init__(self, text, payload=None):
        self._text = text
        self._payload = payload if payload is not None else {"candidates": [{}]}

    @property
    def text(self):
        if self._text is None:
            raise ValueError("response has no parts")
        return self._text

    def to_dict(self):
        return self._payload


class FakeModel:
    """Records generate_content calls and replays a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else MockResponse("## Report")
        self.error = error
        self.calls = []

    def generate_content(self, contents, **kwargs):
        self.calls.append((contents, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_model():
    return FakeModel()

"""
Data model and dirty-check tests.
Run with:  pytest tests/test_technical_data.py -v
"""
import pytest

from technical_data import (
    TIMEFRAMES,
    Preset,
    TechnicalData,
    is_dirty,
    reset_keeping_time_fibs,
)

pytestmark = pytest.mark.unit


class TestTechnicalDataShape:

    def test_empty_is_total(self):
        d = TechnicalData.empty()
        assert d.current_price == ""
        for group in (d.support_resistance, d.fvg_fibs, d.candle_fibs):
            assert list(group.keys()) == TIMEFRAMES
            assert all(v == "" for v in group.values())
        assert d.weekly_sweep == {"sweep1": "", "sweep2": ""}
        assert d.time_fibs == {"t0": "", "t0_618": "", "t0_786": "", "t1_618": ""}
        assert d.time_fibs_timeframe == "2h"

    def test_empty_instances_do_not_share_groups(self):
        a, b = TechnicalData.empty(), TechnicalData.empty()
        a.support_resistance["2h"] = "96k"
        assert b.support_resistance["2h"] == ""

    def test_from_dict_fills_missing_keys(self):
        d = TechnicalData.from_dict({"current_price": "100", "support_resistance": {"4h": "99"}})
        assert d.current_price == "100"
        assert d.support_resistance == {"2h": "", "4h": "99", "1D": "", "1W": ""}
        assert d.weekly_sweep == {"sweep1": "", "sweep2": ""}

    def test_from_dict_rejects_unknown_timeframe(self):
        d = TechnicalData.from_dict({"time_fibs_timeframe": "3M"})
        assert d.time_fibs_timeframe == "2h"

    def test_from_dict_tolerates_garbage(self):
        d = TechnicalData.from_dict({"support_resistance": "oops", "current_price": None})
        assert d == TechnicalData.empty()
        assert TechnicalData.from_dict(None) == TechnicalData.empty()

    def test_dict_round_trip(self, sample_data):
        assert TechnicalData.from_dict(sample_data.to_dict()) == sample_data

    def test_copy_is_deep(self, sample_data):
        clone = sample_data.copy()
        clone.fvg_fibs["4h"] = "changed"
        assert sample_data.fvg_fibs["4h"] == "0.5 @ 96,100"


class TestIsDirty:

    def test_empty_baseline_is_clean(self):
        assert is_dirty(TechnicalData.empty()) is False

    @pytest.mark.parametrize("group,key", [
        ("support_resistance", "2h"),
        ("support_resistance", "1W"),
        ("weekly_sweep", "sweep1"),
        ("weekly_sweep", "sweep2"),
        ("fvg_fibs", "1D"),
        ("candle_fibs", "4h"),
    ])
    def test_any_inspected_field_makes_it_dirty(self, group, key):
        d = TechnicalData.empty()
        getattr(d, group)[key] = "x"
        assert is_dirty(d) is True

    def test_price_makes_it_dirty(self):
        d = TechnicalData.empty()
        d.current_price = "96,500"
        assert is_dirty(d) is True

    def test_time_fibs_alone_are_not_dirty(self):
        d = TechnicalData.empty()
        d.time_fibs["t0"] = "2026-10-01"
        d.time_fibs_timeframe = "1W"
        assert is_dirty(d) is False


class TestResetKeepingTimeFibs:

    def test_keeps_time_fibs_only(self, sample_data):
        fresh = reset_keeping_time_fibs(sample_data)
        assert fresh.time_fibs == sample_data.time_fibs
        assert fresh.time_fibs_timeframe == "4h"
        assert fresh.current_price == ""
        assert is_dirty(fresh) is False

    def test_time_fibs_are_copied(self, sample_data):
        fresh = reset_keeping_time_fibs(sample_data)
        fresh.time_fibs["t0"] = "other"
        assert sample_data.time_fibs["t0"] == "2026-10-01 00:00"


class TestPresetRecord:

    def test_from_dict_requires_name(self):
        with pytest.raises(ValueError):
            Preset.from_dict({"id": "1", "name": "   ", "data": {}, "timestamp": 1})

    def test_from_dict_requires_id(self):
        with pytest.raises(KeyError):
            Preset.from_dict({"name": "x", "data": {}})

    def test_round_trip(self, sample_data):
        p = Preset(id="abc", name="Swing", data=sample_data, timestamp=1700000000000)
        assert Preset.from_dict(p.to_dict()) == p

"""
Analyst Console - Data Model
Form record (TechnicalData), named snapshots (Preset) and the AI response types.
All technical inputs are free text; nothing here parses numbers.
"""

import copy
from datetime import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════════

TIMEFRAMES = ['2h', '4h', '1D', '1W']
DEFAULT_TIMEFRAME = '2h'

TIMEFRAME_LABELS = {
    '2h': '2h',
    '4h': '4h',
    '1D': 'Daily',
    '1W': 'Weekly',
}

PRESET_TICKERS = [
    'TOTAL (Crypto Total Market Cap)',
    'TOTAL3',
    'BTC.D',
    'ETHBTC',
    'BTCUSD',
    'ETHUSD',
    'USDT.D + USDC.D',
]

SWEEP_KEYS = ['sweep1', 'sweep2']
TIME_FIB_KEYS = ['t0', 't0_618', 't0_786', 't1_618']

# group name -> the fixed keys it always carries
NESTED_GROUPS = {
    'support_resistance': TIMEFRAMES,
    'weekly_sweep': SWEEP_KEYS,
    'fvg_fibs': TIMEFRAMES,
    'candle_fibs': TIMEFRAMES,
    'time_fibs': TIME_FIB_KEYS,
}


def _blank(keys) -> Dict[str, str]:
    return {k: '' for k in keys}


def _total_group(raw, keys) -> Dict[str, str]:
    """Coerce a stored sub-record into the full key set (missing -> '')."""
    raw = raw if isinstance(raw, dict) else {}
    group = {}
    for k in keys:
        value = raw.get(k, '')
        group[k] = value if isinstance(value, str) else ('' if value is None else str(value))
    return group


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class TechnicalData:
    """The form record. Every key always exists; empty is ''."""
    current_price: str = ''
    support_resistance: Dict[str, str] = field(default_factory=lambda: _blank(TIMEFRAMES))
    weekly_sweep: Dict[str, str] = field(default_factory=lambda: _blank(SWEEP_KEYS))
    fvg_fibs: Dict[str, str] = field(default_factory=lambda: _blank(TIMEFRAMES))
    candle_fibs: Dict[str, str] = field(default_factory=lambda: _blank(TIMEFRAMES))
    time_fibs: Dict[str, str] = field(default_factory=lambda: _blank(TIME_FIB_KEYS))
    time_fibs_timeframe: str = DEFAULT_TIMEFRAME

    @classmethod
    def empty(cls) -> 'TechnicalData':
        return cls()

    @classmethod
    def from_dict(cls, raw: Optional[Dict]) -> 'TechnicalData':
        """Rebuild from a stored dict, filling anything missing with ''."""
        raw = raw if isinstance(raw, dict) else {}
        price = raw.get('current_price', '')
        timeframe = raw.get('time_fibs_timeframe') or DEFAULT_TIMEFRAME
        if timeframe not in TIMEFRAMES:
            timeframe = DEFAULT_TIMEFRAME

        return cls(
            current_price=price if isinstance(price, str) else ('' if price is None else str(price)),
            support_resistance=_total_group(raw.get('support_resistance'), TIMEFRAMES),
            weekly_sweep=_total_group(raw.get('weekly_sweep'), SWEEP_KEYS),
            fvg_fibs=_total_group(raw.get('fvg_fibs'), TIMEFRAMES),
            candle_fibs=_total_group(raw.get('candle_fibs'), TIMEFRAMES),
            time_fibs=_total_group(raw.get('time_fibs'), TIME_FIB_KEYS),
            time_fibs_timeframe=timeframe,
        )

    def to_dict(self) -> Dict:
        return {
            'current_price': self.current_price,
            'support_resistance': dict(self.support_resistance),
            'weekly_sweep': dict(self.weekly_sweep),
            'fvg_fibs': dict(self.fvg_fibs),
            'candle_fibs': dict(self.candle_fibs),
            'time_fibs': dict(self.time_fibs),
            'time_fibs_timeframe': self.time_fibs_timeframe,
        }

    def copy(self) -> 'TechnicalData':
        return copy.deepcopy(self)


@dataclass
class Preset:
    """A named, durable snapshot of the form."""
    id: str
    name: str
    data: TechnicalData
    timestamp: int  # epoch millis

    @classmethod
    def from_dict(cls, raw: Dict) -> 'Preset':
        """Raises KeyError/TypeError/ValueError on unreadable records."""
        name = str(raw['name']).strip()
        if not name:
            raise ValueError("preset name is empty")
        try:
            timestamp = int(raw.get('timestamp', 0))
            datetime.fromtimestamp(timestamp / 1000)
        except (OverflowError, OSError) as e:
            raise ValueError(f"preset timestamp out of range: {raw.get('timestamp')!r}") from e
        return cls(
            id=str(raw['id']),
            name=name,
            data=TechnicalData.from_dict(raw['data']),
            timestamp=timestamp,
        )

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'data': self.data.to_dict(),
            'timestamp': self.timestamp,
        }


@dataclass
class GroundingSource:
    """A web citation returned alongside the generated text."""
    title: str
    uri: str


@dataclass
class AnalysisResponse:
    markdown: str
    grounding_sources: List[GroundingSource] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# DIRTY CHECK
# ═══════════════════════════════════════════════════════════════════════════════

def is_dirty(data: TechnicalData) -> bool:
    """
    True when the form holds input that a reset would throw away.

    Inspects price, every S/R level, both sweeps, FVG and candle fibs.
    Time fibs (and their timeframe) are excluded: they survive ticker
    switches, so they never count as discardable input.
    """
    if data.current_price != '':
        return True
    if data.weekly_sweep['sweep1'] != '' or data.weekly_sweep['sweep2'] != '':
        return True
    for group in (data.support_resistance, data.fvg_fibs, data.candle_fibs):
        if any(v != '' for v in group.values()):
            return True
    return False


def reset_keeping_time_fibs(data: TechnicalData) -> TechnicalData:
    """Empty baseline, carrying over time fibs and their timeframe."""
    fresh = TechnicalData.empty()
    fresh.time_fibs = dict(data.time_fibs)
    fresh.time_fibs_timeframe = data.time_fibs_timeframe
    return fresh

"""
Analyst Console - Form State
Owns the live TechnicalData, mirrors every change into the auto-save slot,
and gates destructive actions behind an explicit confirmation step.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from analyst_store import AUTOSAVE_KEY, KeyValueStore
from technical_data import (
    NESTED_GROUPS,
    TIMEFRAMES,
    TechnicalData,
    is_dirty,
    reset_keeping_time_fibs,
)

logger = logging.getLogger(__name__)

SWITCH_TICKER_MESSAGE = (
    "You have unsaved changes. Switching tickers will discard your current "
    "input (excluding Time Fibs). Continue?"
)
LOAD_PRESET_MESSAGE = "Loading a preset discards your current unsaved changes. Continue?"


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIRMATION CHANNEL
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class PendingAction:
    """A destructive action waiting for the user to confirm or cancel."""
    kind: str
    message: str
    action: Callable[[], Any]


class ConfirmationGate:
    """Holds at most one pending action; a new request replaces the old one."""

    def __init__(self):
        self.pending: Optional[PendingAction] = None

    def request(self, kind: str, message: str, action: Callable[[], Any]) -> PendingAction:
        self.pending = PendingAction(kind=kind, message=message, action=action)
        return self.pending

    def resolve(self) -> Any:
        """Run the pending action (if any) and clear it."""
        pending, self.pending = self.pending, None
        if pending is None:
            return None
        return pending.action()

    def cancel(self):
        self.pending = None

    @property
    def is_pending(self) -> bool:
        return self.pending is not None


# ═══════════════════════════════════════════════════════════════════════════════
# AUTO-SAVE SLOT
# ═══════════════════════════════════════════════════════════════════════════════

class AutoSaveSlot:
    """Single latest-wins snapshot of the form, stored as {saved_at, data}."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def write(self, data: TechnicalData):
        self.store.put(AUTOSAVE_KEY, {
            'saved_at': int(time.time() * 1000),
            'data': data.to_dict(),
        })

    def read(self, ttl_hours: float = 0) -> Optional[TechnicalData]:
        """
        Return the stored snapshot, or None if absent, malformed or expired.

        Args:
            ttl_hours: Discard snapshots older than this (0 = never expire)
        """
        record = self.store.get(AUTOSAVE_KEY)
        if record is None:
            return None
        if not isinstance(record, dict) or not isinstance(record.get('data'), dict):
            logger.warning("Auto-save record is malformed, ignoring it")
            return None

        if ttl_hours and ttl_hours > 0:
            saved_at = record.get('saved_at')
            if not isinstance(saved_at, (int, float)):
                logger.warning("Auto-save record has no timestamp, ignoring it")
                return None
            age_hours = (time.time() * 1000 - saved_at) / 3_600_000
            if age_hours > ttl_hours:
                logger.info("Auto-save is %.1fh old (ttl %sh), ignoring it", age_hours, ttl_hours)
                return None

        return TechnicalData.from_dict(record['data'])

    def clear(self):
        self.store.delete(AUTOSAVE_KEY)


# ═══════════════════════════════════════════════════════════════════════════════
# FORM STATE CONTROLLER
# ═══════════════════════════════════════════════════════════════════════════════

class FormStateController:
    """
    Live form value plus the active ticker.

    Args:
        autosave: Slot every successful update is mirrored into
        ticker: Initially selected ticker
        gate: Confirmation channel for destructive actions
        on_reset: Called after a ticker switch (clears the shown analysis)
    """

    def __init__(
        self,
        autosave: AutoSaveSlot,
        ticker: str = 'BTCUSD',
        gate: Optional[ConfirmationGate] = None,
        on_reset: Optional[Callable[[], None]] = None,
    ):
        self.autosave = autosave
        self.ticker = ticker
        self.gate = gate or ConfirmationGate()
        self.on_reset = on_reset
        self._data = TechnicalData.empty()

    @property
    def data(self) -> TechnicalData:
        return self._data.copy()

    @property
    def dirty(self) -> bool:
        return is_dirty(self._data)

    def hydrate(self, data: TechnicalData):
        """Replace the live value without touching the auto-save slot."""
        self._data = data.copy()

    def update(self, partial: Union[TechnicalData, Dict]) -> TechnicalData:
        """
        Apply a full record or a partial mapping and mirror it to auto-save.

        Nested groups merge per key, so editing one timeframe leaves its
        siblings alone. Unknown keys are ignored.
        """
        if isinstance(partial, TechnicalData):
            new = partial.copy()
        else:
            new = self._merge(partial)

        # skip the write only when the slot already holds this exact value
        if new == self._data and self.autosave.read() == new:
            return self._data.copy()

        self._data = new
        self.autosave.write(new)
        return self._data.copy()

    def _merge(self, partial: Dict) -> TechnicalData:
        new = self._data.copy()
        for key, value in (partial or {}).items():
            if key == 'current_price':
                new.current_price = '' if value is None else str(value)
            elif key == 'time_fibs_timeframe':
                if value in TIMEFRAMES:
                    new.time_fibs_timeframe = value
                else:
                    logger.warning("Ignoring unknown timeframe %r", value)
            elif key in NESTED_GROUPS and isinstance(value, dict):
                group = dict(getattr(new, key))
                for sub_key, sub_value in value.items():
                    if sub_key in group:
                        group[sub_key] = '' if sub_value is None else str(sub_value)
                setattr(new, key, group)
        return new

    def set_field(self, group: str, key: str, value: str) -> TechnicalData:
        return self.update({group: {key: value}})

    def set_current_price(self, value: str) -> TechnicalData:
        return self.update({'current_price': value})

    def set_time_fibs_timeframe(self, timeframe: str) -> TechnicalData:
        return self.update({'time_fibs_timeframe': timeframe})

    # ═══════════════════════════════════════════════════════════════════════════
    # GUARDED ACTIONS
    # ═══════════════════════════════════════════════════════════════════════════

    def request_ticker_change(self, ticker: str) -> bool:
        """
        Switch the active ticker, asking first when the form is dirty.

        Returns:
            True if the switch happened now, False if it is a no-op or is
            waiting on the confirmation gate.
        """
        ticker = (ticker or '').strip()
        if not ticker or ticker == self.ticker:
            return False

        if self.dirty:
            self.gate.request('switch_ticker', SWITCH_TICKER_MESSAGE,
                              lambda: self._apply_ticker(ticker))
            return False

        self._apply_ticker(ticker)
        return True

    def _apply_ticker(self, ticker: str) -> str:
        self.ticker = ticker
        self.update(reset_keeping_time_fibs(self._data))
        if self.on_reset is not None:
            self.on_reset()
        return ticker

    def request_preset_load(self, preset_id: str, presets) -> bool:
        """
        Load a preset into the form, asking first when the form is dirty.

        Raises PresetNotFoundError straight away for unknown ids.
        """
        data = presets.load(preset_id)
        if self.dirty:
            self.gate.request('load_preset', LOAD_PRESET_MESSAGE,
                              lambda: self.update(data))
            return False

        self.update(data)
        return True

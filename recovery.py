"""
Analyst Console - Session Recovery
On startup, restores the last auto-saved form and offers to keep it as a
preset or throw it away.
"""

import logging
from enum import Enum
from typing import Optional

from form_state import AutoSaveSlot, ConfirmationGate, FormStateController
from preset_manager import PresetManager
from technical_data import Preset, is_dirty

logger = logging.getLogger(__name__)

CLEAR_AUTOSAVE_MESSAGE = (
    "Clear the recovered session? The auto-saved copy will be deleted "
    "(the values stay in the form until you change them)."
)


class RecoveryState(str, Enum):
    IDLE = 'idle'
    CHECKING = 'checking'
    HYDRATED = 'hydrated'          # banner shown
    NO_RECOVERY = 'no_recovery'
    BANNER_HIDDEN = 'banner_hidden'


class RecoveryFlow:
    """
    Recovery banner state machine.

    IDLE -> CHECKING -> HYDRATED | NO_RECOVERY; HYDRATED -> BANNER_HIDDEN via
    promote, clear or dismiss. A hidden banner never comes back in the
    same session.
    """

    def __init__(self, form: FormStateController, autosave: AutoSaveSlot, ttl_hours: float = 0):
        self.form = form
        self.autosave = autosave
        self.ttl_hours = ttl_hours
        self.state = RecoveryState.IDLE

    @property
    def banner_visible(self) -> bool:
        return self.state == RecoveryState.HYDRATED

    def check(self) -> RecoveryState:
        """Inspect the auto-save slot once per session."""
        if self.state != RecoveryState.IDLE:
            return self.state

        self.state = RecoveryState.CHECKING
        snapshot = self.autosave.read(ttl_hours=self.ttl_hours)

        if snapshot is None or not is_dirty(snapshot):
            self.state = RecoveryState.NO_RECOVERY
            logger.info("No session to recover")
        else:
            self.form.hydrate(snapshot)
            self.state = RecoveryState.HYDRATED
            logger.info("Recovered auto-saved session")
        return self.state

    def promote(self, name: str, presets: PresetManager) -> Optional[Preset]:
        """Save the live form as a preset; the auto-save slot is kept."""
        preset = presets.save(name, self.form.data)
        if preset is not None:
            self._hide()
        return preset

    def request_clear(self, gate: ConfirmationGate):
        """Ask before deleting the auto-save slot."""
        if not self.banner_visible:
            return None
        return gate.request('clear_autosave', CLEAR_AUTOSAVE_MESSAGE, self._clear)

    def _clear(self):
        self.autosave.clear()
        self._hide()
        logger.info("Cleared auto-saved session")

    def dismiss(self):
        self._hide()

    def _hide(self):
        if self.state == RecoveryState.HYDRATED:
            self.state = RecoveryState.BANNER_HIDDEN

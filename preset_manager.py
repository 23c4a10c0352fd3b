"""
Analyst Console - Preset Manager
Named snapshots of the technical form, persisted as one list in the store.
"""

import logging
import time
import uuid
from datetime import datetime
from typing import List, Optional

import pandas as pd

from analyst_store import KeyValueStore, PRESETS_KEY
from errors import PresetNotFoundError
from technical_data import Preset, TechnicalData

logger = logging.getLogger(__name__)


class PresetManager:
    """
    CRUD over the saved presets.

    Features:
    - Save the current form under a name
    - Load a preset back (always a deep copy)
    - Delete a preset
    - Tabular listing for the UI

    The whole list is written back on every change.
    """

    def __init__(self, store: KeyValueStore):
        """
        Args:
            store: Persisted store holding the "presets" record
        """
        self.store = store
        self._presets: List[Preset] = self._load_presets()

    def _load_presets(self) -> List[Preset]:
        raw = self.store.get(PRESETS_KEY, default=[])
        if not isinstance(raw, list):
            logger.warning("Presets record is not a list, discarding it")
            return []

        presets = []
        for entry in raw:
            try:
                presets.append(Preset.from_dict(entry))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning("Skipping unreadable preset %r: %s", entry, e)
        return presets

    def _persist(self):
        self.store.put(PRESETS_KEY, [p.to_dict() for p in self._presets])

    # ═══════════════════════════════════════════════════════════════════════════
    # CRUD
    # ═══════════════════════════════════════════════════════════════════════════

    def save(self, name: str, data: TechnicalData) -> Optional[Preset]:
        """
        Save a named snapshot of data.

        Returns:
            The new Preset, or None when the name is blank.
        """
        name = (name or '').strip()
        if not name:
            return None

        preset = Preset(
            id=uuid.uuid4().hex,
            name=name,
            data=data.copy(),
            timestamp=int(time.time() * 1000),
        )
        self._presets.append(preset)
        self._persist()
        logger.info("Saved preset %r (%s)", name, preset.id)
        return preset

    def load(self, preset_id: str) -> TechnicalData:
        """Return a copy of the preset's data; raises PresetNotFoundError."""
        return self.get(preset_id).data.copy()

    def delete(self, preset_id: str) -> bool:
        """Remove a preset. Unknown ids are a silent no-op (returns False)."""
        original_len = len(self._presets)
        remaining = [p for p in self._presets if p.id != preset_id]

        if len(remaining) == original_len:
            return False

        self._presets = remaining
        self._persist()
        logger.info("Deleted preset %s", preset_id)
        return True

    def get(self, preset_id: str) -> Preset:
        for p in self._presets:
            if p.id == preset_id:
                return Preset(id=p.id, name=p.name, data=p.data.copy(), timestamp=p.timestamp)
        raise PresetNotFoundError(preset_id)

    @property
    def presets(self) -> List[Preset]:
        return [Preset(id=p.id, name=p.name, data=p.data.copy(), timestamp=p.timestamp)
                for p in self._presets]

    def __len__(self):
        return len(self._presets)

    # ═══════════════════════════════════════════════════════════════════════════
    # DISPLAY
    # ═══════════════════════════════════════════════════════════════════════════

    def as_dataframe(self) -> pd.DataFrame:
        """Return presets as a display table (Name, Saved, Price)."""
        if not self._presets:
            return pd.DataFrame(columns=['Name', 'Saved', 'Price'])

        return pd.DataFrame({
            'Name': [p.name for p in self._presets],
            'Saved': [datetime.fromtimestamp(p.timestamp / 1000).strftime('%Y-%m-%d') for p in self._presets],
            'Price': [p.data.current_price or '-' for p in self._presets],
        })

    def option_label(self, preset: Preset) -> str:
        """Selectbox label, e.g. 'MyPreset (2026-10-17)'."""
        saved = datetime.fromtimestamp(preset.timestamp / 1000).strftime('%Y-%m-%d')
        return f"{preset.name} ({saved})"

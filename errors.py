"""
Analyst Console - Exception types.
"""


class AnalystError(Exception):
    """Base class for all analyst console errors."""


class PresetNotFoundError(AnalystError, KeyError):
    """Raised when a preset id does not exist in the store."""

    def __init__(self, preset_id: str):
        self.preset_id = preset_id
        super().__init__(f"Preset not found: {preset_id}")

    def __str__(self):
        return self.args[0]


class AnalysisRequestError(AnalystError):
    """The AI round trip failed (network, quota, non-success status...)."""


class MissingApiKeyError(AnalystError):
    """No Gemini API key could be found in the environment or secrets."""

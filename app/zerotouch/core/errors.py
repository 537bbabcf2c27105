"""Error taxonomy for campaign deployment.

Per-campaign errors (CampaignIOError, ClassificationAmbiguous,
SynthesisError) skip one campaign and let the scan cycle continue.
Cycle errors (ConfigValidationError, ReloadError) abort the commit of one
cycle. FatalFailure blocks every further automatic change until an
operator clears it.
"""

from __future__ import annotations


class ZeroTouchError(Exception):
    """Base exception for all zerotouch errors."""


class SettingsError(ZeroTouchError):
    """Raised when the settings file cannot be read or is invalid."""


class StoreError(ZeroTouchError):
    """Raised when the config store cannot be loaded or persisted."""


class CampaignIOError(ZeroTouchError):
    """Raised when a campaign directory cannot be read."""


class ClassificationAmbiguous(ZeroTouchError):
    """Raised for campaigns whose structure matched no known layout."""


class SynthesisError(ZeroTouchError):
    """Raised when a campaign cannot be turned into a safe config block."""


class LocationCollisionError(SynthesisError):
    """Raised when two campaigns sanitize to the same location path."""

    def __init__(self, location: str, campaigns: list[str]) -> None:
        self.location = location
        self.campaigns = sorted(campaigns)
        super().__init__(
            f"location /{location}/ claimed by several campaigns: {', '.join(self.campaigns)}"
        )


class ConfigValidationError(ZeroTouchError):
    """Raised when the assembled configuration fails the proxy syntax check.

    Attributes:
        diagnostics: Output of the validation tool.
    """

    def __init__(self, message: str, diagnostics: str = "") -> None:
        self.diagnostics = diagnostics
        super().__init__(message)


class ReloadError(ZeroTouchError):
    """Raised when the proxy failed to pick up a new configuration.

    The live configuration was rolled back before this is raised.

    Attributes:
        cause: Description of the original reload/confirm failure.
        rollback_outcome: Description of how the rollback went.
    """

    def __init__(self, cause: str, rollback_outcome: str) -> None:
        self.cause = cause
        self.rollback_outcome = rollback_outcome
        super().__init__(f"{cause} (rollback: {rollback_outcome})")


class FatalFailure(ZeroTouchError):
    """Raised when rollback itself failed; automatic changes are halted."""

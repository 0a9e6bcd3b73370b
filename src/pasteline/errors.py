"""Error taxonomy for paste operations."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from pasteline.strategies import PasteResult


class FailureReason(str, Enum):
    """Why a single attempt (or the whole call) failed."""

    TOOL_MISSING = "tool-missing"
    KEYBINDING_SIMULATION_FAILED = "keybinding-simulation-failed"
    TIMEOUT = "timeout"
    ENVIRONMENT_UNSUPPORTED = "environment-unsupported"
    PERMISSION_REQUIRED = "permission-required"


REMEDIATION: dict[FailureReason, str] = {
    FailureReason.TOOL_MISSING: "Install the paste tool for your session, or paste manually.",
    FailureReason.KEYBINDING_SIMULATION_FAILED: (
        "The paste shortcut could not be simulated. Paste manually."
    ),
    FailureReason.TIMEOUT: "The paste tool did not respond in time. Paste manually.",
    FailureReason.ENVIRONMENT_UNSUPPORTED: (
        "This desktop session does not allow automatic pasting. Paste manually."
    ),
    FailureReason.PERMISSION_REQUIRED: (
        "Grant Accessibility permission in System Settings, then try again."
    ),
}


class PastelineError(Exception):
    """Base class for all errors raised to callers."""

    code = "pasteline-error"


class ClipboardAccessError(PastelineError):
    """Reading or writing the OS clipboard failed."""

    code = "clipboard-access-error"


class PermissionRequiredError(PastelineError):
    """macOS Accessibility permission is missing. The text stays on the clipboard."""

    code = "permission-required"
    reason = FailureReason.PERMISSION_REQUIRED

    def __init__(self, message: str, stuck: bool = False) -> None:
        super().__init__(message)
        self.stuck = stuck


class PasteSimulationError(PastelineError):
    """Every paste candidate failed. The text stays on the clipboard."""

    code = "paste-simulation-failed"

    def __init__(
        self,
        message: str,
        result: "PasteResult",
        reason: FailureReason = FailureReason.KEYBINDING_SIMULATION_FAILED,
        recommended_install: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.result = result
        self.reason = reason
        self.recommended_install = recommended_install

    @property
    def failed_attempts(self) -> list:
        return self.result.failed_attempts


class EnvironmentUnsupportedError(PasteSimulationError):
    """No compatible paste mechanism exists for this session."""

    def __init__(
        self,
        message: str,
        result: "PasteResult",
        recommended_install: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            result,
            reason=FailureReason.ENVIRONMENT_UNSUPPORTED,
            recommended_install=recommended_install,
        )

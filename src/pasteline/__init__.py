"""pasteline - deliver text into the focused application via the clipboard."""

from __future__ import annotations

from typing import Optional

from pasteline.errors import (
    ClipboardAccessError,
    EnvironmentUnsupportedError,
    FailureReason,
    PasteSimulationError,
    PastelineError,
    PermissionRequiredError,
)
from pasteline.orchestrator import PasteOrchestrator
from pasteline.strategies import FailedAttempt, PasteResult

__version__ = "0.1.0"

_default: Optional[PasteOrchestrator] = None


def get_orchestrator() -> PasteOrchestrator:
    """Process-wide orchestrator, created on first use with the user's config."""
    global _default
    if _default is None:
        from pasteline.config import load_config

        _default = PasteOrchestrator(config=load_config())
    return _default


def paste_text(text: str) -> PasteResult:
    return get_orchestrator().paste_text(text)


def read_clipboard() -> str:
    return get_orchestrator().read_clipboard()


def write_clipboard(text: str) -> dict:
    return get_orchestrator().write_clipboard(text)


def check_paste_tool_availability() -> dict:
    return get_orchestrator().check_paste_tool_availability()


def check_accessibility_permission() -> bool:
    return get_orchestrator().check_accessibility_permission()


__all__ = [
    "ClipboardAccessError",
    "EnvironmentUnsupportedError",
    "FailedAttempt",
    "FailureReason",
    "PasteOrchestrator",
    "PasteResult",
    "PasteSimulationError",
    "PastelineError",
    "PermissionRequiredError",
    "check_accessibility_permission",
    "check_paste_tool_availability",
    "get_orchestrator",
    "paste_text",
    "read_clipboard",
    "write_clipboard",
]

"""Paste strategies: one value per platform/tool pairing, plus the runner.

A strategy is plain data (tool, argv, timing). The orchestrator asks the
builders below for an ordered list and hands each entry to
``StrategyRunner.run``, which sleeps the pre-paste delay, spawns the tool
under its timeout and reports a typed outcome. Timing is fixed per tool.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from pasteline.capabilities import ToolCache
from pasteline.errors import FailureReason
from pasteline.focus import ForegroundWindow
from pasteline.session import SessionInfo

log = logging.getLogger("pasteline")


# ---------------------------------------------------------------------------
# Timing contract (seconds)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Timing:
    pre_delay: float
    restore_delay: float
    timeout: float


MACOS_TIMING = Timing(pre_delay=0.05, restore_delay=0.1, timeout=3.0)
NIRCMD_TIMING = Timing(pre_delay=0.03, restore_delay=0.08, timeout=2.0)
POWERSHELL_TIMING = Timing(pre_delay=0.04, restore_delay=0.08, timeout=5.0)
LINUX_X11_TIMING = Timing(pre_delay=0.05, restore_delay=0.2, timeout=2.0)
LINUX_WAYLAND_TIMING = Timing(pre_delay=0.0, restore_delay=0.2, timeout=2.0)


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PasteStrategy:
    tool: str
    args: tuple[str, ...]
    timing: Timing
    executable: Optional[str] = None

    @property
    def command(self) -> list[str]:
        return [self.executable or self.tool, *self.args]

    @property
    def timeout(self) -> float:
        return self.timing.timeout


@dataclass(frozen=True)
class PasteAttempt:
    tool: str
    args: tuple[str, ...]
    timeout: float
    started_at: float


@dataclass(frozen=True)
class FailedAttempt:
    tool: str
    args: tuple[str, ...]
    reason: FailureReason
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "tool": self.tool,
            "args": list(self.args),
            "reason": self.reason.value,
            "detail": self.detail,
        }


@dataclass
class PasteResult:
    succeeded: bool = False
    tool_used: Optional[str] = None
    failed_attempts: list[FailedAttempt] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "tool_used": self.tool_used,
            "failed_attempts": [a.to_dict() for a in self.failed_attempts],
        }


@dataclass(frozen=True)
class AttemptOutcome:
    succeeded: bool
    reason: Optional[FailureReason] = None
    detail: str = ""
    elapsed: float = 0.0


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class StrategyRunner:
    """Executes one strategy: settle, spawn, wait or kill at the timeout."""

    def __init__(
        self,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sleep = sleep
        self._clock = clock

    def run(self, strategy: PasteStrategy) -> AttemptOutcome:
        if strategy.timing.pre_delay > 0:
            self._sleep(strategy.timing.pre_delay)

        attempt = PasteAttempt(
            tool=strategy.tool,
            args=strategy.args,
            timeout=strategy.timeout,
            started_at=self._clock(),
        )
        log.debug(f"Attempting paste with {attempt.tool} (timeout {attempt.timeout}s)")

        try:
            # subprocess.run kills the child when the timeout expires
            result = subprocess.run(
                strategy.command,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=attempt.timeout,
            )
        except subprocess.TimeoutExpired:
            return self._failed(
                attempt, FailureReason.TIMEOUT, f"{attempt.tool} timed out after {attempt.timeout}s"
            )
        except OSError as e:
            return self._failed(attempt, FailureReason.TOOL_MISSING, f"{attempt.tool}: {e}")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            detail = f"{attempt.tool} exited with code {result.returncode}"
            if stderr:
                detail += f": {stderr}"
            return self._failed(attempt, FailureReason.KEYBINDING_SIMULATION_FAILED, detail)

        elapsed = self._clock() - attempt.started_at
        log.debug(f"Paste with {attempt.tool} succeeded in {elapsed * 1000:.0f}ms")
        return AttemptOutcome(succeeded=True, elapsed=elapsed)

    def _failed(self, attempt: PasteAttempt, reason: FailureReason, detail: str) -> AttemptOutcome:
        elapsed = self._clock() - attempt.started_at
        log.warning(f"Paste with {attempt.tool} failed ({reason.value}): {detail}")
        return AttemptOutcome(succeeded=False, reason=reason, detail=detail, elapsed=elapsed)


# ---------------------------------------------------------------------------
# macOS
# ---------------------------------------------------------------------------

APPLESCRIPT_PASTE = 'tell application "System Events" to keystroke "v" using command down'


def macos_strategies() -> list[PasteStrategy]:
    return [PasteStrategy("osascript", ("-e", APPLESCRIPT_PASTE), MACOS_TIMING)]


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------

POWERSHELL_ARGS = (
    "-NoProfile",
    "-NonInteractive",
    "-WindowStyle",
    "Hidden",
    "-ExecutionPolicy",
    "Bypass",
    "-Command",
    "[void][System.Reflection.Assembly]::LoadWithPartialName('System.Windows.Forms');"
    "[System.Windows.Forms.SendKeys]::SendWait('^v')",
)


def find_nircmd(tools: ToolCache, configured_path: str = "") -> Optional[str]:
    """Configured path first, then PATH."""
    if configured_path and os.path.isfile(configured_path):
        return configured_path
    if tools.exists("nircmd"):
        return "nircmd"
    return None


def windows_strategies(tools: ToolCache, nircmd_path: str = "") -> list[PasteStrategy]:
    strategies = []
    nircmd = find_nircmd(tools, nircmd_path)
    if nircmd:
        strategies.append(
            PasteStrategy("nircmd", ("sendkeypress", "ctrl+v"), NIRCMD_TIMING, executable=nircmd)
        )
    else:
        log.debug("nircmd not found, using PowerShell")
    strategies.append(
        PasteStrategy("powershell", POWERSHELL_ARGS, POWERSHELL_TIMING, executable="powershell.exe")
    )
    return strategies


# ---------------------------------------------------------------------------
# Linux
# ---------------------------------------------------------------------------

LINUX_TOOLS = ("wtype", "xdotool", "ydotool")

# evdev key codes: 29=KEY_LEFTCTRL, 42=KEY_LEFTSHIFT, 47=KEY_V
_YDOTOOL_CTRL_V = ("key", "29:1", "47:1", "47:0", "29:0")
_YDOTOOL_CTRL_SHIFT_V = ("key", "29:1", "42:1", "47:1", "47:0", "42:0", "29:0")

_WTYPE_CTRL_V = ("-M", "ctrl", "-k", "v", "-m", "ctrl")
_WTYPE_CTRL_SHIFT_V = ("-M", "ctrl", "-M", "shift", "-k", "v", "-m", "shift", "-m", "ctrl")


def linux_timing(session: SessionInfo) -> Timing:
    return LINUX_WAYLAND_TIMING if session.is_wayland else LINUX_X11_TIMING


def can_use_tool(tool: str, session: SessionInfo) -> bool:
    """Session compatibility, before checking whether the tool is installed."""
    if tool == "wtype":
        return session.is_wayland and not session.is_gnome
    if tool == "xdotool":
        return not session.is_wayland or session.bridge_available
    if tool == "ydotool":
        return session.is_wayland
    return False


def _xdotool_prefix(window: ForegroundWindow) -> tuple[str, ...]:
    # Our own window may have stolen focus; put it back on the captured target
    if window.window_id:
        return ("windowactivate", "--sync", window.window_id)
    return ()


def linux_strategies(
    session: SessionInfo, tools: ToolCache, window: ForegroundWindow
) -> list[PasteStrategy]:
    timing = linux_timing(session)
    terminal = window.is_terminal
    keys = "ctrl+shift+v" if terminal else "ctrl+v"

    args = {
        "wtype": _WTYPE_CTRL_SHIFT_V if terminal else _WTYPE_CTRL_V,
        "xdotool": (*_xdotool_prefix(window), "key", keys),
        "ydotool": _YDOTOOL_CTRL_SHIFT_V if terminal else _YDOTOOL_CTRL_V,
    }

    return [
        PasteStrategy(tool, args[tool], timing)
        for tool in LINUX_TOOLS
        if can_use_tool(tool, session) and tools.exists(tool)
    ]


def terminal_type_fallback(
    text: str, session: SessionInfo, tools: ToolCache, window: ForegroundWindow
) -> Optional[PasteStrategy]:
    """Type the text as raw keystrokes; X11 terminals only."""
    if not window.is_terminal or session.is_wayland or not tools.exists("xdotool"):
        return None
    args = (*_xdotool_prefix(window), "type", "--clearmodifiers", "--", text)
    return PasteStrategy("xdotool type", args, linux_timing(session), executable="xdotool")


def recommended_linux_install(session: SessionInfo) -> Optional[str]:
    if not session.is_wayland:
        return "xdotool"
    if session.is_gnome:
        return "xdotool" if session.bridge_available else None
    return "xdotool" if session.bridge_available else "wtype or xdotool"


def describe_linux_failure(
    session: SessionInfo, tools: ToolCache, window: ForegroundWindow
) -> str:
    """User-facing explanation for a Linux paste that could not be automated."""
    xdotool = tools.exists("xdotool")
    manual = "Please paste manually with Ctrl+V."

    if not session.is_wayland:
        return (
            "Clipboard copied, but paste simulation failed on X11. "
            "Please install xdotool or paste manually with Ctrl+V."
        )

    if session.is_gnome:
        if not session.bridge_available:
            return f"Clipboard copied, but GNOME Wayland blocks automatic pasting. {manual}"
        if not xdotool:
            return (
                "Clipboard copied, but automatic pasting on GNOME Wayland requires xdotool "
                "for XWayland apps. Please install xdotool or paste manually with Ctrl+V."
            )
        if not (window.via == "xdotool" and window.class_name):
            return (
                "Clipboard copied, but the active app isn't running under XWayland. "
                f"{manual}"
            )
        return f"Clipboard copied, but paste simulation failed via XWayland. {manual}"

    if not tools.exists("wtype") and not xdotool:
        if not session.bridge_available:
            return (
                "Clipboard copied, but automatic pasting on Wayland requires wtype or xdotool. "
                "Please install one or paste manually with Ctrl+V."
            )
        return (
            "Clipboard copied, but automatic pasting on Wayland requires xdotool "
            "(recommended for Electron/XWayland apps) or wtype. "
            "Please install one or paste manually with Ctrl+V."
        )

    note = ""
    if session.bridge_available and not xdotool:
        note = (
            " Consider installing xdotool, which works well with Electron apps "
            "running under XWayland."
        )
    return (
        "Clipboard copied, but paste simulation failed on Wayland. Your compositor may "
        f"not support the virtual keyboard protocol.{note} Alternatively, paste manually "
        "with Ctrl+V."
    )

"""Clipboard-preserving paste into the focused application.

``PasteOrchestrator.paste_text`` snapshots the clipboard, writes the target
text, builds the ordered strategy list for this platform and session, and
runs the candidates one at a time. On success the snapshot is written back
after the tool's restore delay; when everything fails the text is left on
the clipboard so the user can paste by hand, and a typed error carrying the
full list of failed attempts is raised.

Calls are not serialized here. Two overlapping calls race on the one OS
clipboard; callers must not overlap them.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Callable, Mapping
from typing import Optional

from pasteline.capabilities import PermissionCache, ToolCache
from pasteline.clipboard import ClipboardStore
from pasteline.config import DEFAULT_CONFIG
from pasteline.errors import (
    EnvironmentUnsupportedError,
    PasteSimulationError,
    PastelineError,
    PermissionRequiredError,
)
from pasteline.focus import FocusInspector
from pasteline.session import current_platform, get_session_info
from pasteline.strategies import (
    LINUX_TOOLS,
    FailedAttempt,
    PasteResult,
    PasteStrategy,
    StrategyRunner,
    can_use_tool,
    describe_linux_failure,
    find_nircmd,
    linux_strategies,
    macos_strategies,
    recommended_linux_install,
    terminal_type_fallback,
    windows_strategies,
)

log = logging.getLogger("pasteline")

SETTINGS_COMMANDS: list[list[str]] = [
    ["open", "x-apple.systempreferences:com.apple.preference.security?Privacy_Accessibility"],
    ["open", "-b", "com.apple.systempreferences"],
    ["open", "/System/Library/PreferencePanes/Security.prefPane"],
    ["open", "-a", "System Preferences"],
    ["open", "-a", "System Settings"],
]
SETTINGS_TIMEOUT = 2.0

PERMISSION_MESSAGE = (
    "Accessibility permission is required for automatic pasting. Text has been "
    "copied to the clipboard - please paste manually with Cmd+V. To enable "
    "pasting, open System Settings > Privacy & Security > Accessibility and "
    "allow this app, then restart it."
)
STUCK_PERMISSION_MESSAGE = (
    "Accessibility permission looks stale (left over from a previous build). "
    "Text has been copied to the clipboard - please paste manually with Cmd+V. "
    "To fix: open System Settings > Privacy & Security > Accessibility, remove "
    "every old entry for this app, add it again, enable it and restart the app."
)


def _attempt_summary(result: PasteResult) -> str:
    if not result.failed_attempts:
        return ""
    tried = ", ".join(f"{a.tool} ({a.detail or a.reason.value})" for a in result.failed_attempts)
    return f"\n\nAttempted tools: {tried}"


def open_system_settings() -> bool:
    """Best-effort jump to the Accessibility pane. Returns True if one opened."""
    for cmd in SETTINGS_COMMANDS:
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=SETTINGS_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as e:
            log.debug(f"{' '.join(cmd)} failed: {e}")
            continue
        if result.returncode == 0:
            return True
    log.warning("Could not open System Settings; grant Accessibility permission manually")
    return False


class PasteOrchestrator:
    """Top-level paste engine. One instance per process."""

    def __init__(
        self,
        config: Optional[Mapping] = None,
        clipboard: Optional[ClipboardStore] = None,
        tools: Optional[ToolCache] = None,
        permissions: Optional[PermissionCache] = None,
        runner: Optional[StrategyRunner] = None,
        focus: Optional[FocusInspector] = None,
        platform: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config if config is not None else DEFAULT_CONFIG
        self.clipboard = clipboard or ClipboardStore()
        self.tools = tools or ToolCache(clock=clock)
        self.permissions = permissions or PermissionCache(clock=clock)
        self.runner = runner or StrategyRunner(sleep=sleep, clock=clock)
        linux_config = self.config.get("linux") or {}
        self.focus = focus or FocusInspector(
            self.tools,
            extra_terminal_classes=linux_config.get("extra_terminal_classes") or [],
        )
        self.platform = platform or current_platform()
        self.environ = environ
        self._sleep = sleep
        self._clock = clock

    # ------------------------------------------------------------------
    # Paste
    # ------------------------------------------------------------------

    def paste_text(self, text: str) -> PasteResult:
        """Paste ``text`` into the focused window, preserving the clipboard.

        Raises ClipboardAccessError, PermissionRequiredError or
        PasteSimulationError (EnvironmentUnsupportedError when nothing
        compatible exists). On the latter two the clipboard holds ``text``.
        """
        start = self._clock()
        snapshot = self.clipboard.read()
        log.debug(f"Saved clipboard snapshot ({len(snapshot)} chars)")
        self.clipboard.write(text)

        try:
            if self.platform == "darwin":
                result = self._paste_macos(snapshot)
            elif self.platform == "win32":
                result = self._paste_windows(snapshot)
            else:
                result = self._paste_linux(text, snapshot)
        except PastelineError as e:
            elapsed = (self._clock() - start) * 1000
            log.error(f"Paste failed on {self.platform} after {elapsed:.0f}ms: {e.code}")
            raise

        elapsed = (self._clock() - start) * 1000
        log.info(
            f"Pasted {len(text)} chars via {result.tool_used} on {self.platform} "
            f"in {elapsed:.0f}ms"
        )
        return result

    def _run_chain(
        self, strategies: list[PasteStrategy], snapshot: str, result: PasteResult
    ) -> bool:
        """Try candidates in order; restore the snapshot after the first success."""
        for strategy in strategies:
            outcome = self.runner.run(strategy)
            if outcome.succeeded:
                result.succeeded = True
                result.tool_used = strategy.tool
                # Let the target app read the clipboard before we put the old content back
                self._sleep(strategy.timing.restore_delay)
                self.clipboard.write(snapshot)
                log.debug("Original clipboard restored")
                return True
            result.failed_attempts.append(
                FailedAttempt(
                    tool=strategy.tool,
                    args=strategy.args,
                    reason=outcome.reason,
                    detail=outcome.detail,
                )
            )
        return False

    def _paste_macos(self, snapshot: str) -> PasteResult:
        if not self.check_accessibility_permission():
            grant = self.permissions.last
            stuck = bool(grant and grant.stuck)
            raise PermissionRequiredError(
                STUCK_PERMISSION_MESSAGE if stuck else PERMISSION_MESSAGE, stuck=stuck
            )

        result = PasteResult()
        if self._run_chain(macos_strategies(), snapshot, result):
            return result
        raise PasteSimulationError(
            "Paste failed. Text is copied to clipboard - please paste manually with Cmd+V."
            + _attempt_summary(result),
            result,
        )

    def _paste_windows(self, snapshot: str) -> PasteResult:
        nircmd_path = (self.config.get("windows") or {}).get("nircmd_path", "")
        result = PasteResult()
        if self._run_chain(windows_strategies(self.tools, nircmd_path), snapshot, result):
            return result
        raise PasteSimulationError(
            "Windows paste failed. Text is copied to clipboard - please paste manually "
            "with Ctrl+V." + _attempt_summary(result),
            result,
        )

    def _paste_linux(self, text: str, snapshot: str) -> PasteResult:
        session = get_session_info(self.environ)
        window = self.focus.foreground_window(session)
        strategies = linux_strategies(session, self.tools, window)
        log.debug(
            f"Linux paste: session={session.display_server} compositor={session.compositor} "
            f"bridge={session.bridge_available} window={window.window_id} "
            f"class={window.class_name} terminal={window.is_terminal} "
            f"candidates={[s.tool for s in strategies]}"
        )

        result = PasteResult()
        if strategies:
            if self._run_chain(strategies, snapshot, result):
                return result
            log.error(f"All paste tools failed: {[a.tool for a in result.failed_attempts]}")

            fallback = terminal_type_fallback(text, session, self.tools, window)
            if fallback is not None:
                log.info("Trying xdotool type fallback for terminal")
                if self._run_chain([fallback], snapshot, result):
                    return result

        message = describe_linux_failure(session, self.tools, window) + _attempt_summary(result)
        recommended = recommended_linux_install(session)
        gnome_blocked = session.is_wayland and session.is_gnome and not session.bridge_available
        if not strategies or gnome_blocked:
            raise EnvironmentUnsupportedError(message, result, recommended_install=recommended)
        raise PasteSimulationError(message, result, recommended_install=recommended)

    # ------------------------------------------------------------------
    # Clipboard passthrough
    # ------------------------------------------------------------------

    def read_clipboard(self) -> str:
        return self.clipboard.read()

    def write_clipboard(self, text: str) -> dict:
        self.clipboard.write(text)
        return {"success": True}

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def check_accessibility_permission(self) -> bool:
        """macOS only; always True elsewhere.

        On a fresh denial the Accessibility pane is opened from a background
        thread so the caller (usually a failing paste) returns immediately.
        """
        if self.platform != "darwin":
            return True

        previous = self.permissions.last
        granted = self.permissions.check()
        fresh = self.permissions.last is not previous
        if not granted and fresh:
            log.warning("Accessibility permission missing")
            if (self.config.get("macos") or {}).get("open_settings_on_denial", True):
                threading.Thread(target=open_system_settings, daemon=True).start()
        return granted

    def check_paste_tool_availability(self) -> dict:
        """Report what this machine can use for automatic pasting. Never raises."""
        try:
            return self._availability()
        except Exception as e:
            log.warning(f"Paste tool check failed: {e}")
            return {
                "platform": self.platform,
                "available": False,
                "method": None,
                "requires_permission": False,
                "tools": [],
                "recommended_install": None,
            }

    def _availability(self) -> dict:
        if self.platform == "darwin":
            return {
                "platform": "darwin",
                "available": True,
                "method": "applescript",
                "requires_permission": True,
                "tools": [],
                "recommended_install": None,
            }

        if self.platform == "win32":
            nircmd_path = (self.config.get("windows") or {}).get("nircmd_path", "")
            tools = ["nircmd"] if find_nircmd(self.tools, nircmd_path) else []
            tools.append("powershell")
            return {
                "platform": "win32",
                "available": True,
                "method": tools[0],
                "requires_permission": False,
                "tools": tools,
                "recommended_install": None,
            }

        session = get_session_info(self.environ)
        tools = [
            tool
            for tool in LINUX_TOOLS
            if can_use_tool(tool, session) and self.tools.exists(tool)
        ]
        available = bool(tools)
        return {
            "platform": "linux",
            "available": available,
            "method": tools[0] if available else None,
            "requires_permission": False,
            "tools": tools,
            "recommended_install": None if available else recommended_linux_install(session),
            "is_wayland": session.is_wayland,
            "bridge_available": session.bridge_available,
            "compositor": session.compositor,
        }

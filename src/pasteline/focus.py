"""Foreground-window lookup and terminal classification (Linux)."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from pasteline.capabilities import ToolCache
from pasteline.session import SessionInfo

log = logging.getLogger("pasteline")

PROBE_TIMEOUT = 1.0

TERMINAL_CLASSES: tuple[str, ...] = (
    "konsole",
    "gnome-terminal",
    "terminal",
    "kitty",
    "alacritty",
    "terminator",
    "xterm",
    "urxvt",
    "rxvt",
    "tilix",
    "terminology",
    "wezterm",
    "foot",
    "st",
    "yakuake",
)


@dataclass(frozen=True)
class ForegroundWindow:
    window_id: Optional[str] = None
    class_name: Optional[str] = None
    via: Optional[str] = None
    is_terminal: bool = False


def is_terminal_class(class_name: Optional[str], extra: Iterable[str] = ()) -> bool:
    """Substring match against known terminal emulator classes."""
    if not class_name:
        return False
    name = class_name.lower()
    return any(term in name for term in (*TERMINAL_CLASSES, *extra))


def _run_probe(args: list[str]) -> Optional[str]:
    """Run an introspection command; stripped stdout or None on any failure."""
    try:
        result = subprocess.run(
            args, capture_output=True, text=True, errors="replace", timeout=PROBE_TIMEOUT
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.debug(f"{args[0]} probe failed: {e}")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


class FocusInspector:
    """Identifies the focused window so keystrokes can be retargeted."""

    def __init__(self, tools: ToolCache, extra_terminal_classes: Iterable[str] = ()) -> None:
        self.tools = tools
        self.extra_terminal_classes = tuple(c.lower() for c in extra_terminal_classes)

    def _xdotool_usable(self, session: SessionInfo) -> bool:
        if session.is_wayland and not session.bridge_available:
            return False
        return self.tools.exists("xdotool")

    def foreground_window(self, session: SessionInfo) -> ForegroundWindow:
        """Never raises; degrades to an empty, non-terminal window."""
        window_id: Optional[str] = None
        if self._xdotool_usable(session):
            window_id = _run_probe(["xdotool", "getactivewindow"])
            if window_id:
                class_args = ["xdotool", "getwindowclassname", window_id]
            else:
                class_args = ["xdotool", "getactivewindow", "getwindowclassname"]
            class_name = _run_probe(class_args)
            if class_name:
                return self._classified(window_id, class_name, "xdotool")

        # KDE Wayland: kdotool can classify, but its ids mean nothing to xdotool
        if self.tools.exists("kdotool"):
            kde_id = _run_probe(["kdotool", "getactivewindow"])
            if kde_id:
                class_name = _run_probe(["kdotool", "getwindowclassname", kde_id])
                if class_name:
                    return self._classified(window_id, class_name, "kdotool")

        return ForegroundWindow(window_id=window_id)

    def _classified(
        self, window_id: Optional[str], class_name: str, via: str
    ) -> ForegroundWindow:
        class_name = class_name.lower()
        terminal = is_terminal_class(class_name, self.extra_terminal_classes)
        if terminal:
            log.debug(f"Terminal detected via {via}: {class_name}")
        return ForegroundWindow(
            window_id=window_id, class_name=class_name, via=via, is_terminal=terminal
        )

"""Display-session detection."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

_DESKTOP_VARS = ("XDG_CURRENT_DESKTOP", "XDG_SESSION_DESKTOP", "DESKTOP_SESSION")


@dataclass(frozen=True)
class SessionInfo:
    display_server: str  # "x11" | "wayland"
    compositor: str  # "gnome" | "other" | "none"
    bridge_available: bool
    desktop: str = ""

    @property
    def is_wayland(self) -> bool:
        return self.display_server == "wayland"

    @property
    def is_gnome(self) -> bool:
        return self.compositor == "gnome"


def current_platform() -> str:
    """Return 'darwin', 'win32' or 'linux'."""
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("win"):
        return "win32"
    return "linux"


def detect_desktop(environ: Optional[Mapping[str, str]] = None) -> str:
    """Joined, lower-cased desktop identifiers, e.g. 'ubuntu:gnome'."""
    env = os.environ if environ is None else environ
    return ":".join(env[v] for v in _DESKTOP_VARS if env.get(v)).lower()


def detect_session(environ: Optional[Mapping[str, str]] = None) -> str:
    """Detect display server: 'wayland' or 'x11'."""
    env = os.environ if environ is None else environ
    if env.get("XDG_SESSION_TYPE", "").lower() == "wayland":
        return "wayland"
    if env.get("WAYLAND_DISPLAY"):
        return "wayland"
    return "x11"


def get_session_info(environ: Optional[Mapping[str, str]] = None) -> SessionInfo:
    """Derive session properties from the environment. Cheap; call per paste."""
    env = os.environ if environ is None else environ
    display_server = detect_session(env)
    wayland = display_server == "wayland"
    desktop = detect_desktop(env)

    if not wayland:
        compositor = "none"
    elif "gnome" in desktop:
        compositor = "gnome"
    else:
        compositor = "other"

    return SessionInfo(
        display_server=display_server,
        compositor=compositor,
        bridge_available=wayland and bool(env.get("DISPLAY")),
        desktop=desktop,
    )

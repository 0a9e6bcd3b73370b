"""TTL-cached probes for external tool presence and macOS permission."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

log = logging.getLogger("pasteline")

CACHE_TTL = 30.0  # seconds

Clock = Callable[[], float]
ToolProbe = Callable[[str], bool]


def which_probe(name: str) -> bool:
    """Default probe: is ``name`` resolvable on PATH."""
    return shutil.which(name) is not None


@dataclass
class ToolAvailability:
    exists: bool
    expires_at: float


class ToolCache:
    """Memoizes "is tool T present" for ``ttl`` seconds, negatives included."""

    def __init__(
        self,
        probe: ToolProbe = which_probe,
        clock: Clock = time.monotonic,
        ttl: float = CACHE_TTL,
    ) -> None:
        self._probe = probe
        self._clock = clock
        self.ttl = ttl
        self._entries: dict[str, ToolAvailability] = {}

    def exists(self, name: str) -> bool:
        now = self._clock()
        cached = self._entries.get(name)
        if cached is not None and now < cached.expires_at:
            return cached.exists

        try:
            found = bool(self._probe(name))
        except Exception as e:
            log.debug(f"Probe for {name} failed ({e}), treating as missing")
            found = False

        self._entries[name] = ToolAvailability(exists=found, expires_at=now + self.ttl)
        log.debug(f"Tool {name}: {'found' if found else 'missing'}")
        return found

    def invalidate(self, name: Optional[str] = None) -> None:
        if name is None:
            self._entries.clear()
        else:
            self._entries.pop(name, None)


# ---------------------------------------------------------------------------
# macOS Accessibility permission
# ---------------------------------------------------------------------------

PERMISSION_PROBE_CMD = [
    "osascript",
    "-e",
    'tell application "System Events" to get name of first process',
]
PERMISSION_PROBE_TIMEOUT = 3.0

_STUCK_MARKERS = ("not allowed assistive access", "(-1719)", "(-25006)")


@dataclass
class PermissionGrant:
    granted: bool
    expires_at: float
    stuck: bool = False


def is_stuck_permission(stderr: str) -> bool:
    """Stale grant left behind by a previous build of the app."""
    return any(marker in stderr for marker in _STUCK_MARKERS)


class PermissionCache:
    """Caches the result of a benign System Events call for ``ttl`` seconds."""

    def __init__(self, clock: Clock = time.monotonic, ttl: float = CACHE_TTL) -> None:
        self._clock = clock
        self.ttl = ttl
        self._grant: Optional[PermissionGrant] = None

    @property
    def last(self) -> Optional[PermissionGrant]:
        return self._grant

    def check(self) -> bool:
        now = self._clock()
        if self._grant is not None and now < self._grant.expires_at:
            return self._grant.granted

        stuck = False
        try:
            result = subprocess.run(
                PERMISSION_PROBE_CMD,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=PERMISSION_PROBE_TIMEOUT,
            )
            granted = result.returncode == 0
            if not granted:
                stuck = is_stuck_permission(result.stderr or "")
        except (OSError, subprocess.SubprocessError) as e:
            log.debug(f"Accessibility probe failed: {e}")
            granted = False

        self._grant = PermissionGrant(granted=granted, expires_at=now + self.ttl, stuck=stuck)
        return granted

"""Tests for the tool and permission caches — TTL, negatives, probe errors."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

from pasteline.capabilities import (
    CACHE_TTL,
    PermissionCache,
    ToolCache,
    is_stuck_permission,
    which_probe,
)


class TestToolCache:
    def test_probes_once_within_ttl(self, clock) -> None:
        probe = MagicMock(return_value=True)
        cache = ToolCache(probe=probe, clock=clock)

        assert cache.exists("xdotool") is True
        clock.advance(CACHE_TTL - 1)
        assert cache.exists("xdotool") is True
        probe.assert_called_once_with("xdotool")

    def test_reprobes_after_expiry(self, clock) -> None:
        probe = MagicMock(side_effect=[False, True])
        cache = ToolCache(probe=probe, clock=clock)

        assert cache.exists("wtype") is False
        clock.advance(CACHE_TTL)
        assert cache.exists("wtype") is True
        assert probe.call_count == 2

    def test_caches_negative_results(self, clock) -> None:
        probe = MagicMock(return_value=False)
        cache = ToolCache(probe=probe, clock=clock)

        cache.exists("ydotool")
        cache.exists("ydotool")
        probe.assert_called_once()

    def test_probe_error_cached_as_missing(self, clock) -> None:
        probe = MagicMock(side_effect=RuntimeError("boom"))
        cache = ToolCache(probe=probe, clock=clock)

        assert cache.exists("xdotool") is False
        assert cache.exists("xdotool") is False
        probe.assert_called_once()

    def test_entries_are_per_tool(self, clock) -> None:
        probe = MagicMock(side_effect=lambda name: name == "xdotool")
        cache = ToolCache(probe=probe, clock=clock)

        assert cache.exists("xdotool") is True
        assert cache.exists("wtype") is False
        assert probe.call_count == 2

    def test_invalidate(self, clock) -> None:
        probe = MagicMock(return_value=True)
        cache = ToolCache(probe=probe, clock=clock)
        cache.exists("xdotool")
        cache.invalidate("xdotool")
        cache.exists("xdotool")
        assert probe.call_count == 2

    @patch("pasteline.capabilities.shutil.which", return_value="/usr/bin/xdotool")
    def test_which_probe(self, mock_which: MagicMock) -> None:
        assert which_probe("xdotool") is True
        mock_which.assert_called_once_with("xdotool")


class TestPermissionCache:
    @patch("pasteline.capabilities.subprocess.run")
    def test_granted(self, mock_run: MagicMock, clock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stderr="")
        cache = PermissionCache(clock=clock)
        assert cache.check() is True
        assert cache.last.granted is True

    @patch("pasteline.capabilities.subprocess.run")
    def test_cached_within_ttl(self, mock_run: MagicMock, clock) -> None:
        mock_run.return_value = MagicMock(returncode=1, stderr="denied")
        cache = PermissionCache(clock=clock)

        assert cache.check() is False
        clock.advance(10)
        assert cache.check() is False
        mock_run.assert_called_once()

        clock.advance(CACHE_TTL)
        cache.check()
        assert mock_run.call_count == 2

    @patch("pasteline.capabilities.subprocess.run")
    def test_detects_stuck_permission(self, mock_run: MagicMock, clock) -> None:
        mock_run.return_value = MagicMock(
            returncode=1, stderr="osascript is not allowed assistive access. (-1719)"
        )
        cache = PermissionCache(clock=clock)
        assert cache.check() is False
        assert cache.last.stuck is True

    @patch("pasteline.capabilities.subprocess.run")
    def test_probe_error_is_denial(self, mock_run: MagicMock, clock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="osascript", timeout=3)
        cache = PermissionCache(clock=clock)
        assert cache.check() is False
        assert cache.last.stuck is False

    def test_is_stuck_permission(self) -> None:
        assert is_stuck_permission("error (-25006)") is True
        assert is_stuck_permission("some other error") is False

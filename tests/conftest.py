"""Shared fixtures for pasteline tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pasteline.capabilities import ToolCache
from pasteline.focus import ForegroundWindow
from pasteline.strategies import AttemptOutcome


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClipboard:
    """In-memory clipboard that records every write."""

    def __init__(self, content: str = "") -> None:
        self.content = content
        self.writes: list[str] = []

    def read(self) -> str:
        return self.content

    def write(self, text: str) -> None:
        self.writes.append(text)
        self.content = text


class ScriptedRunner:
    """StrategyRunner stand-in: outcomes keyed by tool name."""

    def __init__(self, outcomes: dict[str, AttemptOutcome] | None = None) -> None:
        self.outcomes = outcomes or {}
        self.ran: list = []

    def run(self, strategy):
        self.ran.append(strategy)
        return self.outcomes.get(strategy.tool, AttemptOutcome(succeeded=True))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> MagicMock:
    return MagicMock()


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard("original")


@pytest.fixture
def make_tools(clock: FakeClock):
    """Build a ToolCache whose probe answers from a set of installed tools."""

    def _make(*installed: str) -> ToolCache:
        return ToolCache(probe=lambda name: name in installed, clock=clock)

    return _make


@pytest.fixture
def no_window() -> MagicMock:
    focus = MagicMock()
    focus.foreground_window.return_value = ForegroundWindow()
    return focus


@pytest.fixture
def scripted_runner():
    return ScriptedRunner

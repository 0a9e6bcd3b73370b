"""Configuration management for pasteline."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import TypedDict

import yaml

# XDG config directory
CONFIG_DIR = Path.home() / ".config" / "pasteline"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


# ---------------------------------------------------------------------------
# TypedDict schemas for config structure
# ---------------------------------------------------------------------------


class LoggingConfig(TypedDict, total=False):
    level: str


class WindowsConfig(TypedDict, total=False):
    nircmd_path: str


class LinuxConfig(TypedDict, total=False):
    extra_terminal_classes: list[str]


class MacOSConfig(TypedDict, total=False):
    open_settings_on_denial: bool


class PastelineConfig(TypedDict, total=False):
    logging: LoggingConfig
    windows: WindowsConfig
    linux: LinuxConfig
    macos: MacOSConfig


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict = {
    "logging": {
        "level": "INFO",
    },
    "windows": {
        "nircmd_path": "",
    },
    "linux": {
        "extra_terminal_classes": [],
    },
    "macos": {
        "open_settings_on_denial": True,
    },
}


# ---------------------------------------------------------------------------
# Config functions
# ---------------------------------------------------------------------------


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        elif value is None and isinstance(result.get(key), dict):
            # A section whose keys are all commented out parses to None
            continue
        else:
            result[key] = value
    return result


def ensure_config_dir() -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def config_exists() -> bool:
    return CONFIG_FILE.exists()


def load_config() -> PastelineConfig:
    """Load config from YAML, merge with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            user_config = yaml.safe_load(f) or {}
        config = deep_merge(config, user_config)
    return config


def save_config(config: dict) -> None:
    """Save config to YAML file."""
    ensure_config_dir()
    with open(CONFIG_FILE, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def get_log_level() -> str:
    config = load_config()
    return str((config.get("logging") or {}).get("level", "INFO")).upper()

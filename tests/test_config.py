"""Tests for configuration — deep merge, load/save, defaults."""

from __future__ import annotations

from unittest.mock import MagicMock, mock_open, patch

from pasteline.config import DEFAULT_CONFIG, deep_merge, get_log_level, load_config, save_config
from pasteline.orchestrator import PasteOrchestrator


class TestDeepMerge:
    def test_simple_merge(self) -> None:
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        override = {"a": {"y": 99, "z": 100}}
        assert deep_merge(base, override) == {"a": {"x": 1, "y": 99, "z": 100}, "b": 3}

    def test_override_dict_with_non_dict(self) -> None:
        assert deep_merge({"a": {"nested": True}}, {"a": 42}) == {"a": 42}

    def test_none_keeps_base_section(self) -> None:
        assert deep_merge({"a": {"x": 1}}, {"a": None}) == {"a": {"x": 1}}

    def test_none_for_scalar_is_kept(self) -> None:
        assert deep_merge({"a": 1}, {"a": None}) == {"a": None}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        deep_merge(base, {"a": 2})
        assert base == {"a": 1}


class TestDefaultConfig:
    def test_sections(self) -> None:
        for section in ("logging", "windows", "linux", "macos"):
            assert section in DEFAULT_CONFIG

    def test_opens_settings_by_default(self) -> None:
        assert DEFAULT_CONFIG["macos"]["open_settings_on_denial"] is True


class TestLoadConfig:
    @patch("pasteline.config.CONFIG_FILE")
    def test_returns_defaults_when_no_file(self, mock_file: MagicMock) -> None:
        mock_file.exists.return_value = False
        config = load_config()
        assert config["logging"]["level"] == "INFO"

    @patch("builtins.open", mock_open(read_data="linux:\n  extra_terminal_classes: [ghostty]\n"))
    @patch("pasteline.config.CONFIG_FILE")
    def test_merges_user_config(self, mock_file: MagicMock) -> None:
        mock_file.exists.return_value = True
        config = load_config()
        assert config["linux"]["extra_terminal_classes"] == ["ghostty"]
        assert "windows" in config

    @patch("builtins.open", mock_open(read_data="linux:\n  # extra_terminal_classes: [ghostty]\n"))
    @patch("pasteline.config.CONFIG_FILE")
    def test_commented_out_section_keeps_defaults(self, mock_file: MagicMock) -> None:
        mock_file.exists.return_value = True
        config = load_config()
        assert config["linux"] == {"extra_terminal_classes": []}
        engine = PasteOrchestrator(config=config, clipboard=MagicMock(), platform="linux")
        assert engine.focus.extra_terminal_classes == ()

    @patch("pasteline.config.CONFIG_FILE")
    def test_defaults_not_shared(self, mock_file: MagicMock) -> None:
        mock_file.exists.return_value = False
        config = load_config()
        config["linux"]["extra_terminal_classes"].append("ghostty")
        assert DEFAULT_CONFIG["linux"]["extra_terminal_classes"] == []


class TestSaveConfig:
    @patch("pasteline.config.ensure_config_dir")
    @patch("pasteline.config.CONFIG_FILE")
    def test_writes_yaml(self, mock_file: MagicMock, mock_dir: MagicMock) -> None:
        m = mock_open()
        with patch("builtins.open", m):
            save_config({"logging": {"level": "DEBUG"}})
        written = "".join(call.args[0] for call in m().write.call_args_list)
        assert "level: DEBUG" in written


class TestLogLevel:
    @patch("pasteline.config.load_config")
    def test_uppercases(self, mock_load: MagicMock) -> None:
        mock_load.return_value = {"logging": {"level": "debug"}}
        assert get_log_level() == "DEBUG"

    @patch("pasteline.config.load_config")
    def test_empty_logging_section(self, mock_load: MagicMock) -> None:
        mock_load.return_value = {"logging": None}
        assert get_log_level() == "INFO"

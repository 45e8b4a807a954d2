"""Tests for xcstrings_translator.config loading and overrides."""

import configparser
import logging
from unittest.mock import patch

import pytest

from xcstrings_translator import config as config_module
from xcstrings_translator.config import (
    LoggingSettings,
    TranslatorConfig,
    _apply_env_overrides,
    _load_from_ini,
    configure_logging,
    get_config_status,
    load_config,
    reload_config,
)


@pytest.mark.unit
def test_defaults():
    cfg = TranslatorConfig()

    assert cfg.ollama.base_url == "http://127.0.0.1:11434"
    assert cfg.ollama.temperature == 0.1
    assert cfg.ollama.probe_timeout_seconds == 5.0
    assert cfg.ollama.connect_timeout_seconds == 5.0
    assert cfg.logging.level == "INFO"
    assert cfg.logging.format == "simple"


@pytest.mark.unit
def test_ollama_env_overrides(monkeypatch, clean_env):
    monkeypatch.setenv("XCT_OLLAMA_URL", " http://gpu-box:11434 ")
    monkeypatch.setenv("XCT_MODEL", "llama3")
    monkeypatch.setenv("XCT_TEMPERATURE", "0.4")
    monkeypatch.setenv("XCT_PROBE_TIMEOUT", "2.5")
    monkeypatch.setenv("XCT_CONNECT_TIMEOUT", "10")

    cfg = load_config()

    assert cfg.ollama.base_url == "http://gpu-box:11434"
    assert cfg.ollama.model == "llama3"
    assert cfg.ollama.temperature == 0.4
    assert cfg.ollama.probe_timeout_seconds == 2.5
    assert cfg.ollama.connect_timeout_seconds == 10.0


@pytest.mark.unit
def test_log_level_env_override(monkeypatch, clean_env):
    monkeypatch.setenv("XCT_LOG_LEVEL", "debug")

    cfg = load_config()

    assert cfg.logging.level == "DEBUG"


@pytest.mark.unit
def test_empty_env_values_ignored(monkeypatch, clean_env):
    monkeypatch.setenv("XCT_MODEL", "")

    cfg = TranslatorConfig()
    _apply_env_overrides(cfg)

    assert cfg.ollama.model == TranslatorConfig().ollama.model


@pytest.mark.unit
def test_invalid_numeric_env_raises(monkeypatch, clean_env):
    monkeypatch.setenv("XCT_TEMPERATURE", "warm")

    with pytest.raises(ValueError):
        _apply_env_overrides(TranslatorConfig())


@pytest.mark.unit
def test_ini_overrides():
    """Settings should load from the INI [ollama] and [logging] sections."""
    parser = configparser.ConfigParser()
    parser.read_dict(
        {
            "ollama": {
                "base_url": "http://localhost:11434",
                "model": "gemma2:9b",
                "temperature": "0.0",
                "probe_timeout_seconds": "1.5",
                "connect_timeout_seconds": "3",
            },
            "logging": {"level": "warning", "format": "Detailed"},
        }
    )

    cfg = TranslatorConfig()
    _load_from_ini(parser, cfg)

    assert cfg.ollama.base_url == "http://localhost:11434"
    assert cfg.ollama.model == "gemma2:9b"
    assert cfg.ollama.temperature == 0.0
    assert cfg.ollama.probe_timeout_seconds == 1.5
    assert cfg.ollama.connect_timeout_seconds == 3.0
    assert cfg.logging.level == "WARNING"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_ini_unknown_log_format_ignored():
    parser = configparser.ConfigParser()
    parser.read_dict({"logging": {"format": "json"}})

    cfg = TranslatorConfig()
    _load_from_ini(parser, cfg)

    assert cfg.logging.format == "simple"


@pytest.mark.unit
def test_ini_missing_sections_keep_defaults():
    cfg = TranslatorConfig()
    _load_from_ini(configparser.ConfigParser(), cfg)

    assert cfg == TranslatorConfig()


@pytest.mark.unit
def test_env_beats_ini(monkeypatch, clean_env):
    monkeypatch.setenv("XCT_OLLAMA_URL", "http://from-env:11434")
    parser = configparser.ConfigParser()
    parser.read_dict({"ollama": {"base_url": "http://from-ini:11434"}})

    cfg = TranslatorConfig()
    _load_from_ini(parser, cfg)
    _apply_env_overrides(cfg)

    assert cfg.ollama.base_url == "http://from-env:11434"


@pytest.mark.unit
def test_reload_config_replaces_singleton(monkeypatch, clean_env):
    original = config_module.config
    monkeypatch.setenv("XCT_MODEL", "qwen2:7b")
    try:
        reloaded = reload_config()
        assert config_module.config is reloaded
        assert config_module.config.ollama.model == "qwen2:7b"
    finally:
        config_module.config = original


@pytest.mark.unit
def test_get_config_status_keys():
    status = get_config_status()

    assert set(status) == {
        "config_file_exists",
        "config_file_path",
        "using_example",
        "base_url",
        "model",
    }
    assert status["config_file_path"].endswith("translator.ini")


@pytest.mark.unit
def test_configure_logging_sets_level_and_format():
    with patch("xcstrings_translator.config.logging.basicConfig") as mock_basic:
        configure_logging(LoggingSettings(level="DEBUG", format="detailed"))

    mock_basic.assert_called_once_with(
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        force=True,
    )


@pytest.mark.unit
def test_configure_logging_unknown_level_falls_back_to_info():
    with patch("xcstrings_translator.config.logging.basicConfig") as mock_basic:
        configure_logging(LoggingSettings(level="CHATTY"))

    assert mock_basic.call_args.kwargs["level"] == logging.INFO
    assert mock_basic.call_args.kwargs["format"] == "%(levelname)s: %(message)s"

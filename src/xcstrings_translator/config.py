"""
Translator configuration management.

This module loads client configuration from multiple sources with a clear
priority order:

    1. Environment variables (highest priority) - for per-shell overrides
    2. Config file (config/translator.ini) - for a machine's standing setup
    3. Built-in defaults (lowest priority) - a stock local Ollama install

Configuration is loaded once at module import time and cached. The
TranslatorConfig dataclass provides typed access to all settings.

Usage:
    from xcstrings_translator.config import config

    print(config.ollama.base_url)
    print(config.ollama.model)

Environment Variable Mapping:
    XCT_OLLAMA_URL        -> ollama.base_url
    XCT_MODEL             -> ollama.model
    XCT_TEMPERATURE       -> ollama.temperature
    XCT_PROBE_TIMEOUT     -> ollama.probe_timeout_seconds
    XCT_CONNECT_TIMEOUT   -> ollama.connect_timeout_seconds
    XCT_LOG_LEVEL         -> logging.level
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "translator.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "translator.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class OllamaSettings:
    """Inference server and generation settings."""

    base_url: str = "http://127.0.0.1:11434"
    model: str = "hf.co/DevQuasar/ModelSpace.GemmaX2-28-9B-v0.1-GGUF:Q8_0"
    temperature: float = 0.1
    # Bound for /api/tags lookups (connection check, model listing).
    probe_timeout_seconds: float = 5.0
    # Bound for establishing the /api/generate connection only. Reading the
    # stream has no timeout.
    connect_timeout_seconds: float = 5.0


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "simple"


@dataclass
class TranslatorConfig:
    """
    Complete translator configuration.

    Aggregates all settings sections. Access via the module-level `config`
    singleton.
    """

    ollama: OllamaSettings = field(default_factory=OllamaSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _load_from_ini(parser: configparser.ConfigParser, cfg: TranslatorConfig) -> None:
    """Load configuration from parsed INI file into TranslatorConfig."""
    # Ollama section
    if parser.has_section("ollama"):
        if parser.has_option("ollama", "base_url"):
            cfg.ollama.base_url = parser.get("ollama", "base_url").strip()
        if parser.has_option("ollama", "model"):
            cfg.ollama.model = parser.get("ollama", "model").strip()
        if parser.has_option("ollama", "temperature"):
            cfg.ollama.temperature = parser.getfloat("ollama", "temperature")
        if parser.has_option("ollama", "probe_timeout_seconds"):
            cfg.ollama.probe_timeout_seconds = parser.getfloat("ollama", "probe_timeout_seconds")
        if parser.has_option("ollama", "connect_timeout_seconds"):
            cfg.ollama.connect_timeout_seconds = parser.getfloat(
                "ollama", "connect_timeout_seconds"
            )

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: TranslatorConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_url := os.getenv("XCT_OLLAMA_URL"):
        cfg.ollama.base_url = env_url.strip()
    if env_model := os.getenv("XCT_MODEL"):
        cfg.ollama.model = env_model.strip()
    if env_temperature := os.getenv("XCT_TEMPERATURE"):
        cfg.ollama.temperature = float(env_temperature)
    if env_probe := os.getenv("XCT_PROBE_TIMEOUT"):
        cfg.ollama.probe_timeout_seconds = float(env_probe)
    if env_connect := os.getenv("XCT_CONNECT_TIMEOUT"):
        cfg.ollama.connect_timeout_seconds = float(env_connect)

    if env_log := os.getenv("XCT_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> TranslatorConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/translator.ini
        3. config/translator.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        TranslatorConfig: Fully populated configuration object.
    """
    cfg = TranslatorConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "TranslatorConfig":
    """
    Reload configuration from disk and environment.

    Updates the module-level `config` singleton.

    Returns:
        TranslatorConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_LOG_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Install a root handler using the configured level and format."""
    settings = settings or config.logging
    level = logging.getLevelName(settings.level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMATS[settings.format], force=True)


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information, printed by
    the CLI's ``check`` command.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "base_url": config.ollama.base_url,
        "model": config.ollama.model,
    }

"""
CLI Configuration

Configuration management for the sumtree CLI.
Supports environment variables and configuration files.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from sumtree.config.runtime import RuntimeConfig


# Environment variable prefix
ENV_PREFIX = "SUMTREE_"


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Output
    default_output_format: str = "human"  # "human" or "json"

    # Hasher and tree limits
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)


def load_config_from_env() -> CLIConfig:
    """Load configuration from environment variables."""
    config = CLIConfig()

    config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
    config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")
    config.default_output_format = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT", "human")
    config.runtime = RuntimeConfig.from_env()

    return config


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    config = CLIConfig()

    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)
    config.default_output_format = data.get("default_output_format", config.default_output_format)
    config.runtime = RuntimeConfig.from_dict(data.get("runtime", {}))

    return config


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        default_paths = [
            Path.cwd() / "sumtree.json",
            Path.cwd() / ".sumtree.json",
            Path.home() / ".config" / "sumtree" / "config.json",
        ]
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    # Env takes precedence
    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")
    if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        config.default_output_format = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT")
    config.runtime = config.runtime.with_env_overrides()

    return config


def config_to_dict(config: CLIConfig) -> dict:
    return {
        "log_level": config.log_level,
        "log_file": config.log_file,
        "default_output_format": config.default_output_format,
        "runtime": config.runtime.to_dict(),
    }


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "log_level": "INFO",
  "log_file": null,
  "default_output_format": "human",
  "runtime": {
    "hasher": {
      "field": "pasta",
      "rounds": 220,
      "seed": "mimcsponge",
      "key": 0
    },
    "tree": {
      "max_value": 2147483647,
      "max_height": 64
    }
  }
}
"""

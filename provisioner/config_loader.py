# provisioner/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the provisioner.

Handles loading settings from Pydantic model defaults, environment
variables, a YAML file and command-line arguments, applying this order of
precedence:
1. Pydantic Model Defaults
2. Environment Variables (loaded by BaseSettings)
3. YAML Configuration File
4. Command-Line Arguments

The API keys are the exception: they are only ever read from the
environment and are ignored if they appear in the YAML file.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from . import config as static_config
from .config_models import AppSettings

module_logger = logging.getLogger(__name__)

SECRET_FIELDS = ("zai_api_key", "openrouter_api_key")

# CLI option name -> (settings section or None for top level, field name)
CLI_FIELD_MAP = {
    "gateway_port": ("openclaw", "gateway_port"),
    "service_user": ("openclaw", "service_user"),
    "install_dir": ("openclaw", "install_dir"),
    "repo_url": ("openclaw", "repo_url"),
    "log_level": (None, "log_level"),
    "log_prefix": (None, "log_prefix"),
    "log_file": (None, "log_file"),
}


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively update ``source`` with ``overrides``. Nested dictionaries are
    merged key by key; ``None`` values in ``overrides`` never replace an
    existing value.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
        elif key not in source:
            source[key] = value
    return source


def resolve_config_path(config_file_path: Union[str, Path]) -> Path:
    """
    Relative paths are tried against the working directory first and then
    against the project root, since a run resumed from cron starts in
    root's home directory.
    """
    path = Path(config_file_path)
    if path.is_absolute() or path.exists():
        return path
    return static_config.PROJECT_ROOT / path


def load_yaml_config(
    config_file_path: Union[str, Path],
    current_logger: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Read a YAML mapping from ``config_file_path``. A missing, unreadable or
    malformed file yields an empty dict and a log message.
    """
    logger_to_use = current_logger if current_logger else module_logger
    yaml_config_path = Path(config_file_path)

    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.info(
            f"Configuration file '{yaml_config_path}' not found. Using defaults, environment variables, and CLI args."
        )
        return {}

    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except IOError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}

    for secret in SECRET_FIELDS:
        if yaml_data.pop(secret, None) is not None:
            logger_to_use.warning(
                f"Ignoring '{secret}' in {yaml_config_path}: API keys are only read from the environment."
            )
    logger_to_use.info(f"Loaded main configuration from {yaml_config_path}")
    return yaml_data


def _map_cli_args(cli_args: argparse.Namespace) -> Dict[str, Any]:
    mapped: Dict[str, Any] = {}
    for cli_key, cli_value in vars(cli_args).items():
        if cli_value is None or cli_key not in CLI_FIELD_MAP:
            continue
        section, field = CLI_FIELD_MAP[cli_key]
        if isinstance(cli_value, Path):
            cli_value = str(cli_value)
        if section is None:
            mapped[field] = cli_value
        else:
            mapped.setdefault(section, {})[field] = cli_value

    if getattr(cli_args, "verbose", False):
        mapped["log_level"] = "DEBUG"
    return mapped


def load_app_settings(
    cli_args: Optional[argparse.Namespace] = None,
    config_file_path: Union[str, Path] = "config.yaml",
    current_logger: Optional[logging.Logger] = None,
) -> AppSettings:
    """
    Build the effective :class:`AppSettings`.

    Args:
        cli_args: Parsed command-line arguments (from argparse).
        config_file_path: Path to the YAML configuration file.
        current_logger: Optional logger to use instead of the module logger.

    Returns:
        An instance of AppSettings with the fully resolved configuration.

    Raises:
        SystemExit: If the merged configuration fails validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    # Model defaults < environment variables.
    settings_after_env_and_defaults = AppSettings()
    current_values_dict = settings_after_env_and_defaults.model_dump(
        exclude_defaults=False
    )

    current_values_dict = _deep_update(
        current_values_dict,
        load_yaml_config(resolve_config_path(config_file_path), current_logger=logger_to_use),
    )

    if cli_args:
        current_values_dict = _deep_update(
            current_values_dict, _map_cli_args(cli_args)
        )

    # Secrets are excluded from dumps, carry them over explicitly.
    for secret in SECRET_FIELDS:
        current_values_dict[secret] = getattr(settings_after_env_and_defaults, secret)

    try:
        final_settings = AppSettings(**current_values_dict)
    except Exception as e:  # Catch Pydantic validation errors etc.
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise SystemExit(f"Configuration error: {e}") from e

    logger_to_use.info(
        "Successfully loaded and validated application settings"
    )
    return final_settings

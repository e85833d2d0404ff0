# configure/openclaw_configurator.py
# -*- coding: utf-8 -*-
"""
Handles generation of the OpenClaw ``.env`` file from the provider settings
and the API keys.
"""
import logging
from typing import Optional

from common.command_utils import log_provision
from common.file_utils import write_file_elevated
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def render_env_file(app_settings: AppSettings) -> str:
    """
    Render the ``.env`` content. The output depends only on the settings, so
    repeated runs with the same inputs produce byte-identical files.

    Raises:
        KeyError: If the template references an unknown placeholder.
    """
    providers = app_settings.providers
    oc = app_settings.openclaw
    return oc.env_file_template.format(
        gateway_port=oc.gateway_port,
        primary_provider=providers.primary_provider,
        primary_model=providers.primary_model,
        zai_api_key=app_settings.zai_api_key,
        fallback_provider=providers.fallback_provider,
        fallback_models=",".join(providers.fallback_models),
        openrouter_api_key=app_settings.openrouter_api_key,
        log_level=oc.log_level,
    )


def write_openclaw_env_file(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """Write ``<install_dir>/.env``, owned by the service user and readable only by it."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    env_path = app_settings.openclaw.env_file_path

    log_provision(
        f"{symbols.get('step', '➡️')} Creating {env_path}...",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        content = render_env_file(app_settings)
    except KeyError as e_key:
        log_provision(
            f"{symbols.get('error', '❌')} Missing placeholder key {e_key} for the .env template. Check config.yaml.",
            "error",
            logger_to_use,
            app_settings,
        )
        raise

    write_file_elevated(
        env_path,
        content,
        app_settings,
        mode="600",
        owner=app_settings.openclaw.service_user,
        current_logger=logger_to_use,
    )

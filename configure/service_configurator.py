# configure/service_configurator.py
# -*- coding: utf-8 -*-
"""
Handles the OpenClaw systemd unit: file generation, daemon reload and
service activation.
"""
import logging
import subprocess
from typing import Optional

from common.command_utils import log_provision
from common.file_utils import write_file_elevated
from common.system_utils import enable_and_restart_service, systemd_reload
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def render_systemd_unit(app_settings: AppSettings) -> str:
    oc = app_settings.openclaw
    return oc.systemd_unit_template.format(
        description=oc.service_description,
        service_user=oc.service_user,
        install_dir=oc.app_dir,
        exec_start=oc.exec_start,
        restart_sec=oc.restart_sec,
        env_file=oc.env_file_path,
    )


def create_openclaw_service_file(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """Creates the systemd service file for OpenClaw from the template in app_settings."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    service_path = app_settings.openclaw.service_file_path

    log_provision(
        f"{symbols.get('step', '➡️')} Creating systemd unit {service_path}...",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        content = render_systemd_unit(app_settings)
    except KeyError as e_key:
        log_provision(
            f"{symbols.get('error', '❌')} Missing placeholder key {e_key} for the systemd unit template. Check config.yaml.",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    write_file_elevated(service_path, content, app_settings, mode="644", current_logger=logger_to_use)


def activate_openclaw_service(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """Reloads systemd, enables the unit at boot and restarts it."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    service_name = app_settings.openclaw.service_name

    systemd_reload(app_settings, current_logger=logger_to_use)
    try:
        enable_and_restart_service(service_name, app_settings, current_logger=logger_to_use)
    except subprocess.CalledProcessError as e:
        log_provision(
            f"{symbols.get('error', '❌')} Failed to enable or restart {service_name}.service: {e.stderr or e}. "
            f"Check 'journalctl -u {service_name}'.",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    log_provision(
        f"{symbols.get('success', '✅')} {service_name}.service enabled and (re)started.",
        "success",
        logger_to_use,
        app_settings,
    )


def configure_openclaw_service(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    logger_to_use = current_logger if current_logger else module_logger
    create_openclaw_service_file(app_settings, current_logger=logger_to_use)
    activate_openclaw_service(app_settings, current_logger=logger_to_use)

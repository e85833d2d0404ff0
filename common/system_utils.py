# common/system_utils.py
# -*- coding: utf-8 -*-
"""
System-level utility functions for the provisioner.

This module wraps systemd and account queries and the OS reboot signal
used by the reboot-and-resume cycle.
"""

import logging
import subprocess
from typing import Optional

from common.command_utils import (
    log_provision,
    run_command,
    run_elevated_command,
)
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def systemd_reload(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Reload the systemd daemon so that new or changed unit files are seen.

    Raises:
        subprocess.CalledProcessError: If ``systemctl daemon-reload`` fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    log_provision(
        f"{symbols.get('gear', '⚙️')} Reloading systemd daemon...",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        run_elevated_command(
            ["systemctl", "daemon-reload"],
            app_settings,
            current_logger=logger_to_use,
        )
    except Exception as e:
        log_provision(
            f"{symbols.get('error', '❌')} Failed to reload systemd: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    log_provision(
        f"{symbols.get('success', '✅')} Systemd daemon reloaded.",
        "success",
        logger_to_use,
        app_settings,
    )


def enable_and_restart_service(
    service_name: str,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Enable a unit at boot and (re)start it now."""
    logger_to_use = current_logger if current_logger else module_logger
    unit = f"{service_name}.service"
    run_elevated_command(
        ["systemctl", "enable", unit],
        app_settings,
        current_logger=logger_to_use,
    )
    run_elevated_command(
        ["systemctl", "restart", unit],
        app_settings,
        current_logger=logger_to_use,
    )


def user_exists(
    username: str,
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """Return True if ``id <username>`` succeeds."""
    logger_to_use = current_logger if current_logger else module_logger
    try:
        run_command(
            ["id", username],
            app_settings,
            check=True,
            capture_output=True,
            current_logger=logger_to_use,
        )
        return True
    except subprocess.CalledProcessError:
        return False


def is_reboot_required(
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Return True when the OS has flagged a pending reboot.

    Debian and Ubuntu create the sentinel file (``/var/run/reboot-required``
    by default) when an upgraded package, typically the kernel, only takes
    effect after a restart.
    """
    logger_to_use = current_logger if current_logger else module_logger
    sentinel = app_settings.reboot.reboot_required_file
    required = sentinel.exists()
    log_provision(
        f"Reboot-required sentinel {sentinel}: {'present' if required else 'absent'}.",
        "debug",
        logger_to_use,
        app_settings,
    )
    return required


def reboot_system(
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Issue an immediate system reboot."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    log_provision(
        f"{symbols.get('rocket', '🚀')} Rebooting now.",
        "warning",
        logger_to_use,
        app_settings,
    )
    run_elevated_command(["reboot"], app_settings, current_logger=logger_to_use)

# installer/openclaw_installer.py
# -*- coding: utf-8 -*-
"""
Handles checkout of the OpenClaw sources and installation of their Node.js
dependencies, both performed as the service user.
"""
import logging
from typing import Optional

from common.command_utils import log_provision, run_command_as_user
from common.file_utils import path_exists_elevated
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def clone_openclaw_repository(
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Clone the repository into the install directory unless that directory
    already exists. An existing checkout is left untouched.

    Returns:
        True if a clone was performed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    oc = app_settings.openclaw
    app_dir = oc.app_dir

    if path_exists_elevated(app_dir, app_settings, test_flag="-d", current_logger=logger_to_use):
        log_provision(f"{symbols.get('info', 'ℹ️')} {app_dir} already exists. Skipping clone.", "info",
                      logger_to_use, app_settings)
        return False

    log_provision(f"{symbols.get('step', '➡️')} Cloning {oc.repo_url} into {app_dir}...", "info",
                  logger_to_use, app_settings)
    run_command_as_user(oc.service_user, ["git", "clone", oc.repo_url, str(app_dir)], app_settings,
                        current_logger=logger_to_use)
    return True


def install_node_dependencies(
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None
) -> None:
    """Run ``npm install`` inside the checkout."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    oc = app_settings.openclaw
    log_provision(f"{symbols.get('package', '📦')} Installing npm dependencies in {oc.app_dir}...", "info",
                  logger_to_use, app_settings)
    run_command_as_user(oc.service_user, ["npm", "install", "--prefix", str(oc.app_dir)], app_settings,
                        current_logger=logger_to_use)


def install_openclaw_application(
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None
) -> None:
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    try:
        clone_openclaw_repository(app_settings, current_logger=logger_to_use)
        install_node_dependencies(app_settings, current_logger=logger_to_use)
    except Exception as e:
        log_provision(f"{symbols.get('error', '❌')} Failed to install OpenClaw: {e}", "error", logger_to_use,
                      app_settings, exc_info=True)
        raise
    log_provision(f"{symbols.get('success', '✅')} OpenClaw installed in {app_settings.openclaw.app_dir}.",
                  "success", logger_to_use, app_settings)

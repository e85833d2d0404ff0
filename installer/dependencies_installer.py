# installer/dependencies_installer.py
# -*- coding: utf-8 -*-
"""
Installs the apt packages OpenClaw and the provisioner itself depend on.
"""

import logging
from typing import Optional

from common.command_utils import log_provision, run_command
from common.debian.apt_manager import AptManager
from provisioner import config as static_config
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def install_dependencies(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Install ``DEPENDENCY_PACKAGES`` (git, build tools, ufw, Node.js, npm,
    dbus-user-session, ...) and report the Node.js and npm versions.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    log_provision(
        f"{symbols.get('package', '📦')} Installing dependencies: {', '.join(static_config.DEPENDENCY_PACKAGES)}",
        "info",
        logger_to_use,
        app_settings,
    )
    apt = AptManager(logger=logger_to_use)
    apt.install(static_config.DEPENDENCY_PACKAGES, app_settings, update_first=True)

    node_ver_res = run_command(["node", "--version"], app_settings, capture_output=True, check=False,
                               current_logger=logger_to_use)
    npm_ver_res = run_command(["npm", "--version"], app_settings, capture_output=True, check=False,
                              current_logger=logger_to_use)
    node_ver = node_ver_res.stdout.strip() if node_ver_res.returncode == 0 else "N/A"
    npm_ver = npm_ver_res.stdout.strip() if npm_ver_res.returncode == 0 else "N/A"

    log_provision(
        f"{symbols.get('success', '✅')} Dependencies installed. Node.js: {node_ver}, npm: {npm_ver}",
        "success",
        logger_to_use,
        app_settings,
    )

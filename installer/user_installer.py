# installer/user_installer.py
# -*- coding: utf-8 -*-
"""
Creates and prepares the system account that owns and runs OpenClaw.
"""

import logging
from typing import Optional

from common.command_utils import log_provision, run_elevated_command
from common.file_utils import path_exists_elevated, write_file_elevated
from common.system_utils import user_exists
from provisioner import config as static_config
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def create_service_user(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Create the service account with a home directory and bash shell, add it
    to the ``sudo`` group and grant it passwordless sudo.

    Nothing is changed when the account already exists.

    Returns:
        True if the account was created by this call, False if it existed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    user = app_settings.openclaw.service_user

    if user_exists(user, app_settings, current_logger=logger_to_use):
        log_provision(
            f"{symbols.get('info', 'ℹ️')} User '{user}' already exists.",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    log_provision(
        f"{symbols.get('step', '➡️')} Creating user '{user}'...",
        "info",
        logger_to_use,
        app_settings,
    )
    run_elevated_command(
        ["useradd", "-m", "-s", "/bin/bash", user],
        app_settings,
        current_logger=logger_to_use,
    )
    run_elevated_command(
        ["usermod", "-aG", "sudo", user],
        app_settings,
        current_logger=logger_to_use,
    )
    write_file_elevated(
        static_config.SUDOERS_DIR / user,
        f"{user} ALL=(ALL) NOPASSWD:ALL\n",
        app_settings,
        mode="440",
        current_logger=logger_to_use,
    )
    log_provision(
        f"{symbols.get('success', '✅')} Created user '{user}' with passwordless sudo.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True


def enable_user_linger(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """Keep the account's systemd user manager running without a login session."""
    logger_to_use = current_logger if current_logger else module_logger
    user = app_settings.openclaw.service_user
    run_elevated_command(
        ["loginctl", "enable-linger", user],
        app_settings,
        current_logger=logger_to_use,
    )
    log_provision(
        f"{app_settings.symbols.get('success', '✅')} Linger enabled for {user}.",
        "success",
        logger_to_use,
        app_settings,
    )


def copy_root_ssh_keys(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Copy root's ``authorized_keys`` to the service account so the same SSH
    keys can log in as it. Skipped when the source directory is absent; a
    missing ``authorized_keys`` inside it is tolerated.

    Returns:
        True if the source directory existed and the copy was attempted.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    user = app_settings.openclaw.service_user
    source_dir = app_settings.openclaw.ssh_source_dir
    target_dir = static_config.HOME_ROOT / user / ".ssh"
    target_keys = target_dir / "authorized_keys"

    if not path_exists_elevated(source_dir, app_settings, test_flag="-d", current_logger=logger_to_use):
        log_provision(
            f"{symbols.get('info', 'ℹ️')} {source_dir} not found. Skipping SSH key copy.",
            "info",
            logger_to_use,
            app_settings,
        )
        return False

    run_elevated_command(["mkdir", "-p", str(target_dir)], app_settings, current_logger=logger_to_use)
    run_elevated_command(
        ["cp", str(source_dir / "authorized_keys"), f"{target_dir}/"],
        app_settings,
        check=False,
        capture_output=True,
        current_logger=logger_to_use,
    )
    run_elevated_command(["chown", "-R", f"{user}:{user}", str(target_dir)], app_settings,
                         current_logger=logger_to_use)
    run_elevated_command(["chmod", "700", str(target_dir)], app_settings, current_logger=logger_to_use)
    run_elevated_command(
        ["chmod", "600", str(target_keys)],
        app_settings,
        check=False,
        capture_output=True,
        current_logger=logger_to_use,
    )
    log_provision(
        f"{symbols.get('success', '✅')} SSH keys copied to {target_dir}.",
        "success",
        logger_to_use,
        app_settings,
    )
    return True


def setup_service_user(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """Account creation (once), linger and SSH keys for the service user."""
    logger_to_use = current_logger if current_logger else module_logger
    create_service_user(app_settings, current_logger=logger_to_use)
    enable_user_linger(app_settings, current_logger=logger_to_use)
    copy_root_ssh_keys(app_settings, current_logger=logger_to_use)

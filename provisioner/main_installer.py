# provisioner/main_installer.py
# -*- coding: utf-8 -*-
"""
Main entry point and orchestrator for the OpenClaw provisioner.

Handles argument parsing, configuration and logging setup, the pre-flight
checks, the reboot-and-resume decision and the sequence of provisioning
phases.
"""

import argparse
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

from common.command_utils import command_exists, log_provision
from common.crontab_manager import CrontabManager
from common.logging_config import setup_logging
from common.system_utils import is_reboot_required
from configure.openclaw_configurator import write_openclaw_env_file
from configure.service_configurator import configure_openclaw_service
from configure.ufw_configurator import apply_ufw_rules
from installer.dependencies_installer import install_dependencies
from installer.openclaw_installer import install_openclaw_application
from installer.system_update import update_system_packages
from installer.user_installer import setup_service_user
from provisioner.cli_handler import (
    show_banner,
    show_completion_summary,
    view_configuration,
)
from provisioner.config_loader import load_app_settings
from provisioner.config_models import AppSettings
from provisioner.reboot_resume import (
    ResumeState,
    clear_stale_entries,
    consume_checkpoint,
    detect_state,
    get_script_path,
    schedule_resume_and_reboot,
    scheduled_entries,
)
from provisioner.step_executor import execute_step

logger = logging.getLogger(__name__)

StepFunction = Callable[[AppSettings, Optional[logging.Logger]], Any]

UPDATE_STEP: Tuple[str, str, StepFunction] = (
    "SYSTEM_UPDATE", "Update system packages", update_system_packages,
)

# Phases run on every invocation, after the update phase (or after resume).
PROVISIONING_STEPS: List[Tuple[str, str, StepFunction]] = [
    ("DEPENDENCIES_INSTALL", "Install dependencies", install_dependencies),
    ("SERVICE_USER_SETUP", "Set up the service user", setup_service_user),
    ("UFW_SETUP", "Configure the firewall (UFW)", apply_ufw_rules),
    ("OPENCLAW_INSTALL", "Clone OpenClaw and install npm dependencies", install_openclaw_application),
    ("OPENCLAW_ENV_FILE", "Write the OpenClaw .env file", write_openclaw_env_file),
    ("OPENCLAW_SERVICE", "Register and start the systemd service", configure_openclaw_service),
]


def parse_args(args: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="OpenClaw VPS provisioner. Installs and configures OpenClaw as a systemd service.",
        epilog='Example: ZAI_API_KEY=... OPENROUTER_API_KEY=... python3 install.py --gateway-port 18789',
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to the YAML configuration file (default: config.yaml).")
    parser.add_argument("--view-config", action="store_true",
                        help="View current configuration settings and exit.")

    config_group = parser.add_argument_group("Configuration Overrides")
    config_group.add_argument("--gateway-port", type=int, default=None, help="TCP port of the OpenClaw gateway.")
    config_group.add_argument("--service-user", default=None, help="System account that runs OpenClaw.")
    config_group.add_argument("--install-dir", default=None,
                              help="Checkout directory (default: /home/<service-user>/openclaw).")
    config_group.add_argument("--repo-url", default=None, help="Git URL of the OpenClaw repository.")

    log_group = parser.add_argument_group("Logging")
    log_group.add_argument("--log-level", default=None, help="Provisioner log level (DEBUG, INFO, WARNING, ...).")
    log_group.add_argument("--log-prefix", default=None, help="Prefix for log messages from this script.")
    log_group.add_argument("--log-file", default=None, help="Also write JSON-lines logs to this file.")
    log_group.add_argument("-v", "--verbose", action="store_true", help="Shortcut for --log-level DEBUG.")
    return parser.parse_args(args)


def run_steps(
    steps: List[Tuple[str, str, StepFunction]],
    app_settings: AppSettings,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    logger_to_use = current_logger if current_logger else logger
    for tag, description, func_ref in steps:
        if not execute_step(tag, description, func_ref, app_settings, logger_to_use):
            raise RuntimeError(f"Provisioning step '{description}' ({tag}) failed.")


def run_provisioning(
    app_settings: AppSettings,
    script_path: Path,
    script_args: Sequence[str] = (),
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Run the whole provisioning flow.

    Returns:
        True when every phase completed, False when a reboot was scheduled
        and issued, in which case the run continues from cron after boot.

    Raises:
        RuntimeError: If a phase fails, or a reboot is needed without crontab.
        subprocess.CalledProcessError, OSError: If the resume entry cannot be
            installed.
    """
    logger_to_use = current_logger if current_logger else logger
    crontab = CrontabManager(app_settings, logger=logger_to_use)

    if detect_state(app_settings) is ResumeState.PENDING_REBOOT:
        consume_checkpoint(app_settings, script_path, crontab, current_logger=logger_to_use)
    else:
        has_crontab = command_exists("crontab")
        if has_crontab:
            clear_stale_entries(app_settings, script_path, crontab, current_logger=logger_to_use)
        run_steps([UPDATE_STEP], app_settings, logger_to_use)
        if is_reboot_required(app_settings, current_logger=logger_to_use):
            if not has_crontab:
                raise RuntimeError(
                    "A reboot is required but 'crontab' is not available to resume afterwards. "
                    "Reboot manually and run the script again."
                )
            schedule_resume_and_reboot(
                app_settings, script_path, crontab, script_args, current_logger=logger_to_use
            )
            return False

    run_steps(PROVISIONING_STEPS, app_settings, logger_to_use)
    return True


def report_missing_secrets(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> List[str]:
    """Log one error with the remediation per missing API key and return their names."""
    logger_to_use = current_logger if current_logger else logger
    missing = app_settings.missing_secrets()
    for name in missing:
        log_provision(
            f"{app_settings.symbols.get('error', '❌')} {name} is not set. "
            f'Run: export {name}="your-key"',
            "error",
            logger_to_use,
            app_settings,
        )
    return missing


def main(args: Optional[List[str]] = None) -> int:
    script_args = list(sys.argv[1:] if args is None else args)
    parsed_args = parse_args(script_args)

    app_settings = load_app_settings(parsed_args, parsed_args.config)
    setup_logging(
        log_prefix=app_settings.log_prefix,
        log_level=app_settings.log_level,
        log_file_path=app_settings.log_file,
    )
    symbols = app_settings.symbols
    show_banner(app_settings, logger)
    script_path = get_script_path()

    if parsed_args.view_config:
        entries = None
        # Reading root's crontab as another user would prompt for a sudo password.
        if os.geteuid() == 0 and command_exists("crontab"):
            entries = scheduled_entries(script_path, CrontabManager(app_settings, logger=logger))
        view_configuration(app_settings, logger, pending_resume_entries=entries, script_path=script_path)
        return 0

    if report_missing_secrets(app_settings, logger):
        return 1

    if not command_exists("apt-get"):
        log_provision(
            f"{symbols.get('error', '❌')} apt-get not found. This script only supports Ubuntu/Debian.",
            "error",
            logger,
            app_settings,
        )
        return 1

    if os.geteuid() != 0:
        log_provision(
            f"{symbols.get('info', 'ℹ️')} Script not run as root. 'sudo' will be used for system changes.",
            "info",
            logger,
            app_settings,
        )
    else:
        log_provision(f"{symbols.get('info', 'ℹ️')} Script is running as root.", "info", logger, app_settings)

    try:
        completed = run_provisioning(app_settings, script_path, script_args, logger)
    except (RuntimeError, subprocess.CalledProcessError, OSError) as e:
        log_provision(
            f"{symbols.get('critical', '🔥')} Provisioning aborted: {e}",
            "critical",
            logger,
            app_settings,
        )
        log_provision(
            f"{symbols.get('info', 'ℹ️')} Fix the problem and run the script again. Completed phases are safe to repeat.",
            "info",
            logger,
            app_settings,
        )
        return 1

    if not completed:
        return 0

    show_completion_summary(app_settings, logger)
    return 0


if __name__ == "__main__":
    sys.exit(main())

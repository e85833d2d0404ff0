# configure/ufw_configurator.py
# -*- coding: utf-8 -*-
"""
Handles configuration of UFW (Uncomplicated Firewall) rules and activation.
"""
import logging
import subprocess  # For CalledProcessError
from typing import List, Optional, Tuple

from common.command_utils import log_provision, run_elevated_command
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def build_ufw_rules(app_settings: AppSettings) -> List[Tuple[List[str], str]]:
    """
    Ordered UFW commands with a description each. The rule table is reset
    first so the result does not depend on what was configured before.
    """
    port = app_settings.openclaw.gateway_port
    return [
        (["ufw", "--force", "reset"], "Resetting existing UFW rules"),
        (["ufw", "default", "deny", "incoming"], "Default policy: deny incoming"),
        (["ufw", "default", "allow", "outgoing"], "Default policy: allow outgoing"),
        (["ufw", "allow", "ssh"], "Allowing SSH"),
        (["ufw", "allow", f"{port}/tcp"], f"Allowing OpenClaw gateway on port {port}/tcp"),
        (["ufw", "--force", "enable"], "Enabling UFW"),
    ]


def apply_ufw_rules(
        app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Applies the firewall policy: deny all inbound except SSH and the gateway
    port, allow all outbound, then enable UFW without prompting.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols

    log_provision(
        f"{symbols.get('step', '➡️')} Applying UFW rules...",
        "info",
        logger_to_use,
        app_settings,
    )

    try:
        for cmd_list, desc in build_ufw_rules(app_settings):
            log_provision(
                f"{symbols.get('info', 'ℹ️')} {desc}...",
                "info",
                logger_to_use,
                app_settings,
            )
            run_elevated_command(
                cmd_list,
                app_settings,
                capture_output=True,
                current_logger=logger_to_use,
            )

        log_provision(
            f"{symbols.get('success', '✅')} UFW rules applied and firewall enabled.",
            "success",
            logger_to_use,
            app_settings,
        )

    except subprocess.CalledProcessError as e:
        log_provision(
            f"{symbols.get('error', '❌')} A UFW command failed during rule application. Command: '{e.cmd}', Error: {e.stderr or e.stdout}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise
    except Exception as e:
        log_provision(
            f"{symbols.get('error', '❌')} An unexpected error occurred during UFW rule application: {e}",
            "error",
            logger_to_use,
            app_settings,
        )
        raise

# provisioner/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles Command Line Interface (CLI) output for the provisioner: the start
banner, the configuration view and the completion summary.
"""

import datetime
import logging
from pathlib import Path
from typing import List, Optional

from common.command_utils import log_provision
from provisioner import config as static_config
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def _secret_display(value: str) -> str:
    return "[SET]" if value else "[NOT SET]"


def show_banner(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> None:
    logger_to_use = current_logger if current_logger else module_logger
    log_provision(
        f"{app_settings.symbols.get('sparkles', '✨')} Starting OpenClaw provisioning "
        f"(Script Version: {static_config.SCRIPT_VERSION})...",
        "info",
        logger_to_use,
        app_settings,
    )


def view_configuration(
    app_config: AppSettings,
    current_logger: Optional[logging.Logger] = None,
    pending_resume_entries: Optional[List[str]] = None,
    script_path: Optional[Path] = None,
) -> str:
    """
    Displays the current effective configuration values. API keys are
    only reported as set or not set.

    Parameters:
        app_config (AppSettings): Application's configuration object.
        current_logger (Optional[logging.Logger]): A logger instance to use for
            logging output. If not provided, the module's default logger is used.
        pending_resume_entries (Optional[List[str]]): Crontab lines currently
            scheduled to resume this script. Only their count is shown.
        script_path (Optional[Path]): The script those entries refer to.

    Returns:
        The text that was logged.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_config.symbols
    oc = app_config.openclaw
    providers = app_config.providers
    reboot = app_config.reboot

    config_text = f"{symbols.get('info', 'ℹ️')} Current effective configuration values (CLI > YAML > ENV > Defaults):\n\n"
    config_text += f"  Log Prefix:                    {app_config.log_prefix}\n"
    config_text += f"  Log Level:                     {app_config.log_level}\n"
    config_text += f"  Log File:                      {app_config.log_file or 'N/A'}\n\n"

    config_text += "  Providers (providers.*):\n"
    config_text += f"    Primary:                     {providers.primary_provider} ({providers.primary_model})\n"
    config_text += f"    Fallback:                    {providers.fallback_provider}\n"
    config_text += f"    Fallback Models:             {','.join(providers.fallback_models)}\n"
    config_text += f"    ZAI_API_KEY:                 {_secret_display(app_config.zai_api_key)}\n"
    config_text += f"    OPENROUTER_API_KEY:          {_secret_display(app_config.openrouter_api_key)}\n\n"

    config_text += "  OpenClaw (openclaw.*):\n"
    config_text += f"    Service User:                {oc.service_user}\n"
    config_text += f"    Install Directory:           {oc.app_dir}\n"
    config_text += f"    Repository:                  {oc.repo_url}\n"
    config_text += f"    Gateway Port:                {oc.gateway_port}\n"
    config_text += f"    App LOG_LEVEL:               {oc.log_level}\n"
    config_text += f"    Service Unit:                {oc.service_file_path}\n\n"

    config_text += "  Reboot and resume (reboot.*):\n"
    config_text += f"    Marker File:                 {reboot.marker_file} "
    config_text += f"({'present' if reboot.marker_file.exists() else 'absent'})\n"
    config_text += f"    Reboot-Required Sentinel:    {reboot.reboot_required_file}\n"
    config_text += f"    Resume Log File:             {reboot.resume_log_file}\n"
    if pending_resume_entries is not None:
        target = f" for {script_path}" if script_path else ""
        config_text += f"    Scheduled Resume Entries:    {len(pending_resume_entries)}{target}\n"
    config_text += "\n"

    config_text += f"  Script Version (static):       {static_config.SCRIPT_VERSION}\n"
    config_text += f"  Timestamp (current view):      {datetime.datetime.now().strftime('%Y-%m-%d-%H%M%S')}\n\n"
    config_text += "Configuration is loaded with precedence: CLI > YAML File > Environment Variables > Model Defaults."

    log_provision(
        "Displaying current configuration:", "info", logger_to_use, app_config
    )
    log_provision(f"\n{config_text}\n", "info", logger_to_use, app_config)
    return config_text


def show_completion_summary(
    app_settings: AppSettings, current_logger: Optional[logging.Logger] = None
) -> str:
    """Log the final summary of a finished run and return it."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    providers = app_settings.providers
    oc = app_settings.openclaw

    separator = "=" * 49
    summary = (
        f"{separator}\n"
        f" {symbols.get('success', '✅')} OpenClaw installation completed successfully!\n"
        f" Primary model:  {providers.primary_provider} ({providers.primary_model})\n"
        f" Fallback:       {providers.fallback_provider}\n"
        f" Gateway port:   {oc.gateway_port}\n"
        f"\n"
        f" To follow the service logs run:\n"
        f"   journalctl -u {oc.service_name} -f\n"
        f"{separator}"
    )
    log_provision(f"\n{summary}\n", "success", logger_to_use, app_settings)
    return summary

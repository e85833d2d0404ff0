# provisioner/step_executor.py
# -*- coding: utf-8 -*-
"""
Provides functionality to execute individual provisioning phases.

Each phase is a callable taking ``(app_settings, logger)``. The executor
announces it, runs it and turns any exception into a logged failure, so
that the orchestrator only has to look at a boolean.
"""

import logging
from typing import Any, Callable, Optional

from common.command_utils import log_provision
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)


def execute_step(
    step_tag: str,
    step_description: str,
    step_function: Callable[[AppSettings, Optional[logging.Logger]], Any],
    app_settings: AppSettings,
    current_logger_instance: Optional[logging.Logger] = None,
) -> bool:
    """
    Execute a single provisioning phase.

    Args:
        step_tag: A unique string identifier for the phase.
        step_description: A human-readable description of the phase.
        step_function: The function to call to execute the phase.
                       Expected signature: (app_settings: AppSettings, current_logger: Optional[logging.Logger]) -> Any
                       Should return False to indicate failure. Any other return value (including None) is
                       considered success. An exception is always treated as a failure.
        app_settings: The application settings object.
        current_logger_instance: The logger instance to use.

    Returns:
        True if the phase completed, False if it failed.
    """
    logger_to_use = (
        current_logger_instance if current_logger_instance else module_logger
    )
    symbols = app_settings.symbols

    log_provision(
        f"--- {symbols.get('step', '➡️')} Executing: {step_description} ({step_tag}) ---",
        "info",
        logger_to_use,
        app_settings,
    )
    try:
        step_result = step_function(app_settings, logger_to_use)
    except Exception as e:
        log_provision(
            f"{symbols.get('error', '❌')} FAILED: {step_description} ({step_tag})",
            "error",
            logger_to_use,
            app_settings,
        )
        log_provision(
            f"   Error details: {str(e)}",
            "error",
            logger_to_use,
            app_settings,
            exc_info=True,
        )
        return False

    if step_result is False:
        log_provision(
            f"{symbols.get('error', '❌')} Step function returned False: {step_description} ({step_tag})",
            "error",
            logger_to_use,
            app_settings,
        )
        return False

    log_provision(
        f"--- {symbols.get('success', '✅')} Successfully completed: {step_description} ({step_tag}) ---",
        "success",
        logger_to_use,
        app_settings,
    )
    return True

# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system helpers that operate with elevated privileges.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from provisioner.config_models import AppSettings

from .command_utils import log_provision, run_elevated_command

module_logger = logging.getLogger(__name__)


def write_file_elevated(
    file_path: Union[str, Path],
    content: str,
    app_settings: AppSettings,
    mode: str = "644",
    owner: Optional[str] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Overwrite ``file_path`` with ``content`` as root, then set its mode and,
    when given, its owner (``owner:owner``).

    Content is streamed to ``tee`` on stdin so that secrets never appear on
    a command line. The file is always fully regenerated, never merged.

    Raises:
        subprocess.CalledProcessError: If writing or chmod/chown fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    path_str = str(file_path)

    run_elevated_command(
        ["tee", path_str],
        app_settings,
        cmd_input=content,
        capture_output=True,
        log_output=False,
        current_logger=logger_to_use,
    )
    if owner:
        run_elevated_command(
            ["chown", f"{owner}:{owner}", path_str],
            app_settings,
            current_logger=logger_to_use,
        )
    run_elevated_command(
        ["chmod", mode, path_str],
        app_settings,
        current_logger=logger_to_use,
    )
    log_provision(
        f"{symbols.get('success', '✅')} Wrote {path_str} (mode {mode}{f', owner {owner}' if owner else ''}).",
        "success",
        logger_to_use,
        app_settings,
    )


def path_exists_elevated(
    path: Union[str, Path],
    app_settings: AppSettings,
    test_flag: str = "-e",
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Check a path with ``test <flag>`` as root, for locations such as another
    user's home directory that the current process may not be able to read.
    """
    logger_to_use = current_logger if current_logger else module_logger
    result = run_elevated_command(
        ["test", test_flag, str(path)],
        app_settings,
        check=False,
        capture_output=True,
        current_logger=logger_to_use,
    )
    return result.returncode == 0

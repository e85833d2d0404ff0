# provisioner/reboot_resume.py
# -*- coding: utf-8 -*-
"""
Reboot-and-resume checkpoint for a provisioning run.

When the package upgrade leaves the OS asking for a reboot, the run cannot
simply continue: the new kernel is not active yet. Instead it leaves a
checkpoint made of two parts and reboots:

* a marker file, whose existence means "this provisioner triggered the
  pending reboot";
* an ``@reboot`` entry in root's crontab that re-invokes the same script,
  with the same arguments and API keys, once the machine is back.

The next invocation finds the marker, consumes the checkpoint (deletes the
marker, removes every crontab entry referencing the script) and carries on
without repeating the upgrade. Because the upgrade, and so the reboot check,
is skipped on resume, at most one reboot cycle happens per attempt.
"""

import enum
import logging
import shlex
import subprocess
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from common.command_utils import log_provision
from common.crontab_manager import CrontabManager
from common.system_utils import reboot_system
from provisioner import config as static_config
from provisioner.config_models import AppSettings

module_logger = logging.getLogger(__name__)

SECRET_ENV_VARS = ("ZAI_API_KEY", "OPENROUTER_API_KEY")


class ResumeState(enum.Enum):
    FRESH = "fresh"
    PENDING_REBOOT = "pending_reboot"


def get_script_path() -> Path:
    """
    Absolute, symlink-resolved path of the running entry script.

    A run started with ``python -m provisioner.main_installer`` reports the
    module file, which cannot be executed directly from a checkout; the
    project's ``install.py`` is returned instead.
    """
    script = Path(sys.argv[0]).resolve()
    if script.is_relative_to(static_config.PROJECT_ROOT / "provisioner"):
        return static_config.PROJECT_ROOT / "install.py"
    return script


def detect_state(app_settings: AppSettings) -> ResumeState:
    """PENDING_REBOOT if the marker file exists, FRESH otherwise."""
    if app_settings.reboot.marker_file.exists():
        return ResumeState.PENDING_REBOOT
    return ResumeState.FRESH


def _cron_escape(value: str) -> str:
    # cron turns an unescaped % into a newline; the backslash is stripped by
    # cron before the shell sees the line.
    return value.replace("%", "\\%")


def build_resume_command(
    app_settings: AppSettings,
    script_path: Path,
    script_args: Sequence[str] = (),
    python_executable: Optional[str] = None,
) -> str:
    """
    Shell command re-entering the provisioner after boot: a full ``PATH`` and
    the API keys as environment assignments, the interpreter, the script and
    its original arguments, with output appended to the resume log.
    """
    assignments = [
        f"PATH={shlex.quote(static_config.RESUME_PATH)}",
        f"ZAI_API_KEY={shlex.quote(app_settings.zai_api_key)}",
        f"OPENROUTER_API_KEY={shlex.quote(app_settings.openrouter_api_key)}",
    ]
    argv = [python_executable or sys.executable, str(script_path)] + list(script_args)
    command = " ".join(assignments + [shlex.quote(part) for part in argv])
    log_file = shlex.quote(str(app_settings.reboot.resume_log_file))
    return _cron_escape(f"{command} >> {log_file} 2>&1")


def build_cron_line(
    app_settings: AppSettings,
    script_path: Path,
    script_args: Sequence[str] = (),
    python_executable: Optional[str] = None,
) -> str:
    """The ``@reboot`` crontab line for :func:`build_resume_command`."""
    return "@reboot " + build_resume_command(
        app_settings, script_path, script_args, python_executable
    )


def consume_checkpoint(
    app_settings: AppSettings,
    script_path: Path,
    crontab: CrontabManager,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Resume after a reboot: delete the marker file and remove every crontab
    entry referencing ``script_path``, so the entry fires only once.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    marker = app_settings.reboot.marker_file

    log_provision(
        f"{symbols.get('info', 'ℹ️')} Resuming provisioning after reboot...",
        "info",
        logger_to_use,
        app_settings,
    )
    marker.unlink(missing_ok=True)
    try:
        crontab.remove_entries(str(script_path))
    except (subprocess.CalledProcessError, OSError) as e:
        # The marker is gone, so a leftover entry is swept by the next fresh run.
        log_provision(
            f"{symbols.get('warning', '⚠️')} Could not remove the @reboot entry for {script_path}: {e}. "
            "Continuing.",
            "warning",
            logger_to_use,
            app_settings,
        )
    log_provision(
        f"{symbols.get('success', '✅')} Reboot checkpoint consumed; system update is skipped on resume.",
        "success",
        logger_to_use,
        app_settings,
    )


def clear_stale_entries(
    app_settings: AppSettings,
    script_path: Path,
    crontab: CrontabManager,
    current_logger: Optional[logging.Logger] = None,
) -> int:
    """
    Remove resume entries left behind without a marker, e.g. when the marker
    lived on a /tmp that was wiped at boot. Returns the number removed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    if not crontab.find_entries(str(script_path)):
        return 0
    log_provision(
        f"{symbols.get('warning', '⚠️')} Found a stale @reboot entry for {script_path} without a reboot marker. Removing it.",
        "warning",
        logger_to_use,
        app_settings,
    )
    return crontab.remove_entries(str(script_path))


def schedule_resume(
    app_settings: AppSettings,
    script_path: Path,
    crontab: CrontabManager,
    script_args: Sequence[str] = (),
    current_logger: Optional[logging.Logger] = None,
) -> str:
    """
    Persist the checkpoint: create the marker file and install the single
    ``@reboot`` entry for ``script_path``. Returns the installed cron line.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    marker = app_settings.reboot.marker_file

    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.touch()
    log_provision(
        f"{symbols.get('info', 'ℹ️')} Reboot marker created at {marker}.",
        "info",
        logger_to_use,
        app_settings,
    )

    cron_line = build_cron_line(app_settings, script_path, script_args)
    try:
        crontab.replace_entry(str(script_path), cron_line)
    except (subprocess.CalledProcessError, OSError):
        marker.unlink(missing_ok=True)
        raise
    log_provision(
        f"{symbols.get('warning', '⚠️')} The @reboot entry stores {', '.join(SECRET_ENV_VARS)} in plaintext "
        "in root's crontab until the resumed run removes it.",
        "warning",
        logger_to_use,
        app_settings,
    )
    return cron_line


def schedule_resume_and_reboot(
    app_settings: AppSettings,
    script_path: Path,
    crontab: CrontabManager,
    script_args: Sequence[str] = (),
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Persist the checkpoint, wait the configured delay, then reboot."""
    logger_to_use = current_logger if current_logger else module_logger
    symbols = app_settings.symbols
    delay = app_settings.reboot.delay_seconds

    log_provision(
        f"{symbols.get('warning', '⚠️')} Kernel or core packages were updated. A reboot is required.",
        "warning",
        logger_to_use,
        app_settings,
    )
    schedule_resume(
        app_settings, script_path, crontab, script_args, current_logger=logger_to_use
    )
    log_provision(
        f"{symbols.get('info', 'ℹ️')} Rebooting in {delay:g} seconds. Provisioning will continue automatically.",
        "info",
        logger_to_use,
        app_settings,
    )
    time.sleep(delay)
    reboot_system(app_settings, current_logger=logger_to_use)


def scheduled_entries(
    script_path: Path, crontab: CrontabManager
) -> List[str]:
    """Crontab lines currently referencing ``script_path``."""
    return crontab.find_entries(str(script_path))

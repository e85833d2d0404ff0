# common/crontab_manager.py
# -*- coding: utf-8 -*-
import logging
from typing import List, Optional

from common.command_utils import run_elevated_command
from provisioner.config_models import AppSettings


class CrontabManager:
    """
    Reads and rewrites a crontab through the ``crontab`` CLI.

    The table is always replaced as a whole: read, filter, append, install.
    Content travels on stdin and is never logged, since entries may carry
    credentials as environment assignments.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        user: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            app_settings: The application settings.
            user: Account whose crontab is managed. ``None`` means root.
            logger: An optional logging object.
        """
        self.app_settings = app_settings
        self.user = user
        self.logger = logger or logging.getLogger(__name__)

    def _base_command(self) -> List[str]:
        cmd = ["crontab"]
        if self.user and self.user != "root":
            cmd.extend(["-u", self.user])
        return cmd

    def read_lines(self) -> List[str]:
        """
        Return the current crontab lines. A missing crontab ("no crontab for
        <user>", non-zero exit) is reported as an empty list.
        """
        result = run_elevated_command(
            self._base_command() + ["-l"],
            self.app_settings,
            check=False,
            capture_output=True,
            current_logger=self.logger,
            log_output=False,
        )
        if result.returncode != 0 or not result.stdout:
            return []
        return result.stdout.splitlines()

    def write_lines(self, lines: List[str]) -> None:
        """Install ``lines`` as the complete crontab."""
        content = "\n".join(lines) + "\n" if lines else ""
        run_elevated_command(
            self._base_command() + ["-"],
            self.app_settings,
            cmd_input=content,
            capture_output=True,
            current_logger=self.logger,
            log_output=False,
        )

    def find_entries(self, needle: str) -> List[str]:
        """Return every line containing ``needle``."""
        return [line for line in self.read_lines() if needle in line]

    def remove_entries(self, needle: str) -> int:
        """
        Drop every line containing ``needle``.

        Returns:
            The number of lines removed. The crontab is only rewritten when
            something was removed.
        """
        lines = self.read_lines()
        kept = [line for line in lines if needle not in line]
        removed = len(lines) - len(kept)
        if removed:
            self.logger.info(
                f"Removing {removed} crontab entr{'y' if removed == 1 else 'ies'} matching '{needle}'."
            )
            self.write_lines(kept)
        else:
            self.logger.info(f"No crontab entries match '{needle}'.")
        return removed

    def replace_entry(self, needle: str, new_line: str) -> None:
        """
        Remove every line containing ``needle`` and append ``new_line``, in a
        single rewrite, so at most one matching entry exists afterwards.
        """
        if needle not in new_line:
            raise ValueError("The replacement entry must contain the match string.")
        kept = [line for line in self.read_lines() if needle not in line]
        kept.append(new_line)
        self.logger.info(f"Installing crontab entry matching '{needle}'.")
        self.write_lines(kept)

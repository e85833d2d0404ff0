# common/debian/apt_manager.py
# -*- coding: utf-8 -*-
import logging
import subprocess
from typing import List, Optional, Union

from common.command_utils import (
    command_exists,
    run_command,
    run_elevated_command,
)
from provisioner.config_models import AppSettings

# apt-get runs under sudo, which resets the environment, so the frontend is
# set through env(1) on the command line itself.
NONINTERACTIVE_PREFIX: List[str] = ["env", "DEBIAN_FRONTEND=noninteractive"]


class AptManager:
    """
    A centralized manager for Debian apt packages using command-line tools.
    Every apt-get invocation runs with the non-interactive debconf frontend.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initializes the AptManager.
        Args:
            logger: An optional logging object.
        """
        self.logger = logger or logging.getLogger(__name__)
        if not command_exists("apt-get"):
            self.logger.critical(
                "'apt-get' command not found. This manager cannot function."
            )
            raise FileNotFoundError(
                "'apt-get' not found. Is this a Debian-based system?"
            )

    def _apt_get(self, args: List[str], app_settings: AppSettings) -> None:
        run_elevated_command(
            NONINTERACTIVE_PREFIX + ["apt-get"] + args,
            app_settings,
            current_logger=self.logger,
        )

    def update(
        self, app_settings: AppSettings, raise_error: bool = True
    ) -> bool:
        """
        Updates the list of available packages using 'apt-get update'.

        Args:
            app_settings: The application settings.
            raise_error: Whether to raise an exception on failure.

        Returns:
            True if successful, False otherwise.
        """
        self.logger.info("Updating apt package lists via 'apt-get update'...")
        try:
            self._apt_get(["update", "-yq"], app_settings)
            self.logger.info("Apt package lists updated successfully.")
            return True
        except Exception as e:
            self.logger.error(f"Failed to update apt cache: {e}")
            if raise_error:
                raise
            return False

    def upgrade(
        self, app_settings: AppSettings, raise_error: bool = True
    ) -> bool:
        """
        Upgrades all installed packages using 'apt-get upgrade'.

        Args:
            app_settings: The application settings.
            raise_error: Whether to raise an exception on failure.

        Returns:
            True if successful, False otherwise.
        """
        self.logger.info("Upgrading installed packages via 'apt-get upgrade'...")
        try:
            self._apt_get(["upgrade", "-yq"], app_settings)
            self.logger.info("Installed packages upgraded successfully.")
            return True
        except Exception as e:
            self.logger.error(f"Failed to upgrade packages: {e}")
            if raise_error:
                raise
            return False

    def is_installed(self, pkg_name: str, app_settings: AppSettings) -> bool:
        """Return True if dpkg reports ``pkg_name`` as installed."""
        try:
            result = run_command(
                ["dpkg-query", "-W", "-f=${db:Status-Status}", pkg_name],
                app_settings,
                capture_output=True,
                check=True,
                current_logger=self.logger,
            )
        except subprocess.CalledProcessError:
            return False
        status = (result.stdout or "").strip()
        return status == "installed"

    def install(
        self,
        packages: Union[List[str], str],
        app_settings: AppSettings,
        update_first: bool = True,
        raise_error: bool = True,
    ) -> bool:
        """
        Installs one or more packages using 'apt-get install', skipping the
        ones dpkg already reports as installed.

        Args:
            packages: A single package name or a list of package names.
            app_settings: The application settings.
            update_first: Whether to update the package lists before installing.
            raise_error: Whether to raise an exception on failure.

        Returns:
            True if successful, False otherwise.
        """
        if not isinstance(packages, list):
            packages = [packages]

        if update_first:
            if not self.update(app_settings, raise_error=raise_error):
                return False

        packages_to_install = []
        for pkg_name in packages:
            if self.is_installed(pkg_name, app_settings):
                self.logger.info(
                    f"Package '{pkg_name}' is already installed. Skipping."
                )
            else:
                self.logger.info(
                    f"Marking package for installation: {pkg_name}"
                )
                packages_to_install.append(pkg_name)

        if not packages_to_install:
            self.logger.info("All requested packages are already installed.")
            return True

        self.logger.info(
            f"Committing installation for: {', '.join(packages_to_install)}"
        )
        try:
            self._apt_get(["install", "-yq"] + packages_to_install, app_settings)
            self.logger.info("Packages installed successfully.")
            return True
        except Exception as e:
            self.logger.error(f"Failed to install packages: {e}")
            if raise_error:
                raise
            return False

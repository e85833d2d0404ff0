# provisioner/config.py
"""
Static constants for the OpenClaw provisioner.

Values here are not user-configurable: the script version, the apt package
set installed in the dependency phase and fixed system paths.
"""

from pathlib import Path

# Represents the version of the provisioning logic.
SCRIPT_VERSION: str = "1.0.0"

# Root of the project checkout; install.py lives here.
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

# --- Package Lists (for apt installation) ---
DEPENDENCY_PACKAGES: list[str] = [
    "curl",
    "git",
    "build-essential",
    "ufw",
    "jq",
    "unzip",
    # Needed for systemd --user sessions of the lingering service account.
    "dbus-user-session",
    "nodejs",
    "npm",
]

# --- System Paths ---
SUDOERS_DIR: Path = Path("/etc/sudoers.d")
HOME_ROOT: Path = Path("/home")

# cron starts @reboot jobs with PATH=/usr/bin:/bin, which lacks useradd, ufw
# and reboot when running as root without sudo.
RESUME_PATH: str = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"

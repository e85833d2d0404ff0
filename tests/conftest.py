# tests/conftest.py
from pathlib import Path
from typing import List, Optional

import pytest

from common.crontab_manager import CrontabManager
from provisioner.config_models import AppSettings, OpenClawSettings, RebootSettings

ZAI_KEY = "zai-test-key"
OPENROUTER_KEY = "or-test-key"


class FakeCrontab(CrontabManager):
    """CrontabManager backed by an in-memory table instead of the crontab CLI."""

    def __init__(self, app_settings: AppSettings, lines: Optional[List[str]] = None):
        super().__init__(app_settings)
        self.lines: List[str] = list(lines or [])
        self.writes = 0

    def read_lines(self) -> List[str]:
        return list(self.lines)

    def write_lines(self, lines: List[str]) -> None:
        self.writes += 1
        self.lines = list(lines)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep real provisioner variables from leaking into settings built by tests."""
    for name in ("ZAI_API_KEY", "OPENROUTER_API_KEY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    """Real settings with every filesystem location redirected into tmp_path."""
    return AppSettings(
        zai_api_key=ZAI_KEY,
        openrouter_api_key=OPENROUTER_KEY,
        openclaw=OpenClawSettings(
            install_dir=tmp_path / "openclaw",
            ssh_source_dir=tmp_path / "root-ssh",
        ),
        reboot=RebootSettings(
            marker_file=tmp_path / "tmp" / ".openclaw-setup-rebooted",
            reboot_required_file=tmp_path / "reboot-required",
            delay_seconds=0,
            resume_log_file=tmp_path / "openclaw-provision.log",
        ),
    )


@pytest.fixture
def fake_crontab(app_settings) -> FakeCrontab:
    return FakeCrontab(app_settings)


@pytest.fixture
def script_path(tmp_path: Path) -> Path:
    return tmp_path / "opt" / "openclaw-provisioner" / "install.py"

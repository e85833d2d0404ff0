import logging
import subprocess
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from common.command_utils import (
    command_exists,
    log_provision,
    run_command,
    run_command_as_user,
    run_elevated_command,
)
from provisioner.config_models import AppSettings


@pytest.fixture
def mock_logger():
    """Fixture to create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def mock_app_settings():
    """Fixture to create mock AppSettings for testing."""
    mock_settings = MagicMock(spec=AppSettings)
    mock_settings.symbols = {"error": "❌", "info": "ℹ️", "warning": "!", "gear": "⚙️"}
    return mock_settings


@pytest.mark.parametrize(
    "level, method",
    [
        ("info", "info"),
        ("success", "info"),
        ("warning", "warning"),
        ("error", "error"),
        ("critical", "critical"),
        ("debug", "debug"),
        ("bogus", "info"),
    ],
)
def test_log_provision_levels(mock_logger, level, method):
    log_provision("hello", level, mock_logger)
    getattr(mock_logger, method).assert_called_once_with("hello", exc_info=False)


def test_run_command_logs_and_returns(mocker: MockerFixture, mock_logger, mock_app_settings):
    mock_run = mocker.patch(
        "common.command_utils.subprocess.run",
        return_value=subprocess.CompletedProcess(["echo", "hi"], 0, stdout="hi\n", stderr=""),
    )

    result = run_command(["echo", "hi"], mock_app_settings, capture_output=True, current_logger=mock_logger)

    assert result.stdout == "hi\n"
    mock_run.assert_called_once_with(
        ["echo", "hi"],
        check=True,
        shell=False,
        capture_output=True,
        text=True,
        input=None,
        cwd=None,
        env=None,
    )
    mock_logger.info.assert_any_call("⚙️ Executing: echo hi", exc_info=False)
    mock_logger.debug.assert_any_call("   stdout: hi", exc_info=False)


def test_run_command_does_not_log_output_when_disabled(mocker: MockerFixture, mock_logger, mock_app_settings):
    mocker.patch(
        "common.command_utils.subprocess.run",
        return_value=subprocess.CompletedProcess(["tee", "/x"], 0, stdout="SECRET=1\n", stderr=""),
    )

    run_command(
        ["tee", "/x"],
        mock_app_settings,
        capture_output=True,
        cmd_input="SECRET=1\n",
        current_logger=mock_logger,
        log_output=False,
    )

    logged = [str(c) for c in mock_logger.mock_calls]
    assert not any("SECRET=1" in entry for entry in logged)


def test_run_command_failure_logs_and_reraises(mocker: MockerFixture, mock_logger, mock_app_settings):
    mocker.patch(
        "common.command_utils.subprocess.run",
        side_effect=subprocess.CalledProcessError(2, ["false"], output="", stderr="boom"),
    )

    with pytest.raises(subprocess.CalledProcessError):
        run_command(["false"], mock_app_settings, capture_output=True, current_logger=mock_logger)

    mock_logger.error.assert_any_call("❌ Command `false` failed (rc 2).", exc_info=False)
    mock_logger.error.assert_any_call("   stderr: boom", exc_info=False)


def test_run_command_missing_executable(mocker: MockerFixture, mock_logger, mock_app_settings):
    error = FileNotFoundError(2, "No such file", "nonexistent")
    mocker.patch("common.command_utils.subprocess.run", side_effect=error)

    with pytest.raises(FileNotFoundError):
        run_command(["nonexistent"], mock_app_settings, current_logger=mock_logger)

    mock_logger.error.assert_called()


def test_run_elevated_command_prefixes_sudo_when_not_root(mocker: MockerFixture, mock_app_settings):
    mocker.patch("common.command_utils.os.geteuid", return_value=1000)
    mock_run = mocker.patch("common.command_utils.run_command")

    run_elevated_command(["systemctl", "daemon-reload"], mock_app_settings)

    assert mock_run.call_args.args[0] == ["sudo", "systemctl", "daemon-reload"]


def test_run_elevated_command_as_root_runs_directly(mocker: MockerFixture, mock_app_settings):
    mocker.patch("common.command_utils.os.geteuid", return_value=0)
    mock_run = mocker.patch("common.command_utils.run_command")

    run_elevated_command(["systemctl", "daemon-reload"], mock_app_settings)

    assert mock_run.call_args.args[0] == ["systemctl", "daemon-reload"]


def test_run_command_as_user_wraps_with_sudo_u(mocker: MockerFixture, mock_app_settings):
    mock_run = mocker.patch("common.command_utils.run_command")

    run_command_as_user("openclaw", ["npm", "install"], mock_app_settings)

    assert mock_run.call_args.args[0] == ["sudo", "-u", "openclaw", "-H", "--", "npm", "install"]


def test_command_exists(mocker: MockerFixture):
    mocker.patch("common.command_utils.shutil.which", side_effect=lambda name: "/usr/bin/git" if name == "git" else None)

    assert command_exists("git") is True
    assert command_exists("definitely-not-here") is False

import subprocess
from unittest.mock import MagicMock, call

import pytest
from pytest_mock import MockerFixture

from common.system_utils import (
    enable_and_restart_service,
    is_reboot_required,
    reboot_system,
    systemd_reload,
    user_exists,
)


def test_user_exists_true(mocker: MockerFixture, app_settings):
    mocker.patch("common.system_utils.run_command")

    assert user_exists("openclaw", app_settings) is True


def test_user_exists_false(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch(
        "common.system_utils.run_command",
        side_effect=subprocess.CalledProcessError(1, ["id", "ghost"]),
    )

    assert user_exists("ghost", app_settings) is False
    assert mock_run.call_args.args[0] == ["id", "ghost"]


def test_is_reboot_required_follows_sentinel(app_settings):
    sentinel = app_settings.reboot.reboot_required_file
    assert is_reboot_required(app_settings) is False

    sentinel.write_text("*** System restart required ***\n")

    assert is_reboot_required(app_settings) is True


def test_systemd_reload_success(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch("common.system_utils.run_elevated_command")

    systemd_reload(app_settings)

    assert mock_run.call_args.args[0] == ["systemctl", "daemon-reload"]


def test_systemd_reload_failure_reraises(mocker: MockerFixture, app_settings):
    mocker.patch(
        "common.system_utils.run_elevated_command",
        side_effect=subprocess.CalledProcessError(1, ["systemctl", "daemon-reload"]),
    )
    mock_log = mocker.patch("common.system_utils.log_provision")

    with pytest.raises(subprocess.CalledProcessError):
        systemd_reload(app_settings)

    assert any(c.args[1] == "error" for c in mock_log.call_args_list)


def test_enable_and_restart_service(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch("common.system_utils.run_elevated_command")
    logger = MagicMock()

    enable_and_restart_service("openclaw", app_settings, current_logger=logger)

    mock_run.assert_has_calls(
        [
            call(["systemctl", "enable", "openclaw.service"], app_settings, current_logger=logger),
            call(["systemctl", "restart", "openclaw.service"], app_settings, current_logger=logger),
        ]
    )


def test_reboot_system(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch("common.system_utils.run_elevated_command")

    reboot_system(app_settings)

    assert mock_run.call_args.args[0] == ["reboot"]

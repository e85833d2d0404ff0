import subprocess

from pytest_mock import MockerFixture

from common.file_utils import path_exists_elevated, write_file_elevated


def test_write_file_elevated_streams_content_and_sets_mode(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch("common.file_utils.run_elevated_command")
    mock_log = mocker.patch("common.file_utils.log_provision")

    write_file_elevated("/etc/app.env", "KEY=value\n", app_settings, mode="600", owner="openclaw")

    commands = [c.args[0] for c in mock_run.call_args_list]
    assert commands == [
        ["tee", "/etc/app.env"],
        ["chown", "openclaw:openclaw", "/etc/app.env"],
        ["chmod", "600", "/etc/app.env"],
    ]
    tee_call = mock_run.call_args_list[0]
    assert tee_call.kwargs["cmd_input"] == "KEY=value\n"
    assert tee_call.kwargs["log_output"] is False
    mock_log.assert_called_with(mocker.ANY, "success", mocker.ANY, app_settings)


def test_write_file_elevated_without_owner_skips_chown(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch("common.file_utils.run_elevated_command")
    mocker.patch("common.file_utils.log_provision")

    write_file_elevated("/etc/systemd/system/x.service", "[Unit]\n", app_settings)

    commands = [c.args[0] for c in mock_run.call_args_list]
    assert ["chmod", "644", "/etc/systemd/system/x.service"] in commands
    assert not any(cmd[0] == "chown" for cmd in commands)


def test_path_exists_elevated(mocker: MockerFixture, app_settings):
    mock_run = mocker.patch(
        "common.file_utils.run_elevated_command",
        side_effect=[
            subprocess.CompletedProcess([], 0),
            subprocess.CompletedProcess([], 1),
        ],
    )

    assert path_exists_elevated("/home/openclaw/openclaw", app_settings, test_flag="-d") is True
    assert path_exists_elevated("/missing", app_settings) is False
    assert mock_run.call_args_list[0].args[0] == ["test", "-d", "/home/openclaw/openclaw"]
    assert mock_run.call_args_list[1].kwargs["check"] is False

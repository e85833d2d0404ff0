# tests/installer/test_user_installer.py
import subprocess
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from installer.user_installer import (
    copy_root_ssh_keys,
    create_service_user,
    setup_service_user,
)


@pytest.fixture
def system(mocker: MockerFixture):
    """
    Fake accounts database: ``id`` succeeds only for created users and
    ``useradd`` adds one. Every elevated command is recorded.
    """
    users = set()
    commands = []

    def fake_run_command(command, *args, **kwargs):
        if command[0] == "id":
            if command[1] not in users:
                raise subprocess.CalledProcessError(1, command)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    def fake_elevated(command, *args, **kwargs):
        commands.append(list(command))
        if command[0] == "useradd":
            users.add(command[-1])
        if command[0] == "test":
            return subprocess.CompletedProcess(command, 0 if Path(command[2]).exists() else 1)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    mocker.patch("common.system_utils.run_command", side_effect=fake_run_command)
    user_elevated = mocker.patch("installer.user_installer.run_elevated_command", side_effect=fake_elevated)
    mocker.patch("common.file_utils.run_elevated_command", side_effect=fake_elevated)
    return users, commands, user_elevated


def test_create_service_user_once(system, app_settings):
    users, commands, _ = system

    assert create_service_user(app_settings) is True
    first_run = list(commands)
    assert create_service_user(app_settings) is False

    assert users == {"openclaw"}
    assert [c for c in commands if c[0] == "useradd"] == [["useradd", "-m", "-s", "/bin/bash", "openclaw"]]
    assert ["usermod", "-aG", "sudo", "openclaw"] in first_run
    assert commands == first_run


def test_create_service_user_writes_sudoers_dropin(system, app_settings):
    _, commands, _ = system

    create_service_user(app_settings)

    assert ["tee", "/etc/sudoers.d/openclaw"] in commands
    assert ["chmod", "440", "/etc/sudoers.d/openclaw"] in commands


def test_setup_service_user_repeated_enables_linger_every_run(system, app_settings):
    _, commands, _ = system

    setup_service_user(app_settings)
    setup_service_user(app_settings)

    assert commands.count(["loginctl", "enable-linger", "openclaw"]) == 2
    assert sum(1 for c in commands if c[0] == "useradd") == 1


def test_copy_root_ssh_keys_skipped_without_source(system, app_settings):
    _, commands, _ = system

    assert copy_root_ssh_keys(app_settings) is False
    assert not any(c[0] == "cp" for c in commands)


def test_copy_root_ssh_keys(system, app_settings):
    _, commands, mock_elevated = system
    app_settings.openclaw.ssh_source_dir.mkdir()

    assert copy_root_ssh_keys(app_settings) is True

    source = app_settings.openclaw.ssh_source_dir
    assert ["cp", str(source / "authorized_keys"), "/home/openclaw/.ssh/"] in commands
    assert ["chown", "-R", "openclaw:openclaw", "/home/openclaw/.ssh"] in commands
    assert ["chmod", "700", "/home/openclaw/.ssh"] in commands
    assert ["chmod", "600", "/home/openclaw/.ssh/authorized_keys"] in commands
    cp_call = next(c for c in mock_elevated.call_args_list if c.args[0][0] == "cp")
    assert cp_call.kwargs["check"] is False

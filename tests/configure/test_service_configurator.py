# tests/configure/test_service_configurator.py
from pathlib import Path

from pytest_mock import MockerFixture

from configure.service_configurator import configure_openclaw_service, render_systemd_unit
from provisioner.config_models import AppSettings


def test_render_systemd_unit_defaults():
    unit = render_systemd_unit(AppSettings())

    assert unit == (
        "[Unit]\n"
        "Description=OpenClaw AI Gateway\n"
        "After=network.target\n"
        "\n"
        "[Service]\n"
        "Type=simple\n"
        "User=openclaw\n"
        "WorkingDirectory=/home/openclaw/openclaw\n"
        "ExecStart=/usr/bin/npm start\n"
        "Restart=on-failure\n"
        "RestartSec=5\n"
        "EnvironmentFile=/home/openclaw/openclaw/.env\n"
        "\n"
        "[Install]\n"
        "WantedBy=multi-user.target\n"
    )


def test_render_systemd_unit_follows_install_dir(app_settings):
    unit = render_systemd_unit(app_settings)
    app_dir = app_settings.openclaw.app_dir

    assert f"WorkingDirectory={app_dir}\n" in unit
    assert f"EnvironmentFile={app_dir / '.env'}\n" in unit


def test_configure_openclaw_service(mocker: MockerFixture, app_settings):
    events = []
    mocker.patch(
        "configure.service_configurator.write_file_elevated",
        side_effect=lambda path, content, *a, **k: events.append(("write", Path(path), k.get("mode"))),
    )
    mocker.patch(
        "configure.service_configurator.systemd_reload",
        side_effect=lambda *a, **k: events.append(("reload",)),
    )
    mocker.patch(
        "configure.service_configurator.enable_and_restart_service",
        side_effect=lambda name, *a, **k: events.append(("enable_restart", name)),
    )

    configure_openclaw_service(app_settings)

    assert events == [
        ("write", Path("/etc/systemd/system/openclaw.service"), "644"),
        ("reload",),
        ("enable_restart", "openclaw"),
    ]


def test_unit_file_identical_across_runs(mocker: MockerFixture, app_settings):
    written = []
    mocker.patch(
        "configure.service_configurator.write_file_elevated",
        side_effect=lambda path, content, *a, **k: written.append(content.encode("utf-8")),
    )
    mocker.patch("configure.service_configurator.systemd_reload")
    mocker.patch("configure.service_configurator.enable_and_restart_service")

    configure_openclaw_service(app_settings)
    configure_openclaw_service(app_settings)

    assert written[0] == written[1]

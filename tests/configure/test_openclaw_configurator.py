# tests/configure/test_openclaw_configurator.py
import pytest
from pytest_mock import MockerFixture

from configure.openclaw_configurator import render_env_file, write_openclaw_env_file

EXPECTED_ENV = """\
# Port settings
PORT=18789

# Primary provider
PRIMARY_PROVIDER=z.ai
PRIMARY_MODEL=glm4.7
ZAI_API_KEY=zai-test-key

# Fallback provider
FALLBACK_PROVIDER=openrouter
FALLBACK_MODELS=google/gemini-2.5-flash,moonshotai/kimi-k2.5
OPENROUTER_API_KEY=or-test-key

LOG_LEVEL=info
"""


def test_render_env_file_defaults(app_settings):
    assert render_env_file(app_settings) == EXPECTED_ENV


def test_render_env_file_unknown_placeholder(app_settings):
    app_settings.openclaw.env_file_template = "X={nope}\n"

    with pytest.raises(KeyError):
        render_env_file(app_settings)


def test_write_env_file_is_private_and_owned(mocker: MockerFixture, app_settings):
    mock_write = mocker.patch("configure.openclaw_configurator.write_file_elevated")

    write_openclaw_env_file(app_settings)

    args, kwargs = mock_write.call_args
    assert args[0] == app_settings.openclaw.app_dir / ".env"
    assert args[1] == EXPECTED_ENV
    assert kwargs["mode"] == "600"
    assert kwargs["owner"] == "openclaw"


def test_write_env_file_twice_is_byte_identical(mocker: MockerFixture, app_settings):
    written = []
    mocker.patch(
        "configure.openclaw_configurator.write_file_elevated",
        side_effect=lambda path, content, *a, **k: written.append(content.encode("utf-8")),
    )

    write_openclaw_env_file(app_settings)
    write_openclaw_env_file(app_settings)

    assert len(written) == 2
    assert written[0] == written[1]

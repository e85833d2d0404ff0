# tests/provisioner/test_cli_handler.py
from unittest.mock import MagicMock

from provisioner.cli_handler import show_completion_summary, view_configuration


def test_view_configuration_masks_secrets(app_settings):
    text = view_configuration(app_settings, MagicMock(), pending_resume_entries=["@reboot x"])

    assert "zai-test-key" not in text
    assert "or-test-key" not in text
    assert "ZAI_API_KEY:                 [SET]" in text
    assert "Scheduled Resume Entries:    1" in text


def test_view_configuration_reports_unset_secret(app_settings):
    app_settings.openrouter_api_key = ""

    text = view_configuration(app_settings, MagicMock())

    assert "OPENROUTER_API_KEY:          [NOT SET]" in text
    assert "Scheduled Resume Entries" not in text


def test_completion_summary_has_journal_hint(app_settings):
    summary = show_completion_summary(app_settings, MagicMock())

    assert "journalctl -u openclaw -f" in summary
    assert "z.ai (glm4.7)" in summary
    assert "18789" in summary

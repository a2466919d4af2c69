"""Tests for EmailService."""

from unittest.mock import MagicMock, patch

from spiritlove.config import settings
from spiritlove.services.email_service import EmailService


def test_without_api_key_nothing_is_sent(monkeypatch):
    monkeypatch.setattr(settings, "sendgrid_api_key", "")
    with patch("spiritlove.services.email_service.SendGridAPIClient") as mock_client:
        assert EmailService.send_password_reset_email("a@x.com", "alice", "abc123") is False
    mock_client.assert_not_called()


def test_reset_email_contains_link_in_both_bodies(monkeypatch):
    monkeypatch.setattr(settings, "sendgrid_api_key", "SG.test")
    monkeypatch.setattr(settings, "frontend_url", "https://spiritloveplay.app")

    with patch("spiritlove.services.email_service.Mail") as mock_mail, patch(
        "spiritlove.services.email_service.SendGridAPIClient"
    ) as mock_client:
        mock_client.return_value.send.return_value = MagicMock(status_code=202)
        assert EmailService.send_password_reset_email("a@x.com", "alice", "abc123") is True

    kwargs = mock_mail.call_args.kwargs
    link = "https://spiritloveplay.app/reset-password?token=abc123"
    assert kwargs["to_emails"] == "a@x.com"
    assert link in kwargs["html_content"]
    assert link in kwargs["plain_text_content"]
    assert "1 hour" in kwargs["plain_text_content"]


def test_send_failure_returns_false(monkeypatch):
    monkeypatch.setattr(settings, "sendgrid_api_key", "SG.test")
    with patch("spiritlove.services.email_service.SendGridAPIClient") as mock_client:
        mock_client.return_value.send.side_effect = RuntimeError("network down")
        assert EmailService.send_password_changed_notification("a@x.com", "alice") is False


def test_account_name_is_escaped_in_html(monkeypatch):
    monkeypatch.setattr(settings, "sendgrid_api_key", "SG.test")
    name = "<a href='http://evil'>x</a>"

    with patch("spiritlove.services.email_service.Mail") as mock_mail, patch(
        "spiritlove.services.email_service.SendGridAPIClient"
    ) as mock_client:
        mock_client.return_value.send.return_value = MagicMock(status_code=202)
        EmailService.send_password_reset_email("a@x.com", name, "abc123")
        EmailService.send_password_changed_notification("a@x.com", name)

    assert mock_mail.call_count == 2
    for call in mock_mail.call_args_list:
        html_content = call.kwargs["html_content"]
        assert name not in html_content
        assert "&lt;a href=&#x27;http://evil&#x27;&gt;x&lt;/a&gt;" in html_content

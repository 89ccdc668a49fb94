import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from app.platform.services import email as email_service
from app.platform.services.email import EmailAttachment, build_message, send_email, send_email_via_relay


@pytest.fixture
def attachment():
    return EmailAttachment(filename="report-example.com.pdf", content=b"%PDF-1.4 test")


def test_build_message_attaches_files(attachment):
    msg = build_message("owner@example.com", "Report", "<p>Hi</p>", [attachment])

    parts = msg.get_payload()
    assert msg["To"] == "owner@example.com"
    assert parts[0].get_content_type() == "text/html"
    assert parts[1].get_content_type() == "application/pdf"
    assert parts[1].get_filename() == "report-example.com.pdf"
    assert parts[1].get_payload(decode=True) == b"%PDF-1.4 test"


def test_send_email_uses_smtp_without_relay(attachment):
    with patch.object(email_service.settings, "EMAIL_RELAY_URL", ""), \
         patch.object(email_service, "send_email_direct_smtp") as mock_smtp, \
         patch.object(email_service, "send_email_via_relay") as mock_relay:
        send_email("owner@example.com", "Report", "<p>Hi</p>", [attachment])

    mock_relay.assert_not_called()
    mock_smtp.assert_called_once_with("owner@example.com", "Report", "<p>Hi</p>", [attachment])


def test_send_email_falls_back_to_smtp_when_relay_fails():
    with patch.object(email_service.settings, "EMAIL_RELAY_URL", "https://relay.test/send"), \
         patch.object(email_service.settings, "EMAIL_RELAY_API_KEY", "key"), \
         patch.object(email_service, "send_email_via_relay", side_effect=Exception("relay down")), \
         patch.object(email_service, "send_email_direct_smtp") as mock_smtp:
        send_email("owner@example.com", "Report", "<p>Hi</p>")

    mock_smtp.assert_called_once()


def test_relay_payload_encodes_attachments(attachment):
    response = MagicMock()
    response.json.return_value = {"message": "queued"}

    with patch.object(email_service.settings, "EMAIL_RELAY_URL", "https://relay.test/send"), \
         patch.object(email_service.settings, "EMAIL_RELAY_API_KEY", "key"), \
         patch.object(email_service.requests, "post", return_value=response) as mock_post:
        send_email_via_relay("owner@example.com", "Report", "<p>Hi</p>", [attachment])

    payload = mock_post.call_args.kwargs["json"]
    assert mock_post.call_args.kwargs["headers"]["X-API-Key"] == "key"
    assert payload["attachments"][0]["filename"] == "report-example.com.pdf"
    assert base64.b64decode(payload["attachments"][0]["content"]) == b"%PDF-1.4 test"


def test_relay_timeout_raises():
    with patch.object(email_service.requests, "post", side_effect=requests.exceptions.Timeout()):
        with pytest.raises(Exception, match="timeout"):
            send_email_via_relay("owner@example.com", "Report", "<p>Hi</p>")

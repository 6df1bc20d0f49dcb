"""Tests for the email digest."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from walmart_deals.errors import DeliveryError
from walmart_deals.models import EmailSettings, Product
from walmart_deals.notify import build_message, build_subject, format_html, format_text, send_email


@pytest.fixture
def products() -> list[Product]:
    return [
        Product(name="Kids Tee", price="$1.50", url="https://www.walmart.com/ip/1",
                image_url="https://i5.walmartimages.com/1.jpg"),
        Product(name="Socks <3-pack>", price="$0.97", url="https://www.walmart.com/ip/2"),
    ]


@pytest.fixture
def settings() -> EmailSettings:
    return EmailSettings(user="me@gmail.com", password="abcd efgh ijkl mnop",
                         recipient="you@example.com", smtp_server="smtp.test", smtp_port=2525)


class TestFormatting:
    """Tests for subject and body rendering."""

    def test_subject_states_count(self) -> None:
        subject = build_subject(3, "kids clothes", 2.0)
        assert "Found 3 Kids Clothes Deal(s) Under $2 at Walmart!" in subject

    def test_text_body(self, products) -> None:
        text = format_text(products, "kids clothes", 2.0)
        assert "Found 2 item(s) under $2:" in text
        assert "1. Kids Tee - $1.50\n   https://www.walmart.com/ip/1" in text
        assert "2. Socks <3-pack> - $0.97\n   https://www.walmart.com/ip/2" in text

    def test_html_body_escapes_names(self, products) -> None:
        """Test product names are HTML-escaped."""
        html = format_html(products, "kids clothes", 2.0)
        assert "Socks &lt;3-pack&gt;" in html
        assert "Socks <3-pack>" not in html
        assert "<strong>2</strong>" in html

    def test_html_image_only_when_present(self, products) -> None:
        html = format_html(products, "kids clothes", 2.0)
        assert html.count("<img ") == 1
        assert 'src="https://i5.walmartimages.com/1.jpg"' in html

    def test_multipart_message(self, products, settings) -> None:
        msg = build_message(products, settings, "kids clothes", 2.0)
        assert msg["From"] == "me@gmail.com"
        assert msg["To"] == "you@example.com"
        assert msg.get_content_subtype() == "alternative"
        parts = msg.get_payload()
        assert [p.get_content_type() for p in parts] == ["text/plain", "text/html"]


class TestSendEmail:
    """Tests for SMTP delivery."""

    def test_send_success(self, products, settings) -> None:
        with patch("walmart_deals.notify.smtplib.SMTP") as mock_smtp:
            server = MagicMock()
            mock_smtp.return_value.__enter__.return_value = server

            send_email(products, settings, "kids clothes", 2.0)

            mock_smtp.assert_called_once_with("smtp.test", 2525, timeout=30)
            server.starttls.assert_called_once()
            # Spaces in the app password are dropped
            server.login.assert_called_once_with("me@gmail.com", "abcdefghijklmnop")
            server.send_message.assert_called_once()

    def test_auth_failure(self, products, settings) -> None:
        """Test SMTP auth errors become DeliveryError."""
        with patch("walmart_deals.notify.smtplib.SMTP") as mock_smtp:
            server = MagicMock()
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            mock_smtp.return_value.__enter__.return_value = server

            with pytest.raises(DeliveryError):
                send_email(products, settings)
            server.send_message.assert_not_called()

    def test_non_ascii_password(self, products, settings) -> None:
        """Test credential encoding errors become DeliveryError."""
        with patch("walmart_deals.notify.smtplib.SMTP") as mock_smtp:
            server = MagicMock()
            server.login.side_effect = UnicodeEncodeError("ascii", "p\u00e4ss", 1, 2, "ordinal not in range(128)")
            mock_smtp.return_value.__enter__.return_value = server

            with pytest.raises(DeliveryError):
                send_email(products, settings)
            server.send_message.assert_not_called()

    def test_connection_failure(self, products, settings) -> None:
        with patch("walmart_deals.notify.smtplib.SMTP", side_effect=OSError("connection refused")):
            with pytest.raises(DeliveryError) as exc_info:
                send_email(products, settings)
            assert "connection refused" in str(exc_info.value)

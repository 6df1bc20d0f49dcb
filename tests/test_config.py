"""Tests for configuration helpers."""

import pytest

from walmart_deals import config
from walmart_deals.errors import ConfigError


class TestEnvHelpers:
    """Tests for environment parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("true", True), ("Yes", True), (" on ", True),
        ("0", False), ("false", False), ("nope", False),
    ])
    def test_env_bool(self, monkeypatch, raw: str, expected: bool) -> None:
        monkeypatch.setenv("SCANNER_FLAG", raw)
        assert config._env_bool("SCANNER_FLAG") is expected

    def test_env_bool_default(self, monkeypatch) -> None:
        monkeypatch.delenv("SCANNER_FLAG", raising=False)
        assert config._env_bool("SCANNER_FLAG", True) is True

    @pytest.mark.parametrize("raw,expected", [("5", 5.0), ("1.25", 1.25), ("", 2.0), ("abc", 2.0)])
    def test_env_float(self, monkeypatch, raw: str, expected: float) -> None:
        monkeypatch.setenv("SCANNER_PRICE", raw)
        assert config._env_float("SCANNER_PRICE", 2.0) == expected


class TestSearchUrl:
    """Tests for search URL construction."""

    def test_default_query(self) -> None:
        url = config.search_url("kids clothes", 2.0)
        assert url == "https://www.walmart.com/search?q=kids+clothes&max_price=2"

    def test_fractional_price(self) -> None:
        assert config.search_url("socks", 1.5).endswith("q=socks&max_price=1.5")


class TestEmailSettings:
    """Tests for reading delivery credentials."""

    def test_all_present(self, monkeypatch) -> None:
        monkeypatch.setenv("GMAIL_USER", "me@gmail.com")
        monkeypatch.setenv("GMAIL_APP_PASSWORD", "abcd efgh ijkl mnop")
        monkeypatch.setenv("EMAIL_RECIPIENT", "you@example.com")
        settings = config.email_settings()
        assert settings.user == "me@gmail.com"
        assert settings.password == "abcd efgh ijkl mnop"
        assert settings.recipient == "you@example.com"

    def test_missing_values_named(self, monkeypatch) -> None:
        """Test every missing variable is listed in the error."""
        monkeypatch.setenv("GMAIL_USER", "me@gmail.com")
        monkeypatch.delenv("GMAIL_APP_PASSWORD", raising=False)
        monkeypatch.setenv("EMAIL_RECIPIENT", "  ")
        with pytest.raises(ConfigError) as exc_info:
            config.email_settings()
        assert "GMAIL_APP_PASSWORD" in str(exc_info.value)
        assert "EMAIL_RECIPIENT" in str(exc_info.value)
        assert "GMAIL_USER" not in str(exc_info.value)

"""
Unit tests for settings and exceptions.
"""

from ehonsearch.config import Settings
from ehonsearch.exceptions import GatewayError, GatewayErrorKind, RegistrationError


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, monkeypatch):
        for name in [
            "EHONSEARCH_DATABASE_URL",
            "GOOGLE_BOOKS_API_KEY",
            "EHONSEARCH_HTTP_TIMEOUT",
            "EHONSEARCH_MAX_RESULTS",
            "EHONSEARCH_BATCH_TIMEOUT",
            "EHONSEARCH_LOG_LEVEL",
        ]:
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.database_url == "sqlite:///./ehonsearch.db"
        assert settings.google_books_api_key is None
        assert settings.http_timeout == 10.0
        assert settings.max_results == 20
        assert settings.batch_entry_timeout == 10.0
        assert settings.auto_accept_threshold == 0.5
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("EHONSEARCH_DATABASE_URL", "sqlite:///:memory:")
        monkeypatch.setenv("GOOGLE_BOOKS_API_KEY", "secret")
        monkeypatch.setenv("EHONSEARCH_MAX_RESULTS", "5")
        monkeypatch.setenv("EHONSEARCH_BATCH_TIMEOUT", "2.5")
        monkeypatch.setenv("EHONSEARCH_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite:///:memory:"
        assert settings.google_books_api_key == "secret"
        assert settings.max_results == 5
        assert settings.batch_entry_timeout == 2.5
        assert settings.log_level == "DEBUG"


class TestExceptions:
    """Tests for error codes and messages."""

    def test_gateway_error(self):
        error = GatewayError(GatewayErrorKind.BOOK_NOT_FOUND)

        assert error.code == "GATEWAY_BOOK_NOT_FOUND"
        assert error.message == "書籍が見つかりませんでした"
        assert error.status_code is None

    def test_http_error_includes_status(self):
        error = GatewayError(GatewayErrorKind.HTTP_ERROR, status_code=429)

        assert "429" in error.message
        assert repr(error) == "GatewayError(http_error, status_code=429)"

    def test_registration_error_default_message(self):
        assert RegistrationError().message == "絵本の登録に失敗しました"

"""Tests for environment-driven settings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from statsnozzle.config import Settings

ENV_VARS = (
    "API_ADDR", "CF_USERNAME", "CF_PASSWORD", "TOKEN_REFRESH_INTERVAL",
    "REPORT_INTERVAL", "SKIP_SSL_VALIDATION", "REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.token_refresh_interval == 90
        assert s.report_interval == 5.0
        assert s.skip_ssl_validation is True

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("API_ADDR", "https://api.example.com")
        monkeypatch.setenv("CF_USERNAME", "admin")
        monkeypatch.setenv("CF_PASSWORD", "secret")
        monkeypatch.setenv("TOKEN_REFRESH_INTERVAL", "30")
        s = Settings()
        assert s.api_addr == "https://api.example.com"
        assert s.token_refresh_interval == 30
        assert s.missing() == []

    def test_missing_lists_every_required_variable(self, monkeypatch) -> None:
        monkeypatch.setenv("CF_USERNAME", "admin")
        assert Settings().missing() == ["API_ADDR", "CF_PASSWORD"]

    def test_invalid_interval_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("TOKEN_REFRESH_INTERVAL", "soon")
        with pytest.raises(ValidationError):
            Settings()

    def test_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("API_ADDR=https://from-dotenv\n", encoding="utf-8")
        assert Settings().api_addr == "https://from-dotenv"

    def test_empty_refresh_interval_falls_back_to_default(self, monkeypatch) -> None:
        monkeypatch.setenv("TOKEN_REFRESH_INTERVAL", "")
        assert Settings().token_refresh_interval == 90

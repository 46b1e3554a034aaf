from __future__ import annotations

from pathlib import Path

import pytest

from scoreboard.config import Settings, parse_database_url


def test_parse_database_url():
    assert parse_database_url("sqlite:///data/scores.db") == Path("data/scores.db")
    assert parse_database_url("scores.db") == Path("scores.db")
    with pytest.raises(RuntimeError):
        parse_database_url("postgres://user@host/db")


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///tmp/board.db")
    monkeypatch.setenv("SCORES_TABLE", "leaderboard")
    monkeypatch.setenv("ADMIN_KEY", "s3cret")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()
    assert settings.db_path == Path("tmp/board.db")
    assert settings.table_name == "leaderboard"
    assert settings.admin_key == "s3cret"
    assert settings.port == 8080
    assert settings.cors_origins == ("https://a.example", "https://b.example")
    assert settings.log_level == "DEBUG"


def test_settings_reject_bad_values(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(RuntimeError):
        Settings.from_env()

    monkeypatch.delenv("PORT")
    monkeypatch.setenv("SCORES_TABLE", "bad-name")
    with pytest.raises(RuntimeError):
        Settings.from_env()

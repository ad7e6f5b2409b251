from __future__ import annotations

from assigncheck.settings import Settings


def test_openai_model_defaults(monkeypatch) -> None:
    monkeypatch.delenv("ASSIGNCHECK_OPENAI_MODEL", raising=False)
    monkeypatch.delenv("OPENAI_MODEL", raising=False)

    settings = Settings()

    assert settings.openai_model == "gpt-4.1-mini"
    assert settings.openai_temperature == 0.2


def test_openai_model_accepts_unprefixed_alias(monkeypatch) -> None:
    monkeypatch.delenv("ASSIGNCHECK_OPENAI_MODEL", raising=False)
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")

    assert Settings().openai_model == "gpt-4o-mini"


def test_max_upload_bytes_follows_megabytes(monkeypatch) -> None:
    monkeypatch.setenv("ASSIGNCHECK_MAX_UPLOAD_MB", "2")

    assert Settings().max_upload_bytes == 2 * 1024 * 1024


def test_cors_allow_origins_defaults_to_wildcard(monkeypatch) -> None:
    monkeypatch.delenv("ASSIGNCHECK_CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)

    settings = Settings()

    assert settings.cors_origin_list == ["*"]


def test_cors_allow_origins_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example.com, https://b.example.com")

    settings = Settings()

    assert settings.cors_origin_list == [
        "https://a.example.com",
        "https://b.example.com",
    ]


def test_session_bounds_read_from_env(monkeypatch) -> None:
    monkeypatch.setenv("ASSIGNCHECK_MAX_SESSIONS", "20")
    monkeypatch.setenv("ASSIGNCHECK_SESSION_TTL_SECONDS", "90")

    settings = Settings()

    assert settings.max_sessions == 20
    assert settings.session_ttl_seconds == 90.0

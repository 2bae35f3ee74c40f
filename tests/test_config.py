from __future__ import annotations

import pytest
from pydantic import ValidationError

from flipbook import config


def test_configured_frontend_is_an_allowed_origin(monkeypatch) -> None:
    monkeypatch.setenv("FRONTEND_URL", "https://books.mysite.io")
    settings = config.Settings()
    assert settings.CORS_ORIGINS[0] == "https://books.mysite.io"
    assert "http://localhost:5173" in settings.CORS_ORIGINS


def test_frontend_origin_is_not_duplicated() -> None:
    settings = config.Settings(FRONTEND_URL=config.DEFAULT_FRONTEND_URL + "/")
    assert settings.CORS_ORIGINS.count(config.DEFAULT_FRONTEND_URL) == 1


def test_explicit_origins_still_gain_frontend() -> None:
    settings = config.Settings(
        FRONTEND_URL="https://books.mysite.io",
        CORS_ORIGINS=["http://localhost:3000"],
    )
    assert settings.CORS_ORIGINS == ["https://books.mysite.io", "http://localhost:3000"]


def test_blob_public_base_url_needs_a_scheme() -> None:
    with pytest.raises(ValidationError):
        config.Settings(BLOB_PUBLIC_BASE_URL="cdn.example.com")


def test_blob_public_base_url_defaults_to_minio_endpoint() -> None:
    settings = config.Settings(MINIO_ENDPOINT="minio.local:9000", MINIO_SECURE=True)
    assert settings.blob_public_base_url == "https://minio.local:9000"

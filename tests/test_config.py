"""Tests for environment-driven settings."""
from __future__ import annotations

from pathlib import Path

import pytest

from transit_mcp.config import Settings, load_settings
from transit_mcp.infrastructure.station_cache import STATION_CACHE_TTL


def test_defaults() -> None:
    settings = load_settings({})
    assert settings == Settings()
    assert settings.station_cache_ttl == STATION_CACHE_TTL == 7 * 24 * 60 * 60
    assert settings.port == 3001


def test_overrides() -> None:
    settings = load_settings(
        {
            "TRANSIT_API_URL": "https://transit.example/api/v1",
            "TRANSIT_DATA_DIR": "/var/lib/transit",
            "STATION_CACHE_TTL_SECONDS": "3600",
            "HTTP_TIMEOUT": "5",
            "PORT": "8080",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.api_url == "https://transit.example/api/v1"
    assert settings.store_path == Path("/var/lib/transit/store.json")
    assert settings.station_cache_ttl == 3600.0
    assert settings.http_timeout == 5.0
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


def test_invalid_number_names_variable() -> None:
    with pytest.raises(ValueError, match="STATION_CACHE_TTL_SECONDS"):
        load_settings({"STATION_CACHE_TTL_SECONDS": "a week"})

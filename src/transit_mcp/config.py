from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from transit_mcp.infrastructure.station_cache import STATION_CACHE_TTL
from transit_mcp.infrastructure.transit_client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_BASE_URL
    data_dir: Path = Path.home() / ".transit-mcp"
    station_cache_ttl: float = STATION_CACHE_TTL  # seconds
    http_timeout: float = DEFAULT_TIMEOUT  # seconds
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"


def _number(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ
    defaults = Settings()

    data_dir = env.get("TRANSIT_DATA_DIR")
    return Settings(
        api_url=env.get("TRANSIT_API_URL") or defaults.api_url,
        data_dir=Path(data_dir).expanduser() if data_dir else defaults.data_dir,
        station_cache_ttl=_number(env, "STATION_CACHE_TTL_SECONDS", defaults.station_cache_ttl),
        http_timeout=_number(env, "HTTP_TIMEOUT", defaults.http_timeout),
        host=env.get("HOST") or defaults.host,
        port=int(_number(env, "PORT", defaults.port)),
        log_level=(env.get("LOG_LEVEL") or defaults.log_level).upper(),
    )

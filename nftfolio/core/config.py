"""
Client settings read from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_S = 30.0


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ClientSettings:
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = DEFAULT_TIMEOUT_S
    login_route: str = "/auth"
    home_route: str = "/"
    log_level: str = "INFO"


def load_settings() -> ClientSettings:
    return ClientSettings(
        base_url=_env_str("NFTFOLIO_API_BASE_URL", DEFAULT_BASE_URL),
        timeout_s=_env_float("NFTFOLIO_HTTP_TIMEOUT_S", DEFAULT_TIMEOUT_S),
        login_route=_env_str("NFTFOLIO_LOGIN_ROUTE", "/auth"),
        home_route=_env_str("NFTFOLIO_HOME_ROUTE", "/"),
        log_level=_env_str("NFTFOLIO_LOG_LEVEL", "INFO").upper(),
    )

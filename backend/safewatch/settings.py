from __future__ import annotations

import os
from datetime import timedelta
from typing import Optional

from safewatch.domain.clustering import (
    DEFAULT_MIN_REPORTS,
    DEFAULT_RADIUS_DEG,
    DEFAULT_TIME_WINDOW,
    HotspotSettings,
)

DEFAULT_FRONTEND_ORIGIN = "http://localhost:8081"
DEFAULT_AUTHORITY_EMAIL = "authorities@local.gov"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def load_hotspot_settings() -> HotspotSettings:
    hours = _env_float("HOTSPOT_TIME_WINDOW_HOURS", DEFAULT_TIME_WINDOW.total_seconds() / 3600)
    return HotspotSettings(
        radius=_env_float("HOTSPOT_RADIUS_DEG", DEFAULT_RADIUS_DEG),
        min_reports=_env_int("HOTSPOT_MIN_REPORTS", DEFAULT_MIN_REPORTS),
        time_window=timedelta(hours=hours),
    )


def database_url() -> Optional[str]:
    return os.getenv("DATABASE_URL") or None


def frontend_origin() -> str:
    return os.getenv("FRONTEND_ORIGIN", DEFAULT_FRONTEND_ORIGIN)


def webhook_url() -> Optional[str]:
    return os.getenv("NOTIFY_WEBHOOK_URL") or None


def authority_email() -> str:
    return os.getenv("AUTHORITY_EMAIL", DEFAULT_AUTHORITY_EMAIL)

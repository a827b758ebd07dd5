from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv()

T = TypeVar("T")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def _flag(raw: str) -> bool:
    value = raw.lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError("expected a boolean flag")


def _csv(raw: str) -> tuple[str, ...]:
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    if not items:
        raise ValueError("expected a comma-separated list")
    return items


def env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Read ``name`` through ``parse``; unset or blank means ``default``, garbage is fatal."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is invalid: {exc}") from exc


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    trust_x_forwarded_for: bool
    near_white_threshold: int
    margin_threshold_inches: float
    line_whitespace_threshold: float
    section_spacing_inches: float
    line_tolerance_pts: float
    season_lookahead: int
    session_ttl_seconds: int
    max_sessions: int


settings = Settings(
    rate_limit=env("RATE_LIMIT", "60/minute", str),
    rate_limit_enabled=env("RATE_LIMIT_ENABLED", True, _flag),
    log_level=env("LOG_LEVEL", "INFO", str),
    sentry_dsn=env("SENTRY_DSN", None, str),
    cors_allowed_origins=env(
        "CORS_ALLOWED_ORIGINS",
        (
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ),
        _csv,
    ),
    cors_allow_origin_regex=env("CORS_ALLOW_ORIGIN_REGEX", None, str),
    cors_allow_credentials=env("CORS_ALLOW_CREDENTIALS", False, _flag),
    trust_x_forwarded_for=env("TRUST_X_FORWARDED_FOR", False, _flag),
    near_white_threshold=env("CRITIQUE_NEAR_WHITE_THRESHOLD", 230, int),
    margin_threshold_inches=env("CRITIQUE_MARGIN_THRESHOLD_INCHES", 0.7, float),
    line_whitespace_threshold=env("CRITIQUE_LINE_WHITESPACE_THRESHOLD", 0.25, float),
    section_spacing_inches=env("CRITIQUE_SECTION_SPACING_INCHES", 0.125, float),
    line_tolerance_pts=env("CRITIQUE_LINE_TOLERANCE_PTS", 2.0, float),
    season_lookahead=env("CRITIQUE_SEASON_LOOKAHEAD", 3, int),
    session_ttl_seconds=env("CRITIQUE_SESSION_TTL_SECONDS", 1800, int),
    max_sessions=env("CRITIQUE_MAX_SESSIONS", 256, int),
)

if not 0 <= settings.near_white_threshold <= 255:
    raise RuntimeError("CRITIQUE_NEAR_WHITE_THRESHOLD must be between 0 and 255.")

if not 0.0 < settings.line_whitespace_threshold < 1.0:
    raise RuntimeError("CRITIQUE_LINE_WHITESPACE_THRESHOLD must be a fraction between 0 and 1.")

if settings.season_lookahead < 1:
    raise RuntimeError("CRITIQUE_SEASON_LOOKAHEAD must be at least 1.")

"""
Environment-driven crawler configuration.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


@dataclass(frozen=True)
class CrawlerSettings:
    """
    Runtime settings shared by every crawler run.
    """

    output_dir: str
    navigation_timeout_ms: int
    fast_mode: bool
    user_agent: str
    upload_url: str | None
    upload_secret: str | None
    upload_timeout_seconds: float
    log_level: str


@dataclass(frozen=True)
class TestModeConfig:
    """
    Limits applied when crawlers run in test mode.

    A limit of None means unlimited.
    """

    __test__ = False

    enabled: bool = False
    max_products: int | None = None
    max_requests: int | None = None
    max_categories: int | None = None


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = _project_root()
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _get_bool_env(name: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    raw = (os.environ if environ is None else environ).get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int, environ: Mapping[str, str] | None = None) -> int:
    raw = (os.environ if environ is None else environ).get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float, environ: Mapping[str, str] | None = None) -> float:
    raw = (os.environ if environ is None else environ).get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str, environ: Mapping[str, str] | None = None) -> str:
    raw = (os.environ if environ is None else environ).get(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _optional_str_env(name: str) -> str | None:
    value = _get_str_env(name, "")
    return value or None


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


@lru_cache(maxsize=1)
def get_crawler_settings() -> CrawlerSettings:
    """
    Return cached crawler settings from environment variables.
    """

    load_env_files()
    fast_mode = _get_bool_env("CRAWLER_FAST_MODE", False)
    default_timeout = 10_000 if fast_mode else 30_000
    return CrawlerSettings(
        output_dir=str(_resolve_path(_get_str_env("CRAWLER_OUTPUT_DIR", "crawler-outputs"))),
        navigation_timeout_ms=max(
            1_000,
            _get_int_env("CRAWLER_NAVIGATION_TIMEOUT_MS", default_timeout),
        ),
        fast_mode=fast_mode,
        user_agent=_get_str_env("CRAWLER_USER_AGENT", DEFAULT_USER_AGENT),
        upload_url=_optional_str_env("VITE_CONVEX_URL"),
        upload_secret=_optional_str_env("CONVEX_UPLOAD_SECRET"),
        upload_timeout_seconds=max(
            1.0,
            _get_float_env("CRAWLER_UPLOAD_TIMEOUT_SECONDS", 60.0),
        ),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


def load_test_mode_config(environ: Mapping[str, str] | None = None) -> TestModeConfig:
    """
    Read test-mode limits from the environment.

    `CRAWLER_TEST_MODE=true` enables the mode; `CRAWLER_MAX_PRODUCTS`,
    `CRAWLER_MAX_REQUESTS` and `CRAWLER_MAX_CATEGORIES` override the default
    caps of 3, 10 and 1.
    """

    if environ is None:
        load_env_files()
        environ = os.environ

    if not _get_bool_env("CRAWLER_TEST_MODE", False, environ):
        return TestModeConfig()

    return TestModeConfig(
        enabled=True,
        max_products=max(1, _get_int_env("CRAWLER_MAX_PRODUCTS", 3, environ)),
        max_requests=max(1, _get_int_env("CRAWLER_MAX_REQUESTS", 10, environ)),
        max_categories=max(1, _get_int_env("CRAWLER_MAX_CATEGORIES", 1, environ)),
    )

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

DEFAULT_API_HOST = "https://public.api.bsky.app"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CACHE_DIR = Path(os.path.expanduser("~/.local/share/skythread/cache/v1"))


@lru_cache(maxsize=1)
def _load_dotenv() -> None:
    from dotenv import find_dotenv, load_dotenv

    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path, override=False)


@dataclass(frozen=True)
class Settings:
    api_host: str = DEFAULT_API_HOST
    timeout: float = DEFAULT_TIMEOUT
    cache_dir: Path = DEFAULT_CACHE_DIR


def _parse_host(value: str, *, default: str) -> str:
    cleaned = value.strip().rstrip("/")
    if not cleaned:
        return default
    if "://" not in cleaned:
        cleaned = f"https://{cleaned}"
    return cleaned


def _parse_positive_float(value: str, *, default: float) -> float:
    cleaned = value.strip()
    if not cleaned:
        return default
    try:
        parsed = float(cleaned)
    except ValueError:
        return default
    if parsed <= 0:
        return default
    return parsed


def _parse_path(value: str, *, default: Path) -> Path:
    cleaned = value.strip()
    if not cleaned:
        return default
    return Path(os.path.expanduser(cleaned))


def settings_from_env() -> Settings:
    _load_dotenv()
    return Settings(
        api_host=_parse_host(
            os.environ.get("SKYTHREAD_API_HOST", ""), default=DEFAULT_API_HOST
        ),
        timeout=_parse_positive_float(
            os.environ.get("SKYTHREAD_TIMEOUT", ""), default=DEFAULT_TIMEOUT
        ),
        cache_dir=_parse_path(
            os.environ.get("SKYTHREAD_CACHE_DIR", ""), default=DEFAULT_CACHE_DIR
        ),
    )


def build_settings(overrides: dict[str, Any] | None = None) -> Settings:
    env = settings_from_env()
    if not overrides:
        return env
    api_host = overrides.get("api_host")
    timeout = overrides.get("timeout")
    cache_dir = overrides.get("cache_dir")
    return Settings(
        api_host=_parse_host(str(api_host), default=env.api_host)
        if api_host
        else env.api_host,
        timeout=_parse_positive_float(str(timeout), default=env.timeout)
        if timeout is not None
        else env.timeout,
        cache_dir=_parse_path(str(cache_dir), default=env.cache_dir)
        if cache_dir
        else env.cache_dir,
    )

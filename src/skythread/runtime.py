from __future__ import annotations

from contextvars import ContextVar, Token
import os
import sys

_TRUE_VALUES = {"1", "true", "yes", "on"}

_VERBOSE_LOGGING: ContextVar[bool | None] = ContextVar(
    "skythread_verbose_logging", default=None
)


def _verbose_from_env() -> bool:
    raw = (os.environ.get("SKYTHREAD_VERBOSE") or "").strip().lower()
    return raw in _TRUE_VALUES


def get_verbose_logging() -> bool:
    enabled = _VERBOSE_LOGGING.get()
    if enabled is None:
        return _verbose_from_env()
    return enabled


def set_verbose_logging(enabled: bool) -> Token[bool | None]:
    return _VERBOSE_LOGGING.set(bool(enabled))


def reset_verbose_logging(token: Token[bool | None]) -> None:
    _VERBOSE_LOGGING.reset(token)


def log(message: str) -> None:
    if get_verbose_logging():
        print(message, file=sys.stderr, flush=True)

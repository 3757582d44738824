from __future__ import annotations

from typing import Any

from ..uri import is_did
from .handles import normalize_handle


def _profile_key(actor: str) -> str:
    cleaned = actor.strip()
    if is_did(cleaned):
        return cleaned
    return normalize_handle(cleaned)


class ProfileCache:
    """Profiles fetched during this run, reachable by DID or by handle."""

    def __init__(self) -> None:
        self._profiles: dict[str, dict[str, Any]] = {}

    def __contains__(self, actor: str) -> bool:
        return _profile_key(actor) in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, actor: str) -> dict[str, Any] | None:
        return self._profiles.get(_profile_key(actor))

    def store(self, profile: dict[str, Any]) -> None:
        for key in ("did", "handle"):
            value = profile.get(key)
            if isinstance(value, str) and value:
                self._profiles[_profile_key(value)] = profile

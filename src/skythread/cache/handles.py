from __future__ import annotations

import json
from typing import Any, Iterator, Protocol

from ..runtime import log as _log
from ..store import KeyValueStore
from ..uri import is_did

HANDLE_CACHE_KEY = "handleCache"


class HandleResolver(Protocol):
    async def resolve_handle(self, handle: str) -> dict[str, Any]: ...


def normalize_handle(handle: str) -> str:
    return handle.strip().lstrip("@").lower()


class HandleCache:
    """Handle -> DID map persisted as one JSON blob in a key/value store.

    The blob is loaded on first access and rewritten in full after every
    change. Lookups for the same uncached handle that overlap in time each
    hit the network; resolution is idempotent so the last write wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        resolver: HandleResolver,
        *,
        key: str = HANDLE_CACHE_KEY,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._key = key
        self._entries: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._entries is not None:
            return self._entries
        entries: dict[str, str] = {}
        raw = self._store.get(self._key)
        if raw:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                payload = None
            if isinstance(payload, dict):
                entries = {
                    str(handle): did
                    for handle, did in payload.items()
                    if isinstance(did, str)
                }
        self._entries = entries
        return entries

    def _save(self) -> None:
        self._store.set(self._key, json.dumps(self._load()))

    def __len__(self) -> int:
        return len(self._load())

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._load().items()))

    def get(self, handle: str) -> str | None:
        return self._load().get(normalize_handle(handle))

    def set(self, handle: str, did: str) -> None:
        self._load()[normalize_handle(handle)] = did
        self._save()

    def record_from_profile(self, profile: dict[str, Any]) -> None:
        handle = profile.get("handle")
        did = profile.get("did")
        if isinstance(handle, str) and handle and isinstance(did, str) and did:
            self.set(handle, did)

    def reverse_lookup(self, did: str) -> str | None:
        for handle, cached_did in self._load().items():
            if cached_did == did:
                return handle
        return None

    async def resolve(self, handle: str) -> str:
        cleaned = normalize_handle(handle)
        cached = self.get(cleaned)
        if cached:
            _log(f"  handle cache hit: {cleaned}")
            return cached

        _log(f"  resolving handle: {cleaned}")
        response = await self._resolver.resolve_handle(cleaned)
        did = ""
        if isinstance(response, dict):
            did = str(response.get("did") or "").strip()
        if not is_did(did):
            raise ValueError(f"Could not resolve handle to DID: {handle}")
        self.set(cleaned, did)
        return did

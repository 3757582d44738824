from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .cache import HandleCache, ProfileCache
from .client import APIClient
from .concurrency import gather_fail_fast
from .runtime import log as _log
from .settings import Settings
from .store import FileStore, KeyValueStore
from .uri import (
    POST_COLLECTION,
    URLError,
    build_resource_uri,
    is_at_uri,
    is_did,
    parse_post_url,
    parse_resource_uri,
)

THREAD_DEPTH = 10


@dataclass(frozen=True)
class ComposedPost:
    record: dict[str, Any]
    author: dict[str, Any]


@dataclass(frozen=True)
class ThreadEntry:
    post: dict[str, Any]
    depth: int
    relation: str


@dataclass
class ThreadStats:
    blocked: int = 0
    not_found: int = 0
    entries: list[ThreadEntry] = field(default_factory=list)


class ThreadLoader:
    """Resolves post references and loads threads through one API client."""

    def __init__(
        self,
        client: APIClient,
        handles: HandleCache,
        profiles: ProfileCache | None = None,
    ) -> None:
        self.client = client
        self.handles = handles
        self.profiles = profiles if profiles is not None else ProfileCache()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        store: KeyValueStore | None = None,
        client: APIClient | None = None,
    ) -> ThreadLoader:
        api = client if client is not None else APIClient(settings)
        kv = store if store is not None else FileStore(settings.cache_dir)
        return cls(api, HandleCache(kv, api))

    async def resolve_actor(self, actor: str) -> str:
        if is_did(actor):
            return actor
        return await self.handles.resolve(actor)

    async def load_thread_by_url(self, url: str) -> dict[str, Any]:
        author, rkey = parse_post_url(url)
        return await self.load_thread_by_id(author, rkey)

    async def load_thread_by_id(self, author: str, rkey: str) -> dict[str, Any]:
        did = await self.resolve_actor(author)
        uri = build_resource_uri(did, POST_COLLECTION, rkey)
        _log(f"Loading thread: {uri}")
        return await self.client.get_post_thread(uri, depth=THREAD_DEPTH)

    async def load_thread(self, query: str) -> dict[str, Any]:
        """Load a thread from either a web post URL or an ``at://`` post URI."""
        cleaned = query.strip()
        if is_at_uri(cleaned):
            try:
                address = parse_resource_uri(cleaned)
            except ValueError as exc:
                raise URLError(str(exc)) from exc
            if address.collection != POST_COLLECTION:
                raise URLError(f"Not a post URI: {cleaned}")
            return await self.load_thread_by_id(address.authority, address.rkey)
        return await self.load_thread_by_url(cleaned)

    async def fetch_profile(self, actor: str) -> dict[str, Any]:
        cached = self.profiles.get(actor)
        if cached is not None:
            return cached
        profile = await self.client.get_profile(actor)
        self.profiles.store(profile)
        self.handles.record_from_profile(profile)
        return profile

    async def load_raw_post_with_author(self, post_uri: str) -> ComposedPost:
        address = parse_resource_uri(post_uri)
        record, author = await gather_fail_fast(
            self.client.get_record(address.authority, address.collection, address.rkey),
            self.fetch_profile(address.authority),
        )
        return ComposedPost(record=record, author=author)


def _node_kind(node: dict[str, Any]) -> str:
    ntype = str(node.get("$type") or "").lower()
    if "blocked" in ntype or node.get("blocked"):
        return "blocked"
    if "notfound" in ntype or node.get("notFound"):
        return "not_found"
    return "post"


def thread_posts(thread: Any) -> ThreadStats:
    """Flatten a thread view into parents (oldest first), root and replies."""
    stats = ThreadStats()
    if not isinstance(thread, dict):
        return stats

    parents: list[ThreadEntry] = []
    node = thread.get("parent")
    height = 0
    while isinstance(node, dict):
        kind = _node_kind(node)
        if kind != "post":
            setattr(stats, kind, getattr(stats, kind) + 1)
            break
        post = node.get("post")
        if not isinstance(post, dict):
            break
        height -= 1
        parents.append(ThreadEntry(post=post, depth=height, relation="parent"))
        node = node.get("parent")
    stats.entries.extend(reversed(parents))

    def walk(node: Any, depth: int) -> None:
        if not isinstance(node, dict):
            return
        kind = _node_kind(node)
        if kind != "post":
            setattr(stats, kind, getattr(stats, kind) + 1)
            return
        post = node.get("post")
        if not isinstance(post, dict):
            return
        relation = "root" if depth == 0 else "reply"
        stats.entries.append(ThreadEntry(post=post, depth=depth, relation=relation))
        replies = node.get("replies")
        if isinstance(replies, list):
            for reply in replies:
                walk(reply, depth + 1)

    walk(thread, 0)
    return stats

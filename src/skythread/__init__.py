from typing import Any

from .client import APIClient, APIError, JSONResult, RawResult
from .uri import URLError, parse_post_url, parse_resource_uri, build_resource_uri
from .thread import ComposedPost, ThreadLoader


async def load_thread(
    query: str,
    post_id: str | None = None,
    *,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    from .settings import build_settings

    settings = build_settings(overrides)
    async with APIClient(settings) as client:
        loader = ThreadLoader.from_settings(settings, client=client)
        if post_id:
            return await loader.load_thread_by_id(query, post_id)
        return await loader.load_thread(query)


__all__ = [
    "APIClient",
    "APIError",
    "ComposedPost",
    "JSONResult",
    "RawResult",
    "ThreadLoader",
    "URLError",
    "build_resource_uri",
    "load_thread",
    "parse_post_url",
    "parse_resource_uri",
]

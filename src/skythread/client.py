from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote, urlencode

import httpx

from .runtime import log as _log
from .settings import Settings, settings_from_env

SUCCESS_STATUS = 200


class APIError(Exception):
    """Non-success response from the XRPC endpoint.

    ``body`` is the parsed JSON error payload, or ``None`` when the server
    sent nothing parseable.
    """

    def __init__(self, status: int, body: Any = None) -> None:
        self.status = status
        self.body = body
        detail = f": {self.error}" if self.error else ""
        if self.message:
            detail += f" ({self.message})"
        super().__init__(f"APIError status {status}{detail}")

    @property
    def error(self) -> str | None:
        if isinstance(self.body, dict) and isinstance(self.body.get("error"), str):
            return self.body["error"]
        return None

    @property
    def message(self) -> str | None:
        if isinstance(self.body, dict) and isinstance(self.body.get("message"), str):
            return self.body["message"]
        return None


@dataclass(frozen=True)
class JSONResult:
    value: Any


@dataclass(frozen=True)
class RawResult:
    response: httpx.Response


PostResult = JSONResult | RawResult


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(params: Mapping[str, Any] | None) -> str:
    """Encode params; list values repeat the key once per element."""
    if not params:
        return ""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_value(item)) for item in value)
        else:
            pairs.append((key, _query_value(value)))
    return urlencode(pairs, quote_via=quote, safe="")


def _parse_body(text: str) -> Any:
    if not text.strip():
        return None
    return json.loads(text)


def _error_body(text: str) -> Any:
    try:
        return _parse_body(text)
    except ValueError:
        return None


class APIClient:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings if settings is not None else settings_from_env()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.timeout),
            transport=transport,
            headers={"User-Agent": "skythread"},
        )

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, method: str) -> str:
        return f"{self.settings.api_host}/xrpc/{method}"

    async def get(self, method: str, params: Mapping[str, Any] | None = None) -> Any:
        url = self._url(method)
        query = build_query(params)
        if query:
            url += "?" + query

        response = await self._client.get(url)
        _log(f"  GET {method} -> {response.status_code}")
        text = response.text

        if response.status_code != SUCCESS_STATUS:
            raise APIError(response.status_code, _error_body(text))

        try:
            return _parse_body(text)
        except ValueError as exc:
            raise ValueError(f"Invalid JSON from {method}: {exc}") from exc

    async def post(self, method: str, data: Any = None) -> PostResult:
        headers: dict[str, str] = {}
        content: bytes | None = None
        if data is not None:
            content = json.dumps(data).encode("utf-8")
            headers["Content-Type"] = "application/json"

        response = await self._client.post(
            self._url(method), content=content, headers=headers
        )
        _log(f"  POST {method} -> {response.status_code}")

        if response.status_code != SUCCESS_STATUS:
            raise APIError(response.status_code, _error_body(response.text))

        content_type = response.headers.get("Content-Type") or ""
        if "json" in content_type:
            try:
                return JSONResult(_parse_body(response.text))
            except ValueError as exc:
                raise ValueError(f"Invalid JSON from {method}: {exc}") from exc
        return RawResult(response)

    async def resolve_handle(self, handle: str) -> dict[str, Any]:
        return await self.get("com.atproto.identity.resolveHandle", {"handle": handle})

    async def get_post_thread(self, uri: str, *, depth: int) -> dict[str, Any]:
        return await self.get(
            "app.bsky.feed.getPostThread", {"uri": uri, "depth": depth}
        )

    async def get_record(self, repo: str, collection: str, rkey: str) -> dict[str, Any]:
        return await self.get(
            "com.atproto.repo.getRecord",
            {"repo": repo, "collection": collection, "rkey": rkey},
        )

    async def get_profile(self, actor: str) -> dict[str, Any]:
        return await self.get("app.bsky.actor.getProfile", {"actor": actor})

    async def get_posts(self, uris: list[str]) -> dict[str, Any]:
        return await self.get("app.bsky.feed.getPosts", {"uris": list(uris)})

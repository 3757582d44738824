from __future__ import annotations

import re
from dataclasses import dataclass

DID_PREFIX = "did:"
AT_URI_PREFIX = "at://"
POST_COLLECTION = "app.bsky.feed.post"

CANONICAL_WEB_HOST = "bsky.app"
POST_URL_PREFIXES = ("bsky.app", "staging.bsky.app", "main.bsky.dev")

_POST_URL_RE = re.compile(
    r"^(?:https://)?"
    r"(?P<prefix>" + "|".join(re.escape(p) for p in POST_URL_PREFIXES) + r")"
    r"/profile/(?P<author>[^/\s?#]+)"
    r"/post/(?P<rkey>[A-Za-z0-9_]+)/?$"
)
_SCHEME_RE = re.compile(r"^(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*)://")
_AT_URI_RE = re.compile(
    r"^at://(?P<authority>[^/?#]+)"
    r"(?:/(?P<collection>[^/?#]+)"
    r"(?:/(?P<rkey>[^/?#]+))?)?$"
)


class URLError(ValueError):
    """A user-supplied URL that does not point to a post."""


@dataclass(frozen=True)
class PostURL:
    author: str
    rkey: str

    def __iter__(self):
        return iter((self.author, self.rkey))


@dataclass(frozen=True)
class PostAddress:
    authority: str
    collection: str
    rkey: str

    def __iter__(self):
        return iter((self.authority, self.collection, self.rkey))

    @property
    def uri(self) -> str:
        return f"{AT_URI_PREFIX}{self.authority}/{self.collection}/{self.rkey}"


def is_did(value: str) -> bool:
    return value.startswith(DID_PREFIX)


def is_at_uri(value: str) -> bool:
    return bool(_AT_URI_RE.match(value.strip()))


def _explain_post_url_failure(text: str) -> str:
    scheme = _SCHEME_RE.match(text)
    if scheme and scheme.group("scheme").lower() != "https":
        return f"URL must start with https://, got {scheme.group('scheme')}://"
    rest = text[scheme.end() :] if scheme else text
    if not any(
        rest == prefix or rest.startswith(prefix + "/") for prefix in POST_URL_PREFIXES
    ):
        allowed = ", ".join(POST_URL_PREFIXES)
        return f"URL must point to one of: {allowed}"
    return "URL must have the form https://bsky.app/profile/<handle>/post/<id>"


def parse_post_url(text: str) -> PostURL:
    """Split a Bluesky web post URL into ``(author, rkey)``.

    The author may be a handle or a DID. Raises ``URLError`` for anything
    that is not a complete post URL on one of the known web hosts.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise URLError("Please enter a post URL")
    match = _POST_URL_RE.match(cleaned)
    if not match:
        raise URLError(_explain_post_url_failure(cleaned))
    return PostURL(author=match.group("author"), rkey=match.group("rkey"))


def parse_resource_uri(uri: str) -> PostAddress:
    match = _AT_URI_RE.match(uri.strip())
    if not match or not match.group("collection") or not match.group("rkey"):
        raise ValueError(f"Not a record URI: {uri}")
    return PostAddress(
        authority=match.group("authority"),
        collection=match.group("collection"),
        rkey=match.group("rkey"),
    )


def build_resource_uri(did: str, collection: str, rkey: str) -> str:
    if not is_did(did):
        raise ValueError(f"Record URIs must use a DID authority, got: {did}")
    return PostAddress(authority=did, collection=collection, rkey=rkey).uri


def post_url(author: str, rkey: str) -> str:
    return f"https://{CANONICAL_WEB_HOST}/profile/{author}/post/{rkey}"

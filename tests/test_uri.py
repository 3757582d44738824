from __future__ import annotations

import pytest

from skythread.uri import (
    POST_COLLECTION,
    PostAddress,
    URLError,
    build_resource_uri,
    is_at_uri,
    parse_post_url,
    parse_resource_uri,
    post_url,
)


def test_parse_post_url_accepts_canonical_host() -> None:
    parsed = parse_post_url("https://bsky.app/profile/alice.test/post/abc123")

    assert tuple(parsed) == ("alice.test", "abc123")
    assert parsed.author == "alice.test"
    assert parsed.rkey == "abc123"


@pytest.mark.parametrize(
    "url",
    [
        "https://bsky.app/profile/alice.test/post/abc123  ",
        "  https://bsky.app/profile/alice.test/post/abc123\n",
        "bsky.app/profile/alice.test/post/abc123",
        "https://staging.bsky.app/profile/alice.test/post/abc123",
        "https://main.bsky.dev/profile/alice.test/post/abc123",
        "https://bsky.app/profile/alice.test/post/abc123/",
    ],
)
def test_parse_post_url_tolerates_known_variants(url: str) -> None:
    assert tuple(parse_post_url(url)) == ("alice.test", "abc123")


def test_parse_post_url_keeps_did_author() -> None:
    parsed = parse_post_url("https://bsky.app/profile/did:plc:xyz/post/3kabc")

    assert parsed.author == "did:plc:xyz"


def test_parse_post_url_rejects_missing_post_segment() -> None:
    with pytest.raises(URLError):
        parse_post_url("https://bsky.app/profile/alice.test/abc123")


def test_parse_post_url_rejects_unknown_host() -> None:
    with pytest.raises(URLError, match="must point to"):
        parse_post_url("https://example.com/profile/alice/post/abc")


def test_parse_post_url_rejects_lookalike_host() -> None:
    with pytest.raises(URLError):
        parse_post_url("https://bsky.app.example.com/profile/alice/post/abc")


def test_parse_post_url_rejects_plain_http() -> None:
    with pytest.raises(URLError, match="https://"):
        parse_post_url("http://bsky.app/profile/alice.test/post/abc123")


@pytest.mark.parametrize(
    "url",
    [
        "",
        "   ",
        "https://bsky.app/profile/alice.test",
        "https://bsky.app/profile/alice.test/post/",
        "https://bsky.app/profile/alice.test/post/abc123/extra",
        "https://bsky.app/profile/alice.test/post/abc123?x=1",
        "see https://bsky.app/profile/alice.test/post/abc123",
    ],
)
def test_parse_post_url_requires_full_match(url: str) -> None:
    with pytest.raises(URLError):
        parse_post_url(url)


def test_url_error_is_a_value_error() -> None:
    assert issubclass(URLError, ValueError)


def test_parse_resource_uri_splits_segments() -> None:
    address = parse_resource_uri("at://did:plc:xyz/app.bsky.feed.post/3kabc")

    assert address == PostAddress("did:plc:xyz", POST_COLLECTION, "3kabc")
    assert tuple(address) == ("did:plc:xyz", POST_COLLECTION, "3kabc")


def test_parse_resource_uri_accepts_handle_authority() -> None:
    address = parse_resource_uri("at://alice.test/app.bsky.feed.post/3kabc")

    assert address.authority == "alice.test"


def test_parse_resource_uri_requires_record_key() -> None:
    with pytest.raises(ValueError):
        parse_resource_uri("at://did:plc:xyz/app.bsky.feed.post")


def test_build_resource_uri_round_trips() -> None:
    uri = build_resource_uri("did:plc:xyz", POST_COLLECTION, "3kabc")

    assert uri == "at://did:plc:xyz/app.bsky.feed.post/3kabc"
    assert parse_resource_uri(uri).uri == uri


def test_build_resource_uri_refuses_handles() -> None:
    with pytest.raises(ValueError):
        build_resource_uri("alice.test", POST_COLLECTION, "3kabc")


def test_is_at_uri() -> None:
    assert is_at_uri("at://did:plc:xyz/app.bsky.feed.post/3kabc")
    assert not is_at_uri("https://bsky.app/profile/alice.test/post/abc123")


def test_post_url_is_accepted_by_parser() -> None:
    url = post_url("alice.test", "abc123")

    assert url == "https://bsky.app/profile/alice.test/post/abc123"
    assert tuple(parse_post_url(url)) == ("alice.test", "abc123")

import asyncio
import json

import click
import httpx

from .client import APIClient, APIError
from .runtime import set_verbose_logging
from .settings import build_settings
from .thread import ThreadLoader, thread_posts
from .uri import URLError


def _run(ctx: click.Context, operation):
    """Run ``operation(loader)`` on a fresh event loop with a scoped client."""
    settings = build_settings(ctx.obj["overrides"])

    async def _main():
        async with APIClient(settings) as client:
            loader = ThreadLoader.from_settings(settings, client=client)
            return await operation(loader)

    try:
        return asyncio.run(_main())
    except (URLError, APIError, ValueError, httpx.HTTPError) as exc:
        raise click.ClickException(str(exc)) from exc


def _dump(payload) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _render_outline(thread_json) -> str:
    stats = thread_posts(thread_json.get("thread") if thread_json else None)
    lines: list[str] = []
    for entry in stats.entries:
        author = entry.post.get("author") or {}
        record = entry.post.get("record") or {}
        handle = author.get("handle") or author.get("did") or "?"
        text = " ".join(str(record.get("text") or "").split())
        indent = "  " * max(entry.depth, 0)
        marker = "^" if entry.relation == "parent" else "-"
        lines.append(f"{indent}{marker} @{handle}: {text}")
    if stats.blocked:
        lines.append(f"({stats.blocked} blocked)")
    if stats.not_found:
        lines.append(f"({stats.not_found} not found)")
    return "\n".join(lines)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Log requests to stderr.")
@click.option("--host", default=None, help="XRPC host (default: public AppView).")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the persistent handle cache.",
)
@click.pass_context
def cli(ctx, verbose, host, cache_dir):
    """
    Skythread - load Bluesky post threads
    """
    ctx.ensure_object(dict)
    if verbose:
        set_verbose_logging(True)
    overrides = {}
    if host:
        overrides["api_host"] = host
    if cache_dir:
        overrides["cache_dir"] = cache_dir
    ctx.obj["overrides"] = overrides


@cli.result_callback()
def print_output(output, *args, **kwargs):
    if output:
        click.echo(output)


@cli.command("thread")
@click.argument("query")
@click.argument("post_id", required=False)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["json", "outline"]),
    default="json",
    show_default=True,
)
@click.pass_context
def thread_cmd(ctx, query, post_id, fmt):
    """
    Load a thread by post URL, at:// URI, or AUTHOR POST_ID.
    """

    async def operation(loader: ThreadLoader):
        if post_id:
            return await loader.load_thread_by_id(query, post_id)
        return await loader.load_thread(query)

    thread_json = _run(ctx, operation)
    if fmt == "outline":
        return _render_outline(thread_json)
    return _dump(thread_json)


@cli.command("resolve")
@click.argument("handle")
@click.pass_context
def resolve_cmd(ctx, handle):
    """
    Resolve a handle to its DID (cached across runs).
    """
    return _run(ctx, lambda loader: loader.resolve_actor(handle))


@cli.command("profile")
@click.argument("actor")
@click.pass_context
def profile_cmd(ctx, actor):
    """
    Fetch an actor profile by handle or DID.
    """
    return _dump(_run(ctx, lambda loader: loader.fetch_profile(actor)))


@cli.command("post")
@click.argument("uri")
@click.pass_context
def post_cmd(ctx, uri):
    """
    Fetch a post record together with its author's profile.
    """
    composed = _run(ctx, lambda loader: loader.load_raw_post_with_author(uri))
    return _dump({"record": composed.record, "author": composed.author})


def main():
    cli()


if __name__ == "__main__":
    main()

"""Typer application and CLI entry point for fetchcache.

The CLI is a thin caller over :class:`~fetchcache.client.CachingFetcher`
and :class:`~fetchcache.cache.KeyedFileCache`:

* ``fetchcache get URL`` -- fetch a URL through the cache.
* ``fetchcache clear URL`` -- drop the cached entry for a URL.
* ``fetchcache path URL`` -- show where a URL's entry lives on disk.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. A failed fetch is converted to the matching
:class:`~fetchcache.exceptions.FetchcacheError` subclass and the command
exits with that error's ``exit_code``.

See Also:
    :mod:`fetchcache.config`: Configuration resolution used by every command.
    :mod:`fetchcache.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import TYPE_CHECKING, Any, Optional

import typer

from fetchcache import __version__
from fetchcache.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from fetchcache.cache import KeyedFileCache


app = typer.Typer(
    name="fetchcache",
    help="Fetch HTTP resources through a local, time-limited disk cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"fetchcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print result metadata as JSON instead of the body."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    cache_dir: Optional[str] = typer.Option(
        None, "--cache-dir", help="Cache directory (default: system temp directory)."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~fetchcache.output.OutputManager` and
    logging from CLI flags, and stores shared options in ``ctx.obj``.
    """
    from fetchcache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.JSON if json_output else OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        logging.basicConfig(
            level=logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logging.getLogger("fetchcache").setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["cache_dir"] = cache_dir


@app.command("get")
def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Absolute http(s) URL to fetch."),
    text: bool = typer.Option(
        True, "--text/--bytes", help="Decode the body as text, or keep raw bytes."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Skip the cache for both lookup and store."
    ),
    ttl: Optional[int] = typer.Option(
        None, "--ttl", min=0, help="Cache entry lifespan in seconds."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.001, help="Request timeout in seconds."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write the body to this file."
    ),
) -> None:
    """Fetch URL, serving it from the cache while the entry is fresh."""
    from fetchcache.config import build_fetcher, resolve_config
    from fetchcache.exceptions import FetchcacheError, error_for_result
    from fetchcache.output import get_output

    output = get_output()
    try:
        config = resolve_config(
            cli_ttl=ttl, cli_timeout=timeout, cli_cache_dir=ctx.obj["cache_dir"]
        )
        with build_fetcher(config) as fetcher:
            if text:
                result = fetcher.fetch_text(url, use_cache=not no_cache)
            else:
                result = fetcher.fetch_bytes(url, use_cache=not no_cache)
        if not result:
            raise error_for_result(result)
    except FetchcacheError as exc:
        output.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    source = "cache" if result.from_cache else f"HTTP {result.status_code}"
    output.debug(f"{result.url} -> {result.resolved_url} ({source}, {result.elapsed_ms} ms)")

    if ctx.obj["json"]:
        output.show_metadata(result.summary())
        return

    output.show_body(result, destination=output_file)
    output.info(f"{result.size} bytes from {source} in {result.elapsed_ms} ms")


@app.command("clear")
def clear_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL whose cached entry should be removed."),
) -> None:
    """Remove the cached entry for URL."""
    from fetchcache.output import get_output

    cache, key = _cache_for(ctx, url)
    cache.clear(key)
    get_output().success(f"Cleared cache entry for {key}")


@app.command("path")
def path_command(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL to locate in the cache."),
) -> None:
    """Print the cache file path for URL and whether it holds a fresh entry."""
    from fetchcache.output import get_output

    cache, key = _cache_for(ctx, url)
    output = get_output()
    path = str(cache.path_for(key))
    fresh = cache.contains(key)
    if ctx.obj["json"]:
        output.show_metadata({"url": key, "path": path, "cached": fresh})
        return
    output.print_line(path)
    output.info("fresh entry" if fresh else "no fresh entry")


def _cache_for(ctx: typer.Context, url: str) -> tuple[KeyedFileCache, str]:
    """Resolve the configured cache and the normalised cache key for *url*."""
    from fetchcache.client import CachingFetcher
    from fetchcache.config import build_cache, resolve_config
    from fetchcache.exceptions import FetchcacheError, InvalidUsageError
    from fetchcache.output import get_output

    try:
        if not CachingFetcher.is_valid_url(url):
            raise InvalidUsageError(
                f"Invalid URL '{url}': only absolute http(s) URLs are supported."
            )
        config = resolve_config(cli_cache_dir=ctx.obj["cache_dir"])
    except FetchcacheError as exc:
        get_output().error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    return build_cache(config), CachingFetcher.cache_key(url)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``fetchcache`` console script.

    Unhandled :class:`~fetchcache.exceptions.FetchcacheError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    are reported and exit with
    :data:`~fetchcache.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from fetchcache.exceptions import FetchcacheError
        from fetchcache.output import get_output

        if isinstance(exc, FetchcacheError):
            get_output().error(str(exc))
            sys.exit(exc.exit_code)
        get_output().error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)

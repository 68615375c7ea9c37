"""Typer-based CLI that resolves, downloads, and serves a CI artifact."""

from __future__ import annotations

import logging

import click
import typer
from pydantic import ValidationError

from gh_serve.cache import DownloadCache
from gh_serve.errors import GhServeError, SelectionAbortedError
from gh_serve.gh import GhClient
from gh_serve.models import ServeConfig
from gh_serve.pipeline import resolve_preview
from gh_serve.repo_context import cache_root_for, get_git_root
from gh_serve.server import open_browser, serve_directory

app = typer.Typer(add_completion=False, help="gh-serve: preview the CI artifact built for the current branch")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def prompt_choice(descriptors: list[str]) -> int:
    """Ask the operator to pick one descriptor; returns its zero-based index."""
    typer.echo("Choose an artifact:")
    for number, descriptor in enumerate(descriptors, start=1):
        typer.echo(f"  {number}) {descriptor}")
    try:
        answer = typer.prompt("Artifact number", type=click.IntRange(1, len(descriptors)))
    except click.exceptions.Abort as exc:
        raise SelectionAbortedError("Artifact selection cancelled") from exc
    return answer - 1


def _list_cache(client: GhClient) -> None:
    cache = DownloadCache(cache_root_for(get_git_root(client)), client)
    entries = cache.cached_artifacts()
    if not entries:
        typer.echo(f"No cached artifacts in {cache.root}")
        return
    for run_id, name in entries:
        typer.echo(f"{run_id}/{name}  {cache.root / str(run_id) / name}")


@app.command()
def serve(
    port: str = typer.Option("8080", "--port", envvar="GH_SERVE_PORT", help="Port to serve on"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Don't open browser"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Don't use artifact cache"),
    list_cache: bool = typer.Option(False, "--list-cache", help="List cached artifacts and exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every gh/git call"),
) -> None:
    """Download the artifact for the current branch or PR and serve it over HTTP."""
    _configure_logging(verbose)
    client = GhClient()

    try:
        if list_cache:
            _list_cache(client)
            return

        try:
            config = ServeConfig(port=port, no_browser=no_browser, no_cache=no_cache)
        except ValidationError as exc:
            raise typer.BadParameter(f"Invalid port: {port}", param_hint="--port") from exc
        preview = resolve_preview(config, client, chooser=prompt_choice, progress_callback=typer.echo)

        typer.echo(preview.url)
        if not config.no_browser:
            open_browser(preview.url)
        typer.echo(f"Serving {preview.directory} on HTTP port: {config.port}")
        try:
            serve_directory(preview.directory, config.port)
        except KeyboardInterrupt:
            typer.echo("")
    except GhServeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()

"""End-to-end artifact resolution: working tree to a served directory."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from gh_serve.cache import DownloadCache
from gh_serve.commits import describe_commit, resolve_commit_target
from gh_serve.gh import GhClient
from gh_serve.models import Artifact, CommitTarget, ServeConfig
from gh_serve.repo_context import resolve_repository_context
from gh_serve.runs import list_runs
from gh_serve.selector import Chooser, collect_artifacts, describe_artifact, select_artifact
from gh_serve.server import find_index_file, preview_url

TOTAL_STEPS = 5


class Preview(BaseModel):
    """Everything the server bootstrap needs once resolution is done."""

    model_config = ConfigDict(frozen=True)

    target: CommitTarget
    artifact: Artifact
    directory: Path
    index_file: str
    url: str


def resolve_preview(
    config: ServeConfig,
    client: GhClient,
    chooser: Chooser,
    progress_callback: Callable[[str], None] | None = None,
) -> Preview:
    """Run every resolution stage in order and return the preview location.

    Each stage fails fast with a ``GhServeError``; only per-run artifact
    listing failures are absorbed.
    """

    def report(message: str) -> None:
        if progress_callback:
            progress_callback(message)

    context = resolve_repository_context(client)
    report(f"[1/{TOTAL_STEPS}] Repository {context.name_with_owner}")

    target = resolve_commit_target(client, context.name_with_owner)
    report(f"[2/{TOTAL_STEPS}] Resolved commit")
    report(describe_commit(client, context.name_with_owner, target))

    runs = list_runs(client, target)
    report(f"[3/{TOTAL_STEPS}] Found {len(runs)} workflow run(s)")

    candidates = collect_artifacts(client, context.name_with_owner, runs)
    artifact = select_artifact(candidates, target, chooser)
    report(f"[4/{TOTAL_STEPS}] Artifact: {artifact.name} - {describe_artifact(artifact)}")

    cache = DownloadCache(context.cache_root, client)
    directory = cache.ensure(artifact, no_cache=config.no_cache)
    report(f"[5/{TOTAL_STEPS}] Downloaded to {directory}")

    index_file = find_index_file(directory)
    return Preview(
        target=target,
        artifact=artifact,
        directory=directory,
        index_file=index_file,
        url=preview_url(config.port, index_file, host=config.host),
    )

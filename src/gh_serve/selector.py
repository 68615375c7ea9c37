"""Artifact aggregation across runs and single-artifact selection."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from gh_serve.errors import NotFoundError, QueryError, SelectionAbortedError
from gh_serve.gh import GhClient
from gh_serve.models import Artifact, CommitTarget, WorkflowRun

logger = logging.getLogger(__name__)

SIZE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB", "EB")

# Receives one descriptor per candidate and returns the chosen index.
Chooser = Callable[[list[str]], int]


def human_bytes(size: int) -> str:
    """Format a byte count with SI units, e.g. ``82 B``, ``1.2 kB``, ``15 MB``."""
    if size < 10:
        return f"{size} B"
    value = float(size)
    unit = 0
    while value >= 1000 and unit < len(SIZE_UNITS) - 1:
        value /= 1000
        unit += 1
    value = int(value * 10 + 0.5) / 10
    if value >= 10:
        return f"{value:.0f} {SIZE_UNITS[unit]}"
    return f"{value:.1f} {SIZE_UNITS[unit]}"


def status_label(run: WorkflowRun) -> str:
    if run.status == "completed":
        if run.conclusion == "success":
            return f"✅ {run.conclusion}"
        return f"❌ {run.conclusion}"
    return f"🟡 {run.status.replace('_', ' ')}"


def describe_artifact(artifact: Artifact) -> str:
    """One-line summary of the run that produced ``artifact``."""
    run = artifact.run
    return (
        f"{run.name} [{run.event}] ({status_label(run)}) "
        f"[{human_bytes(artifact.size_in_bytes)}] {run.url}"
    )


def fetch_artifacts(client: GhClient, name_with_owner: str, run: WorkflowRun) -> list[Artifact]:
    """List the non-expired artifacts uploaded by ``run``."""
    payload = client.gh_json(["api", f"repos/{name_with_owner}/actions/runs/{run.run_id}/artifacts"])
    try:
        items = payload.get("artifacts") or []
        artifacts = [
            Artifact(
                name=item["name"],
                size_in_bytes=item.get("size_in_bytes") or 0,
                expired=bool(item.get("expired")),
                run_id=(item.get("workflow_run") or {}).get("id") or run.run_id,
                run=run,
            )
            for item in items
        ]
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        raise QueryError(f"Malformed artifact list for run {run.run_id}: {exc}") from exc
    return [artifact for artifact in artifacts if not artifact.expired]


def collect_artifacts(client: GhClient, name_with_owner: str, runs: list[WorkflowRun]) -> list[Artifact]:
    """Aggregate artifacts over ``runs`` in order; a failing run contributes none."""
    candidates: list[Artifact] = []
    for run in runs:
        try:
            candidates.extend(fetch_artifacts(client, name_with_owner, run))
        except QueryError as exc:
            logger.debug("skipping artifacts of run %s: %s", run.run_id, exc)
    return candidates


def select_artifact(candidates: list[Artifact], target: CommitTarget, chooser: Chooser) -> Artifact:
    """Resolve the candidates to one artifact, asking ``chooser`` only when ambiguous."""
    if not candidates:
        raise NotFoundError(target.branch, target.sha)
    if len(candidates) == 1:
        return candidates[0]

    descriptors = [f"{artifact.name} - {describe_artifact(artifact)}" for artifact in candidates]
    index = chooser(descriptors)
    if not 0 <= index < len(candidates):
        raise SelectionAbortedError(f"Invalid artifact selection: {index}")
    return candidates[index]

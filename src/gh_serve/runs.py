"""Workflow run lookup and event filtering for a resolved commit."""

from __future__ import annotations

from pydantic import ValidationError

from gh_serve.errors import QueryError
from gh_serve.gh import GhClient
from gh_serve.models import CommitTarget, WorkflowRun

RUN_FIELDS = "conclusion,name,status,url,databaseId,headSha,event"
PULL_REQUEST_EVENT = "pull_request"


def filter_runs(runs: list[WorkflowRun], sha: str, is_pull_request: bool) -> list[WorkflowRun]:
    """Keep the runs for ``sha`` that belong to the caller's context.

    A PR context prefers ``pull_request`` runs but falls back to every run for
    the sha when there are none. A plain branch drops ``pull_request`` runs,
    which would duplicate the push runs of the same commit.
    """
    matching = [run for run in runs if run.head_sha == sha]
    if is_pull_request:
        pr_runs = [run for run in matching if run.event == PULL_REQUEST_EVENT]
        return pr_runs or matching
    return [run for run in matching if run.event != PULL_REQUEST_EVENT]


def list_runs(client: GhClient, target: CommitTarget) -> list[WorkflowRun]:
    """Return the workflow runs for ``target`` in the order ``gh`` lists them."""
    payload = client.gh_json(["run", "list", "-b", target.branch, "--json", RUN_FIELDS])
    if not isinstance(payload, list):
        raise QueryError(f"Expected a list of runs for branch {target.branch}, got {type(payload).__name__}")
    try:
        runs = [WorkflowRun.model_validate(_normalize(item)) for item in payload]
    except (TypeError, AttributeError, ValidationError) as exc:
        raise QueryError(f"Malformed workflow run for branch {target.branch}: {exc}") from exc
    return filter_runs(runs, target.sha, target.is_pull_request)


def _normalize(item: dict) -> dict:
    # gh reports null for fields like conclusion while a run is in progress
    return {key: ("" if value is None else value) for key, value in item.items()}

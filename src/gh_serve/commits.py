"""Resolve the commit to serve artifacts for, and describe it for the banner."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from gh_serve.errors import QueryError, ResolutionError
from gh_serve.gh import GhClient
from gh_serve.models import BranchTarget, CommitInfo, CommitTarget, PullRequestInfo, PullRequestTarget

logger = logging.getLogger(__name__)


def find_open_pull_request(client: GhClient) -> PullRequestTarget | None:
    """Return the latest commit of the current branch's open PR, if any.

    ``gh pr view`` exits non-zero when the branch has no pull request, so a
    failed lookup means "no PR" rather than an error.
    """
    try:
        data = client.gh_json(["pr", "view", "--json", "commits,headRefName,closed"])
    except QueryError as exc:
        logger.debug("no pull request for current branch: %s", exc)
        return None

    if not isinstance(data, dict) or data.get("closed"):
        return None
    commits = data.get("commits") or []
    branch = data.get("headRefName") or ""
    if not commits or not branch:
        return None
    sha = (commits[-1] or {}).get("oid") or ""
    if not sha:
        return None
    return PullRequestTarget(branch=branch, sha=sha)


def get_current_branch(client: GhClient) -> str:
    branch = client.git(["branch", "--show-current"]).strip()
    if not branch:
        raise ResolutionError("Not on a branch (detached HEAD?)")
    return branch


def get_branch_head(client: GhClient, name_with_owner: str, branch: str) -> str:
    """Return the sha at the head of ``branch`` on the GitHub remote."""
    # TODO: the remote branch with the same name is not guaranteed to track the local one.
    sha = client.gh(["api", f"repos/{name_with_owner}/branches/{branch}", "-q", ".commit.sha"]).strip()
    if not sha:
        raise ResolutionError(f"Unable to find the head commit of branch {branch} on {name_with_owner}")
    return sha


def resolve_commit_target(client: GhClient, name_with_owner: str) -> CommitTarget:
    """Pick the commit to look up runs for; an open PR wins over the plain branch."""
    pull_request = find_open_pull_request(client)
    if pull_request is not None:
        return pull_request

    branch = get_current_branch(client)
    return BranchTarget(branch=branch, sha=get_branch_head(client, name_with_owner, branch))


def get_pull_request_info(client: GhClient) -> PullRequestInfo:
    data = client.gh_json(["pr", "view", "--json", "url,author,title,number"])
    try:
        return PullRequestInfo(
            number=data["number"],
            title=data["title"],
            author=(data.get("author") or {}).get("login", ""),
            url=data["url"],
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        raise QueryError(f"Unexpected pull request payload: {exc}") from exc


def get_commit_info(client: GhClient, name_with_owner: str, sha: str) -> CommitInfo:
    data: Any = client.gh_json(["api", f"repos/{name_with_owner}/commits/{sha}"])
    try:
        commit = data["commit"]
        message = (commit.get("message") or "").split("\n")[0]
        return CommitInfo(
            message=message,
            author=commit["author"]["name"],
            date=format_commit_date(commit["author"]["date"]),
            url=data["html_url"],
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as exc:
        raise QueryError(f"Unexpected commit payload for {sha}: {exc}") from exc


def format_commit_date(value: str) -> str:
    """Format an ISO-8601 timestamp like ``git log`` does, e.g. ``Mon Jan 2 15:04:05 2006 +0000``."""
    try:
        stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise QueryError(f"Invalid commit date: {value}") from exc
    return f"{stamp:%a %b} {stamp.day} {stamp:%H:%M:%S %Y %z}"


def describe_commit(client: GhClient, name_with_owner: str, target: CommitTarget) -> str:
    """Build the multi-line banner shown before artifact selection."""
    lines = [f"Serving artifact for branch `{target.branch}` ({target.sha})"]

    if target.is_pull_request:
        pr = get_pull_request_info(client)
        lines.append(f"PR: {pr.title} #{pr.number} by {pr.author} ({pr.url})")

    info = get_commit_info(client, name_with_owner, target.sha)
    lines.append(f"Commit: {info.message} by {info.author} on {info.date} ({info.url})")
    return "\n".join(lines)

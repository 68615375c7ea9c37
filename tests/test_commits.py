from __future__ import annotations

import pytest

from gh_serve.commits import describe_commit, format_commit_date, resolve_commit_target
from gh_serve.errors import QueryError, ResolutionError
from gh_serve.models import BranchTarget, PullRequestTarget

PR_ARGS = ("pr", "view", "--json", "commits,headRefName,closed")
PR_INFO_ARGS = ("pr", "view", "--json", "url,author,title,number")
BRANCH_ARGS = ("branch", "--show-current")


def _branch_head_args(branch: str) -> tuple[str, ...]:
    return ("api", f"repos/octo/site/branches/{branch}", "-q", ".commit.sha")


def test_resolve_commit_target_given_open_pull_request_when_resolved_then_latest_pr_commit_wins(make_client) -> None:
    # Given
    client = make_client(
        gh={
            PR_ARGS: {"closed": False, "headRefName": "feature-x", "commits": [{"oid": "000aaa"}, {"oid": "abc123"}]},
            _branch_head_args("local-name"): "fff999",
        },
        git={BRANCH_ARGS: "local-name\n"},
    )

    # When
    target = resolve_commit_target(client, "octo/site")

    # Then
    assert target == PullRequestTarget(branch="feature-x", sha="abc123")
    assert ["git", "branch", "--show-current"] not in client.calls


def test_resolve_commit_target_given_no_pull_request_when_resolved_then_remote_branch_head_is_used(make_client) -> None:
    # Given
    client = make_client(
        gh={PR_ARGS: QueryError("no pull requests found for branch \"main\""), _branch_head_args("main"): "def456\n"},
        git={BRANCH_ARGS: "main\n"},
    )

    # When
    target = resolve_commit_target(client, "octo/site")

    # Then
    assert target == BranchTarget(branch="main", sha="def456")
    assert target.is_pull_request is False


def test_resolve_commit_target_given_closed_pull_request_when_resolved_then_branch_lookup_is_used(make_client) -> None:
    # Given
    client = make_client(
        gh={
            PR_ARGS: {"closed": True, "headRefName": "feature-x", "commits": [{"oid": "abc123"}]},
            _branch_head_args("feature-x"): "bbb222",
        },
        git={BRANCH_ARGS: "feature-x"},
    )

    # When
    target = resolve_commit_target(client, "octo/site")

    # Then
    assert isinstance(target, BranchTarget)
    assert target.sha == "bbb222"


def test_resolve_commit_target_given_detached_head_when_resolved_then_resolution_error_is_raised(make_client) -> None:
    # Given
    client = make_client(git={BRANCH_ARGS: "\n"})

    # When
    with pytest.raises(ResolutionError, match="detached HEAD"):
        resolve_commit_target(client, "octo/site")

    # Then
    # No remote lookup happens without a branch name.


def test_resolve_commit_target_given_missing_remote_branch_when_resolved_then_query_error_propagates(
    make_client,
) -> None:
    # Given
    client = make_client(
        gh={_branch_head_args("local-only"): QueryError("HTTP 404: Branch not found")},
        git={BRANCH_ARGS: "local-only"},
    )

    # When
    with pytest.raises(QueryError, match="Branch not found"):
        resolve_commit_target(client, "octo/site")

    # Then
    # The failure is fatal; no retry is attempted.
    assert client.calls.count(["gh", *_branch_head_args("local-only")]) == 1


def test_format_commit_date_given_utc_timestamp_when_formatted_then_git_style_is_returned() -> None:
    # Given
    value = "2026-01-02T03:04:05Z"

    # When
    formatted = format_commit_date(value)

    # Then
    assert formatted == "Fri Jan 2 03:04:05 2026 +0000"


def test_format_commit_date_given_garbage_when_formatted_then_query_error_is_raised() -> None:
    # Given / When / Then
    with pytest.raises(QueryError, match="Invalid commit date"):
        format_commit_date("yesterday")


def test_describe_commit_given_pull_request_target_when_described_then_pr_and_commit_lines_are_included(
    make_client,
    commit_payload,
) -> None:
    # Given
    client = make_client(
        gh={
            PR_INFO_ARGS: {
                "number": 7,
                "title": "Docs preview",
                "author": {"login": "alice"},
                "url": "https://github.com/octo/site/pull/7",
            },
            ("api", "repos/octo/site/commits/abc123"): commit_payload,
        }
    )
    target = PullRequestTarget(branch="feature-x", sha="abc123")

    # When
    banner = describe_commit(client, "octo/site", target)

    # Then
    assert banner.splitlines() == [
        "Serving artifact for branch `feature-x` (abc123)",
        "PR: Docs preview #7 by alice (https://github.com/octo/site/pull/7)",
        "Commit: Add docs preview by Alice on Fri Jan 2 03:04:05 2026 +0000 "
        "(https://github.com/octo/site/commit/abc123)",
    ]


def test_describe_commit_given_branch_target_when_described_then_pr_lookup_is_skipped(
    make_client,
    commit_payload,
) -> None:
    # Given
    client = make_client(gh={("api", "repos/octo/site/commits/def456"): commit_payload})
    target = BranchTarget(branch="main", sha="def456")

    # When
    banner = describe_commit(client, "octo/site", target)

    # Then
    assert len(banner.splitlines()) == 2
    assert not any(call[1:3] == ["pr", "view"] for call in client.calls)


def test_describe_commit_given_unexpected_payload_when_described_then_query_error_is_raised(make_client) -> None:
    # Given
    client = make_client(gh={("api", "repos/octo/site/commits/def456"): {"message": "no commit key"}})

    # When
    with pytest.raises(QueryError, match="Unexpected commit payload"):
        describe_commit(client, "octo/site", BranchTarget(branch="main", sha="def456"))

    # Then
    # Malformed provider output is never printed half-parsed.

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from gh_serve.errors import QueryError
from gh_serve.gh import GhClient
from gh_serve.models import Artifact, WorkflowRun


class FakeGhClient(GhClient):
    """Answers ``gh``/``git`` calls from canned responses keyed by argument tuple.

    Values may be strings, JSON-serializable objects, or exceptions to raise.
    Unknown calls fail like ``gh`` does, with a ``QueryError``.
    """

    def __init__(self, gh: dict[tuple[str, ...], Any] | None = None, git: dict[tuple[str, ...], Any] | None = None):
        super().__init__(cwd=None)
        self.gh_responses = dict(gh or {})
        self.git_responses = dict(git or {})
        self.calls: list[list[str]] = []
        self.downloads: list[tuple[str, str, Path]] = []
        self.download_error: BaseException | None = None

    def gh(self, args: list[str]) -> str:
        self.calls.append(["gh", *args])
        if args[:2] == ["run", "download"]:
            return self._download(args)
        return self._answer(self.gh_responses, "gh", args)

    def git(self, args: list[str]) -> str:
        self.calls.append(["git", *args])
        return self._answer(self.git_responses, "git", args)

    def _answer(self, table: dict[tuple[str, ...], Any], tool: str, args: list[str]) -> str:
        key = tuple(args)
        if key not in table:
            raise QueryError(f"unexpected call: {tool} {' '.join(args)}", command=[tool, *args])
        value = table[key]
        if isinstance(value, Exception):
            raise value
        return value if isinstance(value, str) else json.dumps(value)

    def _download(self, args: list[str]) -> str:
        target = Path(args[args.index("-D") + 1])
        target.mkdir(parents=True, exist_ok=True)
        if self.download_error is not None:
            (target / "partial.bin").write_bytes(b"\x00")
            raise self.download_error
        (target / "index.html").write_text("<h1>preview</h1>", encoding="utf-8")
        self.downloads.append((args[2], args[args.index("-n") + 1], target))
        return ""


@pytest.fixture
def make_client():
    return FakeGhClient


@pytest.fixture
def push_run() -> WorkflowRun:
    return WorkflowRun(
        run_id=21,
        name="CI",
        status="completed",
        conclusion="success",
        url="https://github.com/octo/site/actions/runs/21",
        event="push",
        head_sha="def456",
    )


@pytest.fixture
def pr_run() -> WorkflowRun:
    return WorkflowRun(
        run_id=12,
        name="Docs",
        status="in_progress",
        conclusion="",
        url="https://github.com/octo/site/actions/runs/12",
        event="pull_request",
        head_sha="abc123",
    )


@pytest.fixture
def artifact_model(push_run) -> Artifact:
    return Artifact(name="site", size_in_bytes=2048, expired=False, run_id=push_run.run_id, run=push_run)


@pytest.fixture
def commit_payload() -> dict[str, object]:
    return {
        "commit": {
            "message": "Add docs preview\n\nLonger body",
            "author": {"name": "Alice", "date": "2026-01-02T03:04:05Z"},
        },
        "html_url": "https://github.com/octo/site/commit/abc123",
    }

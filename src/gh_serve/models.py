"""Pydantic models passed between the resolution pipeline stages."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ServeConfig(_Frozen):
    """Flags for one invocation, captured once by the CLI."""

    port: str = "8080"
    host: str = "localhost"
    no_browser: bool = False
    no_cache: bool = False

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: str) -> str:
        if not value.isdigit() or not 1 <= int(value) <= 65535:
            raise ValueError(f"invalid port: {value!r}")
        return value


class RepositoryContext(_Frozen):
    """Identity of the GitHub repository and where its downloads are cached."""

    name_with_owner: str
    cache_root: Path


class PullRequestTarget(_Frozen):
    """Latest commit of the open pull request for the current branch."""

    kind: Literal["pull_request"] = "pull_request"
    branch: str
    sha: str

    @property
    def is_pull_request(self) -> bool:
        return True


class BranchTarget(_Frozen):
    """Head commit of the remote branch matching the local branch name."""

    kind: Literal["branch"] = "branch"
    branch: str
    sha: str

    @property
    def is_pull_request(self) -> bool:
        return False


CommitTarget = Union[PullRequestTarget, BranchTarget]


class WorkflowRun(_Frozen):
    """A GitHub Actions run as reported by ``gh run list``."""

    run_id: int = Field(alias="databaseId")
    name: str = ""
    status: str = ""
    conclusion: str = ""
    url: str = ""
    event: str = ""
    head_sha: str = Field(alias="headSha")


class Artifact(_Frozen):
    """An uploaded build output, pointing back at the run that produced it."""

    name: str
    size_in_bytes: int = Field(ge=0)
    expired: bool = False
    run_id: int
    run: WorkflowRun


class PullRequestInfo(_Frozen):
    number: int
    title: str
    author: str
    url: str


class CommitInfo(_Frozen):
    message: str
    author: str
    date: str
    url: str

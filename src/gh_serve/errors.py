"""Exception taxonomy for the artifact resolution pipeline."""

from __future__ import annotations

from pathlib import Path


class GhServeError(RuntimeError):
    """Base class for every error the CLI reports to the operator."""


class QueryError(GhServeError):
    """A ``gh``/``git`` call failed or returned output we could not parse."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr


class ResolutionError(GhServeError):
    """No branch or commit could be determined for the working tree."""


class NotFoundError(GhServeError):
    """No non-expired artifact exists for the resolved branch and sha."""

    def __init__(self, branch: str, sha: str) -> None:
        super().__init__(f"No artifacts found for branch {branch} and sha {sha}")
        self.branch = branch
        self.sha = sha


class SelectionAbortedError(GhServeError):
    """The operator cancelled the artifact selection prompt."""


class CacheError(GhServeError):
    """A filesystem operation on the download cache failed."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class ServerError(GhServeError):
    """The preview server could not bind or the browser could not be opened."""

"""Repository identity and cache root resolution for the current working tree."""

from __future__ import annotations

from pathlib import Path

from gh_serve import TOOL_NAME
from gh_serve.errors import ResolutionError
from gh_serve.gh import GhClient
from gh_serve.models import RepositoryContext


def cache_root_for(git_root: Path) -> Path:
    """Return the download cache directory for a git root."""
    return git_root / ".cache" / TOOL_NAME


def get_git_root(client: GhClient) -> Path:
    root = client.git(["rev-parse", "--show-toplevel"]).strip()
    if not root:
        raise ResolutionError("Unable to determine the git repository root")
    return Path(root)


def get_name_with_owner(client: GhClient) -> str:
    name = client.gh(["repo", "view", "--json", "nameWithOwner", "-q", ".nameWithOwner"]).strip()
    if not name:
        raise ResolutionError("Unable to determine the GitHub repository for this working tree")
    return name


def resolve_repository_context(client: GhClient) -> RepositoryContext:
    """Resolve ``owner/name`` and the cache root once per invocation."""
    git_root = get_git_root(client)
    return RepositoryContext(
        name_with_owner=get_name_with_owner(client),
        cache_root=cache_root_for(git_root),
    )

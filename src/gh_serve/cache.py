"""Local directory cache for downloaded workflow artifacts."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from gh_serve.errors import CacheError
from gh_serve.gh import GhClient
from gh_serve.models import Artifact

logger = logging.getLogger(__name__)


class DownloadCache:
    """Artifact downloads kept under ``root/<run id>/<artifact name>``.

    Entries are never evicted; ``no_cache`` replaces an entry in place.
    """

    def __init__(self, root: Path, client: GhClient):
        self.root = Path(root)
        self.client = client

    def path_for(self, artifact: Artifact) -> Path:
        return self.root / str(artifact.run_id) / artifact.name

    def ensure(self, artifact: Artifact, no_cache: bool = False) -> Path:
        """Return the download directory, fetching the artifact when needed."""
        target = self.path_for(artifact)
        if target.exists():
            if not no_cache:
                logger.debug("cache hit: %s", target)
                return target
            self._remove(target)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheError(f"Unable to create cache directory ({exc.strerror})", target.parent) from exc
        self._download(artifact, target)
        return target

    def cached_artifacts(self) -> list[tuple[int, str]]:
        """List ``(run_id, artifact name)`` for every populated entry."""
        if not self.root.is_dir():
            return []
        entries: list[tuple[int, str]] = []
        for run_dir in sorted(self.root.iterdir()):
            if not run_dir.is_dir() or not run_dir.name.isdigit():
                continue
            for artifact_dir in sorted(run_dir.iterdir()):
                if artifact_dir.is_dir():
                    entries.append((int(run_dir.name), artifact_dir.name))
        return entries

    def _download(self, artifact: Artifact, target: Path) -> None:
        logger.debug("downloading %s from run %s into %s", artifact.name, artifact.run_id, target)
        try:
            self.client.gh(["run", "download", str(artifact.run_id), "-n", artifact.name, "-D", str(target)])
        except BaseException:
            # a failed or interrupted download must not look like a cache hit
            if target.exists():
                self._remove(target)
            raise

    def _remove(self, target: Path) -> None:
        logger.debug("removing cached download %s", target)
        try:
            shutil.rmtree(target)
        except OSError as exc:
            raise CacheError(f"Unable to remove cached download ({exc.strerror})", target) from exc

"""Subprocess adapter for the ``gh`` and ``git`` command line tools."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from gh_serve.errors import QueryError

logger = logging.getLogger(__name__)


def run_cmd(cmd: list[str], cwd: Path | None = None) -> str:
    """Run a command and return stdout, raising ``QueryError`` on failure."""
    logger.debug("running: %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=cwd)
    except FileNotFoundError as exc:
        raise QueryError(f"Command not found: {cmd[0]}", command=cmd) from exc
    if proc.returncode != 0:
        stderr = proc.stderr.strip()
        raise QueryError(f"Command failed ({' '.join(cmd)}): {stderr}", command=cmd, stderr=stderr)
    return proc.stdout


class GhClient:
    """Thin wrapper that runs ``gh``/``git`` inside a working tree."""

    def __init__(self, cwd: Path | None = None):
        self.cwd = cwd

    def gh(self, args: list[str]) -> str:
        return run_cmd(["gh", *args], cwd=self.cwd)

    def git(self, args: list[str]) -> str:
        return run_cmd(["git", *args], cwd=self.cwd)

    def gh_json(self, args: list[str]) -> Any:
        """Run ``gh`` and decode its stdout as JSON."""
        output = self.gh(args)
        try:
            return json.loads(output)
        except json.JSONDecodeError as exc:
            raise QueryError(f"Malformed JSON from gh {' '.join(args)}: {exc}", command=["gh", *args]) from exc

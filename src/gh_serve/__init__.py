"""Serve the GitHub Actions artifact built for the current branch."""

__version__ = "0.1.0"

TOOL_NAME = "gh-serve"

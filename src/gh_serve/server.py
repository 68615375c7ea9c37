"""Index discovery and the static HTTP server for a downloaded artifact."""

from __future__ import annotations

import logging
import webbrowser
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import quote

from gh_serve.errors import CacheError, ServerError

logger = logging.getLogger(__name__)

# Checked in order; each one scans the whole tree before the next is tried.
INDEX_SUFFIXES = ("index.html", "index.htm", ".html", ".htm")


def find_index_file(directory: Path) -> str:
    """Return the POSIX path of the page to open, relative to ``directory``.

    An empty string means the directory root itself should be served.
    """
    directory = Path(directory)
    for suffix in INDEX_SUFFIXES:
        found = _find_file(directory, suffix)
        if found is not None:
            return found.relative_to(directory).as_posix()
    return ""


def _find_file(directory: Path, suffix: str) -> Path | None:
    """Depth-first search for a file name ending in ``suffix``.

    At each level the sorted files are checked before the sorted subdirectories.
    """
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise CacheError(f"Unable to read downloaded artifact ({exc.strerror or exc})", directory) from exc

    for entry in entries:
        if not entry.is_dir() and entry.name.endswith(suffix):
            return entry
    for entry in entries:
        if entry.is_dir():
            found = _find_file(entry, suffix)
            if found is not None:
                return found
    return None


def preview_url(port: str, index_file: str = "", host: str = "localhost") -> str:
    return f"http://{host}:{port}/{quote(index_file)}"


def open_browser(url: str) -> None:
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        raise ServerError(f"Unable to open browser for {url}: {exc}") from exc
    if not opened:
        raise ServerError(f"No browser available to open {url}")


def build_server(directory: Path, port: str) -> ThreadingHTTPServer:
    """Bind a threaded static file server rooted at ``directory``."""
    handler = partial(SimpleHTTPRequestHandler, directory=str(directory))
    try:
        return ThreadingHTTPServer(("", int(port)), handler)
    except (OSError, ValueError) as exc:
        raise ServerError(f"Unable to listen on port {port}: {exc}") from exc


def serve_directory(directory: Path, port: str) -> None:
    """Serve ``directory`` until interrupted."""
    server = build_server(directory, port)
    logger.debug("serving %s on port %s", directory, server.server_address[1])
    with server:
        server.serve_forever()

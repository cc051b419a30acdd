"""Request path → filesystem path resolution."""

import os
import posixpath
from pathlib import Path


def clean_request_path(request_path: str) -> str:
    """Lexically clean a URL path, rooted at ``/``.

    ``..`` segments cannot climb above the leading slash, so the cleaned path
    never refers to anything outside of it.
    """
    cleaned = posixpath.normpath("/" + request_path.replace(os.sep, "/").lstrip("/"))
    # normpath keeps a leading "//" (POSIX allows it), collapse it
    return "/" + cleaned.lstrip("/")


def resolve_path(root: str | Path, request_path: str) -> Path:
    """Join the cleaned request path onto ``root``.

    Never raises; a missing or unreadable target is reported by whatever
    filesystem call is made on the result.
    """
    relative = clean_request_path(request_path).lstrip("/")
    root = Path(root)
    return root / relative if relative else root

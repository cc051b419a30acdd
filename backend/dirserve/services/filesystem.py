"""Filesystem operations behind the file routes.

Every call goes straight to the OS. Errors are raised as ``OSError`` and left
for the caller to turn into a response.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Union

from dirserve.schemas.files import FileMetadata

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
CHUNK_SIZE = 64 * 1024  # 64 KB


@dataclass(frozen=True)
class RegularFile:
    path: Path
    size: int


@dataclass(frozen=True)
class Directory:
    path: Path
    dirs: list[FileMetadata] = field(default_factory=list)
    files: list[FileMetadata] = field(default_factory=list)


Node = Union[RegularFile, Directory]


def _metadata(entry: os.DirEntry) -> FileMetadata:
    # lstat: a symlink is listed as itself, not as its target
    st = entry.stat(follow_symlinks=False)
    is_dir = stat.S_ISDIR(st.st_mode)
    return FileMetadata(
        name=entry.name,
        size=0 if is_dir else st.st_size,
        modified_at=datetime.fromtimestamp(st.st_mtime).strftime(TIME_FORMAT),
        is_directory=is_dir,
    )


def read_directory(path: Path) -> tuple[list[FileMetadata], list[FileMetadata]]:
    """List the immediate children of ``path`` as (dirs, files), sorted by name.

    All or nothing: one unreadable child fails the whole listing.
    """
    dirs: list[FileMetadata] = []
    files: list[FileMetadata] = []
    with os.scandir(path) as it:
        for entry in sorted(it, key=lambda e: e.name):
            meta = _metadata(entry)
            (dirs if meta.is_directory else files).append(meta)
    return dirs, files


def classify(path: Path) -> Node:
    """Resolve ``path`` to a downloadable file or a listed directory.

    Anything that exists and is not a directory counts as a file. Everything
    else is read as a directory, so a missing path raises from the listing.
    """
    try:
        st = path.stat()
    except OSError:
        st = None
    if st is not None and not stat.S_ISDIR(st.st_mode):
        return RegularFile(path=path, size=st.st_size)
    dirs, files = read_directory(path)
    return Directory(path=path, dirs=dirs, files=files)


def save_upload(directory: Path, filename: str, source: BinaryIO) -> int:
    """Write ``source`` to ``directory/filename``, replacing any existing file.

    Returns the number of bytes written.
    """
    target = directory / filename
    source.seek(0)
    with open(target, "wb") as out:
        shutil.copyfileobj(source, out, CHUNK_SIZE)
        written = out.tell()
    logger.info("Saved upload %s (%d bytes)", target, written)
    return written


def delete_entry(path: Path) -> None:
    """Remove a single entry: a file, a symlink or an empty directory."""
    if path.is_dir() and not path.is_symlink():
        os.rmdir(path)
    else:
        os.remove(path)
    logger.info("Deleted %s", path)

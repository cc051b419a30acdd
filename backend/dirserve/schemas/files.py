"""File listing schemas."""

from pydantic import BaseModel


class FileMetadata(BaseModel):
    """One entry of a directory listing."""
    name: str
    size: int = 0  # only meaningful for non-directories
    modified_at: str
    is_directory: bool = False


class DiskUsage(BaseModel):
    """Space figures for the filesystem holding the root directory."""
    total_bytes: int
    used_bytes: int
    total: str
    used: str

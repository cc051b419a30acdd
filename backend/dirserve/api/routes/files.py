"""File routes: list/download, upload and delete under the served root."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path, PurePosixPath

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from dirserve.api.deps import get_app_settings
from dirserve.config import Settings
from dirserve.services.filesystem import RegularFile, classify, delete_entry, save_upload
from dirserve.utils.limits import UploadTooLarge, limit_receive
from dirserve.utils.paths import clean_request_path, resolve_path
from dirserve.utils.storage import get_disk_usage

logger = logging.getLogger(__name__)
router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent.parent / "templates"))

UPLOAD_FIELD = "file"


def _os_error(exc: OSError) -> str:
    # strerror keeps absolute server paths out of the response
    return exc.strerror or exc.__class__.__name__


def _invalid_path(exc: ValueError) -> str:
    # os calls reject paths the OS cannot represent, e.g. an embedded NUL byte
    return f"Invalid path: {exc}"


@router.get("/{path:path}")
def browse(request: Request, path: str, settings: Settings = Depends(get_app_settings)):
    """Download a file, or render the listing of a directory."""
    target = resolve_path(settings.root_dir, path)
    try:
        node = classify(target)
    except ValueError as exc:
        raise HTTPException(400, _invalid_path(exc))
    except OSError as exc:
        logger.warning("Cannot read directory %s: %s", target, exc)
        raise HTTPException(500, f"Error reading directory: {_os_error(exc)}")

    if isinstance(node, RegularFile):
        return FileResponse(node.path, filename=node.path.name)

    try:
        usage = get_disk_usage(settings.root_dir)
    except OSError as exc:
        logger.warning("Cannot query disk usage of %s: %s", settings.root_dir, exc)
        raise HTTPException(500, f"Error reading disk usage: {_os_error(exc)}")

    current = clean_request_path(path)
    parent = posixpath.dirname(current.rstrip("/")) if current != "/" else None
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "path": current,
            "parent": parent,
            "dirs": node.dirs,
            "files": node.files,
            "used_space": usage.used,
            "total_space": usage.total,
            "upload_limit": settings.upload_limit,
        },
    )


@router.post("/{path:path}", response_class=PlainTextResponse)
async def upload(request: Request, path: str, settings: Settings = Depends(get_app_settings)):
    """Store the multipart ``file`` field into the directory at ``path``."""
    if not settings.uploads_enabled:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Uploads are disabled")

    limit = settings.upload_limit
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Failed to upload file: request body too large (limit {limit} bytes)",
        )

    directory = resolve_path(settings.root_dir, path)
    bounded = Request(request.scope, receive=limit_receive(request.receive, limit))
    try:
        form = await bounded.form(max_files=1)
    except UploadTooLarge as exc:
        logger.warning("Upload to %s rejected: %s", directory, exc)
        raise HTTPException(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"Failed to upload file: {exc}")
    except StarletteHTTPException as exc:
        raise HTTPException(exc.status_code, f"Failed to upload file: {exc.detail}")
    except (KeyError, ValueError) as exc:
        # multipart parser errors (bad framing, missing boundary) are ValueErrors
        raise HTTPException(400, f"Failed to upload file: malformed multipart body ({exc})")

    try:
        upload_file = form.get(UPLOAD_FIELD)
        if not isinstance(upload_file, UploadFile):
            raise HTTPException(400, f"Failed to upload file: no '{UPLOAD_FIELD}' field in request")

        # Only the last component of the client-supplied name is used
        filename = PurePosixPath((upload_file.filename or "").replace("\\", "/")).name
        if filename in ("", ".", ".."):
            raise HTTPException(400, "Failed to upload file: missing filename")

        try:
            await run_in_threadpool(save_upload, directory, filename, upload_file.file)
        except ValueError as exc:
            raise HTTPException(400, f"Failed to upload file: {_invalid_path(exc)}")
        except OSError as exc:
            logger.warning("Cannot save upload %s into %s: %s", filename, directory, exc)
            raise HTTPException(500, f"Failed to save file: {_os_error(exc)}")
    finally:
        await form.close()

    return "File uploaded successfully"


@router.delete("/{path:path}", response_class=PlainTextResponse)
def delete(path: str, settings: Settings = Depends(get_app_settings)):
    """Remove the single entry at ``path``."""
    target = resolve_path(settings.root_dir, path)
    if target == Path(settings.root_dir):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Refusing to delete the root directory")

    try:
        delete_entry(target)
    except ValueError as exc:
        raise HTTPException(400, _invalid_path(exc))
    except OSError as exc:
        logger.warning("Cannot delete %s: %s", target, exc)
        raise HTTPException(500, f"Failed to delete file: {_os_error(exc)}")
    return "File deleted successfully"

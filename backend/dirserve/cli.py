"""Command line entry point.

Usage:
    dirserve --root /srv/share --port 8080 --auth alice:secret --upload 0
    python -m dirserve --log requests.log

Flags override DIRSERVE_* environment variables and .env values.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from pydantic import ValidationError

from dirserve.config import DEFAULT_UPLOAD_LIMIT, Settings

# argparse dest -> Settings field
FLAG_FIELDS = {
    "host": "host",
    "port": "port",
    "root": "root_dir",
    "auth": "auth",
    "upload": "upload_limit",
    "log": "log_file",
    "log_level": "log_level",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dirserve",
        description="Serve a directory tree over HTTP: browse, download, upload, delete.",
    )
    parser.add_argument("--port", type=int, help="Port to run the server on (default 8080)")
    parser.add_argument("--host", help="Interface to bind (default 0.0.0.0)")
    parser.add_argument("--root", help="Root directory to serve files from (default current directory)")
    parser.add_argument("--auth", metavar="USER:PASS", help="Enable Basic authentication with username:password")
    parser.add_argument(
        "--upload",
        type=int,
        metavar="BYTES",
        help=f"Upload limit in bytes, 0 disables uploads (default {DEFAULT_UPLOAD_LIMIT})",
    )
    parser.add_argument("--log", metavar="PATH", help="Write a request log to PATH (default disabled)")
    parser.add_argument("--log-level", help="Application log level (default INFO)")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Only flags that were given are passed, the rest come from env/defaults."""
    overrides = {
        field: getattr(args, dest)
        for dest, field in FLAG_FIELDS.items()
        if getattr(args, dest) is not None
    }
    return Settings(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValidationError as exc:
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            print(f"[error] {field}: {error['msg']}", file=sys.stderr)
        return 1

    from dirserve.main import run

    try:
        run(settings)
    except OSError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""dirserve FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dirserve import __version__
from dirserve.api.deps import basic_auth_passes, unauthorized
from dirserve.config import Settings, get_settings

logger = logging.getLogger(__name__)

ACCESS_LOGGER = "dirserve.access"


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    settings: Settings = app.state.settings
    _setup_logging(settings)

    if not Path(settings.root_dir).is_dir():
        logger.warning("Root %s is not a readable directory", settings.root_dir)
    logger.info(
        "dirserve v%s serving %s on %s:%s (auth %s, upload limit %d bytes)",
        __version__,
        settings.root_dir,
        settings.host,
        settings.port,
        "on" if settings.auth_enabled else "off",
        settings.upload_limit,
    )
    try:
        yield
    finally:
        logger.info("dirserve shutting down")


def _setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Multipart parser logs every part at DEBUG
    for noisy in ("multipart", "python_multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _setup_access_log(log_file: str) -> logging.Logger:
    """Route the request log to ``log_file``, truncating it."""
    access_logger = logging.getLogger(ACCESS_LOGGER)
    for handler in list(access_logger.handlers):
        access_logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("[dirserve] %(asctime)s | %(message)s", "%Y/%m/%d - %H:%M:%S"))
    access_logger.addHandler(handler)
    access_logger.setLevel(logging.INFO)
    access_logger.propagate = False
    return access_logger


def _install_error_handlers(app: FastAPI) -> None:
    """Errors go out as plain text, never JSON or tracebacks."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return PlainTextResponse(f"Bad request: {exc.errors()}", status_code=400)


def _install_auth_gate(app: FastAPI, expected: tuple[str, str]) -> None:
    """Require Basic credentials on every request, routed or not."""

    @app.middleware("http")
    async def _require_basic_auth(request: Request, call_next):
        if not await basic_auth_passes(request, expected):
            client = request.client.host if request.client else "-"
            logger.warning("Rejected unauthenticated %s %s from %s", request.method, request.url.path, client)
            return unauthorized()
        return await call_next(request)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory.

    Every route receives ``settings`` through ``app.state``; separate calls give
    fully independent apps.
    """
    from dirserve.api.routes import api_router

    settings = settings or get_settings()

    # No docs/openapi routes: every path belongs to the served tree
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings

    _install_error_handlers(app)

    # Middleware added later wraps earlier ones: the request log sees 401s
    if settings.credentials is not None:
        _install_auth_gate(app, settings.credentials)

    if settings.log_file:
        access_logger = _setup_access_log(settings.log_file)

        @app.middleware("http")
        async def _log_request(request: Request, call_next):
            start = time.perf_counter()
            response = await call_next(request)
            latency_ms = (time.perf_counter() - start) * 1000
            client = request.client.host if request.client else "-"
            access_logger.info(
                "%3d | %10.3fms | %15s | %-7s %s",
                response.status_code,
                latency_ms,
                client,
                request.method,
                request.url.path,
            )
            return response

    app.include_router(api_router)
    return app


def run(settings: Settings | None = None, **kwargs: Any) -> None:
    import uvicorn

    settings = settings or get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()

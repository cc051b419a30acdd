"""Test fixtures — temporary served tree and FastAPI test clients."""

import logging

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dirserve.config import Settings
from dirserve.main import ACCESS_LOGGER, create_app


@pytest.fixture
def root(tmp_path):
    """Served tree with two directories and three files at the top level."""
    srv = tmp_path / "srv"
    srv.mkdir()
    (srv / "docs").mkdir()
    (srv / "music").mkdir()
    (srv / "docs" / "readme.txt").write_text("inside docs")
    (srv / "hello.txt").write_text("hello world")
    (srv / "data.bin").write_bytes(b"\x00" * 1536)
    (srv / "notes.md").write_text("# notes")
    return srv


@pytest.fixture
def make_settings(root):
    """Build Settings for the temp tree, ignoring any local .env file."""

    def _make(**overrides) -> Settings:
        overrides.setdefault("root_dir", str(root))
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def make_client(make_settings):
    """Factory for clients over independent apps: ``async with make_client(auth=...) as c``."""

    def _make(**overrides) -> AsyncClient:
        app = create_app(make_settings(**overrides))
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make


@pytest_asyncio.fixture
async def client(make_client):
    """Client for an app with default settings (no auth, 10 MiB limit)."""
    async with make_client() as c:
        yield c


@pytest.fixture(autouse=True)
def _close_access_log():
    yield
    access_logger = logging.getLogger(ACCESS_LOGGER)
    for handler in list(access_logger.handlers):
        access_logger.removeHandler(handler)
        handler.close()

"""Tests for the Basic auth gate."""

import base64
from unittest.mock import MagicMock

import pytest

from dirserve.api.deps import basic_auth_passes

CHALLENGE = 'Basic realm="Authorization Required"'


@pytest.mark.asyncio
async def test_auth_disabled_allows_anonymous(client):
    resp = await client.get("/")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_correct_credentials_pass(make_client):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.get("/", auth=("alice", "s3cret"))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_password_may_contain_colon(make_client):
    async with make_client(auth="alice:a:b:c") as c:
        resp = await c.get("/hello.txt", auth=("alice", "a:b:c"))
    assert resp.status_code == 200
    assert resp.content == b"hello world"


@pytest.mark.asyncio
async def test_missing_credentials_challenged(make_client):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.get("/")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == CHALLENGE


@pytest.mark.asyncio
@pytest.mark.parametrize("user, password", [("alice", "wrong"), ("bob", "s3cret"), ("", "")])
async def test_wrong_credentials_challenged(make_client, user, password):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.get("/", auth=(user, password))
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == CHALLENGE


@pytest.mark.asyncio
async def test_rejected_delete_never_touches_filesystem(make_client, root):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.delete("/hello.txt", auth=("alice", "nope"))
    assert resp.status_code == 401
    assert (root / "hello.txt").exists()


@pytest.mark.asyncio
async def test_rejected_upload_never_touches_filesystem(make_client, root):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.post("/", files={"file": ("sneaky.txt", b"x")})
    assert resp.status_code == 401
    assert not (root / "sneaky.txt").exists()


@pytest.mark.asyncio
async def test_authenticated_upload(make_client, root):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.post("/", files={"file": ("ok.txt", b"ok")}, auth=("alice", "s3cret"))
    assert resp.status_code == 200
    assert (root / "ok.txt").read_bytes() == b"ok"



@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    [
        "Basic !!!notbase64",
        "Basic " + base64.b64encode(b"justuser").decode(),
        "Bearer some-token",
    ],
)
async def test_auth_disabled_ignores_authorization_header(client, root, header):
    resp = await client.get("/hello.txt", headers={"Authorization": header})
    assert resp.status_code == 200
    assert resp.content == b"hello world"

    resp = await client.delete("/notes.md", headers={"Authorization": header})
    assert resp.status_code == 200
    assert not (root / "notes.md").exists()


@pytest.mark.asyncio
async def test_malformed_header_challenged_when_enabled(make_client):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.get("/", headers={"Authorization": "Basic !!!notbase64"})
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == CHALLENGE


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["PUT", "PATCH", "HEAD", "OPTIONS"])
async def test_unrouted_methods_challenged(make_client, method):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.request(method, "/hello.txt")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == CHALLENGE


@pytest.mark.asyncio
async def test_unrouted_method_with_credentials_reaches_router(make_client):
    async with make_client(auth="alice:s3cret") as c:
        resp = await c.put("/hello.txt", auth=("alice", "s3cret"))
    assert resp.status_code == 405


def _request_with(header: str | None):
    request = MagicMock()
    request.headers = {"Authorization": header} if header else {}
    return request


@pytest.mark.asyncio
async def test_basic_auth_passes_direct():
    good = "Basic " + base64.b64encode(b"alice:s3cret").decode()
    bad = "Basic " + base64.b64encode(b"alice:nope").decode()
    expected = ("alice", "s3cret")

    assert await basic_auth_passes(_request_with(good), expected)
    assert not await basic_auth_passes(_request_with(bad), expected)
    assert not await basic_auth_passes(_request_with(None), expected)
    assert not await basic_auth_passes(_request_with("Basic !!!"), expected)

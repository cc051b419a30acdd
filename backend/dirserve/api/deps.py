"""FastAPI dependency injection — settings & Basic auth gate."""

from __future__ import annotations

import logging
import secrets

from fastapi import HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic

from dirserve.config import Settings

logger = logging.getLogger(__name__)

REALM = "Authorization Required"

basic_scheme = HTTPBasic(realm=REALM, auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


async def basic_auth_passes(request: Request, expected: tuple[str, str]) -> bool:
    """True when the request carries exactly the ``expected`` Basic credentials."""
    try:
        credentials = await basic_scheme(request)
    except HTTPException:
        # undecodable or colon-less Basic header
        return False
    if credentials is None:
        return False

    user_ok = secrets.compare_digest(credentials.username.encode(), expected[0].encode())
    pass_ok = secrets.compare_digest(credentials.password.encode(), expected[1].encode())
    return user_ok and pass_ok


def unauthorized() -> PlainTextResponse:
    return PlainTextResponse(
        "Unauthorized",
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
    )

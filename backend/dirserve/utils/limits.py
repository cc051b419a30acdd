"""Request body size limiting at the ASGI receive level."""

from __future__ import annotations

from starlette.types import Message, Receive


class UploadTooLarge(Exception):
    """Request body exceeded the configured upload limit."""

    def __init__(self, limit: int):
        super().__init__(f"request body too large (limit {limit} bytes)")
        self.limit = limit


def limit_receive(receive: Receive, limit: int) -> Receive:
    """Wrap an ASGI ``receive`` so reading past ``limit`` body bytes raises.

    The error is raised by the read that crosses the limit; nothing beyond it
    is buffered.
    """
    received = 0

    async def _receive() -> Message:
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > limit:
                raise UploadTooLarge(limit)
        return message

    return _receive

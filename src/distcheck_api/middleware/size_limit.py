from __future__ import annotations
from starlette.datastructures import Headers
from starlette.requests import ClientDisconnect, Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..settings import settings


def _too_large() -> JSONResponse:
    return JSONResponse({"detail": "payload too large"}, status_code=413)


class SizeLimitMiddleware:
    """Reject request bodies over `settings.max_request_bytes` with 413.

    The body is read chunk by chunk and rejected as soon as the running total
    passes the limit; chunks under the limit are replayed to the app.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        max_bytes = settings.max_request_bytes
        cl = Headers(scope=scope).get("content-length")
        if cl is not None:
            try:
                if int(cl) > max_bytes:
                    await _too_large()(scope, receive, send)
                    return
            except ValueError:
                pass

        chunks = []
        total = 0
        try:
            async for chunk in Request(scope, receive).stream():
                total += len(chunk)
                if total > max_bytes:
                    await _too_large()(scope, receive, send)
                    return
                chunks.append(chunk)
        except ClientDisconnect:
            return

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

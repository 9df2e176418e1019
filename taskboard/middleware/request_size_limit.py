"""Request body size limit middleware.

Multipart uploads may carry up to `upload_max_bytes` (the attachment limit
plus form overhead); every other request body is capped at `max_bytes`.
Bodies without Content-Length are counted while they are read.
"""

from typing import Callable

from taskboard.middleware._asgi import get_header, send_json_error

MULTIPART_OVERHEAD_BYTES = 64 * 1024


async def _send_413(send: Callable, limit: int, actual: int) -> None:
    await send_json_error(
        send,
        413,
        "PAYLOAD_TOO_LARGE",
        f"Request body must be at most {limit} bytes",
        {"max_bytes": limit, "content_length": actual},
    )


def RequestSizeLimitMiddleware(
    app: Callable, max_bytes: int, upload_max_bytes: int
) -> Callable:
    """Reject request bodies over the limit for their content type. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        content_type = (get_header(scope, "content-type") or "").lower()
        limit = (
            upload_max_bytes + MULTIPART_OVERHEAD_BYTES
            if content_type.startswith("multipart/form-data")
            else max_bytes
        )

        declared = get_header(scope, "content-length")
        if declared is not None and declared.strip().isdigit():
            if int(declared) > limit:
                await _send_413(send, limit, int(declared))
                return
            await app(scope, receive, send)
            return

        received = 0
        rejected = False

        async def counting_receive() -> dict:
            nonlocal received, rejected
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    rejected = True
                    await _send_413(send, limit, received)
                    return {"type": "http.disconnect"}
            return message

        async def guarded_send(message: dict) -> None:
            if not rejected:
                await send(message)

        await app(scope, counting_receive, guarded_send)

    return asgi_app

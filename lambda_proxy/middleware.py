"""
Request logging middleware.

Records the status each request was answered with, turns unexpected
exceptions into a 502 instead of letting them reach the server, and writes
one access log line per request.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from lambda_proxy.core.exceptions import bad_gateway_response
from lambda_proxy.core.request_context import clear_context, generate_request_id, set_trace_id

logger = logging.getLogger("lambda_proxy.access")


class StatusRecorder:
    """
    Wraps an ASGI send callable and remembers the status of the first
    http.response.start message. Messages are passed through unchanged.
    """

    def __init__(self, send: Send):
        self._send = send
        self.status_code = 200
        self.response_started = False

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start" and not self.response_started:
            self.response_started = True
            self.status_code = message["status"]
        await self._send(message)


class RequestLoggerMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        trace_id = set_trace_id(_header(scope, b"x-amzn-trace-id"))
        request_id = generate_request_id()
        recorder = StatusRecorder(send)

        try:
            await self.app(scope, receive, recorder)
        except Exception as exc:
            logger.error(f"Panic: {exc!r}", exc_info=True)
            if not recorder.response_started:
                await bad_gateway_response("Panic")(scope, receive, recorder)
        finally:
            elapsed = time.perf_counter() - start_time
            url = _request_url(scope)
            logger.info(
                "[%s] %d %s %s",
                scope["method"],
                recorder.status_code,
                url,
                _format_duration(elapsed),
                extra={
                    "trace_id": trace_id,
                    "aws_request_id": request_id,
                    "method": scope["method"],
                    "path": scope["path"],
                    "status": recorder.status_code,
                    "latency_ms": round(elapsed * 1000, 2),
                    "user_agent": _header(scope, b"user-agent"),
                    "client_ip": scope["client"][0] if scope.get("client") else None,
                },
            )
            clear_context()


def _header(scope: Scope, name: bytes):
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None


def _request_url(scope: Scope) -> str:
    path = scope.get("raw_path") or scope["path"].encode("utf-8")
    if isinstance(path, bytes):
        path = path.decode("latin-1")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


def _format_duration(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds:.3f}s"

"""
Lambda Proxy Handler - Service Layer

Admits one request at a time and runs it through
request -> event -> Invoke API -> ALB response -> HTTP response.
"""

import logging

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from lambda_proxy.core.concurrency import ConcurrencyGate
from lambda_proxy.core.exceptions import (
    LambdaFunctionError,
    LambdaInvokeError,
    RequestEncodingError,
    ResourceExhaustedError,
    ResponseDecodingError,
    bad_gateway_response,
)
from lambda_proxy.core.payload_builder import PayloadBuilder
from lambda_proxy.core.request_context import get_trace_id
from lambda_proxy.services.lambda_invoker import LambdaInvoker

logger = logging.getLogger("lambda_proxy.processor")


class LambdaProxyHandler:
    """
    ASGI endpoint that forwards every request to one Lambda function.

    The function has a reserved concurrency of one, so the gate's permit is
    held from admission until the response has been sent to the client.
    """

    def __init__(
        self,
        invoker: LambdaInvoker,
        payload_builder: PayloadBuilder,
        gate: ConcurrencyGate,
        function_name: str,
        forwarded_port: int = 8080,
    ):
        self.invoker = invoker
        self.payload_builder = payload_builder
        self.gate = gate
        self.function_name = function_name
        self.forwarded_port = str(forwarded_port)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            admitted = await self.gate.acquire()
        except ResourceExhaustedError as e:
            logger.warning(f"Rejected {scope['method']} {scope['path']}: {e}")
            await bad_gateway_response(str(e))(scope, receive, send)
            return

        if not admitted:
            # Shutting down: the request is abandoned without invoking the function.
            # An ASGI server answers 500 when no response is started, so send a bare 503.
            logger.info(f"Abandoned {scope['method']} {scope['path']}: concurrency gate closed")
            await Response(status_code=503)(scope, receive, send)
            return

        try:
            request = Request(scope, receive)
            self.add_proxy_headers(request)
            response = await self.process(request)
            await response(scope, receive, send)
        finally:
            await self.gate.release()

    def add_proxy_headers(self, request: Request) -> None:
        """Append the headers a load balancer adds to forwarded requests."""
        headers = MutableHeaders(scope=request.scope)
        if request.client and request.client.host:
            headers.append("X-Forwarded-For", request.client.host)
        headers.append("X-Forwarded-Proto", "http")
        headers.append("X-Forwarded-Port", self.forwarded_port)

        trace_id = get_trace_id()
        if trace_id and "x-amzn-trace-id" not in headers:
            headers.append("X-Amzn-Trace-Id", trace_id)

    async def process(self, request: Request) -> Response:
        """Encode, invoke, and decode. Every failure becomes a 502 response."""
        try:
            payload = await self.payload_builder.build_request(request)
        except RequestEncodingError as e:
            logger.warning(f"Invalid request {request.method} {request.url.path}: {e}")
            return bad_gateway_response("Invalid request", e)

        try:
            result = await self.invoker.invoke_function(self.function_name, payload)
        except LambdaInvokeError as e:
            return bad_gateway_response("Failed to invoke Lambda", e)

        if result.is_function_error:
            # The error payload is not forwarded to the client.
            error = LambdaFunctionError(self.function_name, result.function_error)
            logger.warning(
                f"Lambda function error from {error.function_name}: {error}",
                extra={
                    "function_name": error.function_name,
                    "function_error": error.function_error,
                    "lambda_request_id": result.request_id,
                },
            )
            return bad_gateway_response(f"Lambda function error: {error}")

        try:
            decoded = self.payload_builder.build_response(result.payload)
        except ResponseDecodingError as e:
            logger.warning(
                f"Invalid response from {self.function_name}: {e}",
                extra={"snippet": result.payload[:200].decode("utf-8", errors="replace")},
            )
            return bad_gateway_response("Invalid JSON response", e)

        response = Response(content=decoded.body, status_code=decoded.status_code)
        # Values pass through as UTF-8 bytes; Starlette's header API only takes latin-1.
        for name, values in decoded.headers.items():
            raw_name = name.lower().encode("utf-8")
            response.raw_headers.extend((raw_name, value.encode("utf-8")) for value in values)
        return response

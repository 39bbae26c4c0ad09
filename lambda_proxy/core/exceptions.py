"""
Custom exception classes.

Represent errors raised while proxying a request to Lambda, and build the
single error response shape returned to clients.
"""

import logging
from typing import Optional

from starlette.responses import PlainTextResponse

logger = logging.getLogger(__name__)


class LambdaProxyError(Exception):
    """Base exception class for the proxy."""

    pass


class ConfigurationError(LambdaProxyError):
    """Raised at startup when the configuration cannot be served."""

    pass


class RequestEncodingError(LambdaProxyError):
    """Raised when an inbound request cannot be encoded into an event."""

    pass


class ResponseDecodingError(LambdaProxyError):
    """Raised when an invocation result is not a well-formed response."""

    pass


class LambdaInvokeError(LambdaProxyError):
    """Raised when the Invoke API call itself fails."""

    def __init__(
        self,
        function_name: str,
        detail: str,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
    ):
        self.function_name = function_name
        self.detail = detail
        self.status_code = status_code
        self.error_type = error_type
        if error_type:
            super().__init__(f"{error_type}: {detail}")
        else:
            super().__init__(detail)


class LambdaFunctionError(LambdaProxyError):
    """Raised when the function reports an error (X-Amz-Function-Error)."""

    def __init__(self, function_name: str, function_error: str):
        self.function_name = function_name
        self.function_error = function_error
        super().__init__(function_error)


class ResourceExhaustedError(LambdaProxyError):
    """Raised when a request waits too long for the concurrency permit."""

    def __init__(self, detail: str = "Request timed out in queue"):
        super().__init__(detail)


class GateClosedError(LambdaProxyError):
    """Raised when the concurrency gate has been closed for shutdown."""

    def __init__(self, detail: str = "Concurrency gate is closed"):
        super().__init__(detail)


# ===========================================
# Error Responses
# ===========================================


def bad_gateway_response(message: str, exc: Optional[BaseException] = None) -> PlainTextResponse:
    """
    Build a 502 response.

    Body is "502 Bad Gateway", the cause label, and the error message when
    an exception is given. Only the message text of the exception is used.
    """
    body = "502 Bad Gateway\n" + message
    if exc is not None:
        body += "\n" + str(exc)
    return PlainTextResponse(body, status_code=502)

"""
Invocation result models.

Decouple the transport and codec from Starlette Response objects.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class InvocationResult(BaseModel):
    """Outcome of one Invoke API call that reached the Lambda service."""

    status_code: int
    payload: bytes = b""
    function_error: Optional[str] = None
    executed_version: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def is_function_error(self) -> bool:
        """True if the function itself failed (X-Amz-Function-Error)."""
        return self.function_error is not None


class ProxyResponse(BaseModel):
    """Decoded HTTP response: status, body, and an ordered header multi-map."""

    status_code: int
    body: bytes = b""
    headers: Dict[str, List[str]] = Field(default_factory=dict)

"""
Per-request logging context.

ContextVars carry the trace id and request id across the awaits of a single
request so every log record of that request can be correlated.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from .trace import TraceId

_trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)
_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_trace_id() -> Optional[str]:
    return _trace_id_var.get()


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_trace_id(header: Optional[str]) -> str:
    """
    Set the trace id from an incoming X-Amzn-Trace-Id header.

    A missing or unparsable header yields a freshly generated trace id.
    Returns the header-formatted value that was set.
    """
    trace = None
    if header:
        try:
            trace = TraceId.parse(header)
        except ValueError:
            trace = None
    if trace is None:
        trace = TraceId.generate()
    value = str(trace)
    _trace_id_var.set(value)
    return value


def generate_request_id() -> str:
    """Generate a request id (UUID4) and set it for the current context."""
    new_id = str(uuid.uuid4())
    _request_id_var.set(new_id)
    return new_id


def clear_context() -> None:
    _trace_id_var.set(None)
    _request_id_var.set(None)

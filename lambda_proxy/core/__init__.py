"""
Core logic package.

Provides the payload codec, the concurrency gate, and shared plumbing.
"""

from .concurrency import ConcurrencyGate
from .payload_builder import ALBPayloadBuilder, PayloadBuilder, get_payload_builder

__all__ = [
    "ConcurrencyGate",
    "ALBPayloadBuilder",
    "PayloadBuilder",
    "get_payload_builder",
]

"""
Data model definitions package.
"""

from .alb import ALBTargetGroupRequest, ALBTargetGroupResponse
from .result import InvocationResult, ProxyResponse

__all__ = [
    "ALBTargetGroupRequest",
    "ALBTargetGroupResponse",
    "InvocationResult",
    "ProxyResponse",
]

"""
RPCWrap - Exception Hierarchy.

Custom exceptions for RPC client operations with retry-awareness.
"""

from .base import (
    RPCError,
    TransportError,
    TimeoutError,
    RateLimitError,
    ServerError,
    AuthenticationError,
    MethodNotFoundError,
    InvalidRequestError,
)

__all__ = [
    "RPCError",
    "TransportError",
    "TimeoutError",
    "RateLimitError",
    "ServerError",
    "AuthenticationError",
    "MethodNotFoundError",
    "InvalidRequestError",
]

"""
RPCWrap - RPC Clients.

Transport abstraction and clients that run every call through a Retrier.
"""

from .base import BaseRPCClient, Transport, TransportFactory
from .http import HttpRPCClient, HttpTransportFactory

__all__ = [
    "BaseRPCClient",
    "Transport",
    "TransportFactory",
    "HttpRPCClient",
    "HttpTransportFactory",
]

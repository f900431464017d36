"""
Base RPC client interface.

A client owns a TransportFactory and a Retrier. Each attempt of a remote
call opens its own transport and closes it on every path.
"""

from abc import ABC, abstractmethod
from typing import Callable, Generic, Protocol, TypeVar

from ..retry import Retrier

T = TypeVar("T")


class Transport(Protocol):
    """Anything that can be closed after a call."""

    def close(self) -> None: ...


TransportT = TypeVar("TransportT", bound=Transport)


class TransportFactory(ABC, Generic[TransportT]):
    """Opens transports for remote calls."""

    @abstractmethod
    def get_transport(self) -> TransportT:
        """
        Open a new transport.

        Returns:
            An opened transport; the caller closes it
        """
        ...


class BaseRPCClient(ABC, Generic[TransportT]):
    """
    Abstract base class for RPC clients.

    Concrete clients build their remote methods on top of `call`.
    """

    def __init__(
        self,
        transport_factory: TransportFactory[TransportT],
        retrier: Retrier | None = None,
    ):
        """
        Initialize the client.

        Args:
            transport_factory: Source of a fresh transport per attempt
            retrier: Retry policy for calls (default: Retrier(), single attempt)
        """
        self.transport_factory = transport_factory
        self.retrier = Retrier() if retrier is None else retrier

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Return the remote service name for logging."""
        ...

    def call(self, fn: Callable[[TransportT], T]) -> T:
        """
        Run `fn` against a freshly opened transport, retrying per the retrier.

        Args:
            fn: Performs the remote invocation using the transport

        Returns:
            Whatever `fn` returns on the successful attempt
        """

        def attempt() -> T:
            transport = self.transport_factory.get_transport()
            try:
                return fn(transport)
            finally:
                transport.close()

        return self.retrier.do(attempt)

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the service is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...

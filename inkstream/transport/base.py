"""
Byte transport contract.

The pipeline is indifferent to how bytes arrive: a transport opens one
streaming request and yields raw chunks with no alignment guarantees.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator

from ..providers.base import RequestSpec


class ByteStream(ABC):
    """An open response body: async iterator of raw chunks."""

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[bytes]:
        """Iterate over raw chunks as they arrive."""

    @abstractmethod
    async def aclose(self) -> None:
        """Release the underlying connection. Safe to call more than once."""


class ByteTransport(ABC):
    """Opens streaming requests."""

    @abstractmethod
    async def open(self, request: RequestSpec) -> ByteStream:
        """
        Send ``request`` and return its response body stream.

        Raises:
            TransportError: connection failure or HTTP status >= 400
        """

    async def aclose(self) -> None:
        """Release transport-wide resources."""

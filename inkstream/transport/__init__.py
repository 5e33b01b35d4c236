from .base import ByteStream, ByteTransport
from .httpx_transport import HttpxByteStream, HttpxTransport

__all__ = ["ByteStream", "ByteTransport", "HttpxByteStream", "HttpxTransport"]

"""
Byte stream decoding.

Network chunks carry no guarantee that a multi-byte character is not split
between two reads. ``ByteStreamDecoder`` keeps a stateful incremental decoder
so that split sequences are held back until complete.
"""

import codecs
import logging

from ..providers.errors import DecodeError

logger = logging.getLogger(__name__)


class ByteStreamDecoder:
    """Turns raw network chunks into text that never ends mid-code-point."""

    def __init__(self, encoding: str = "utf-8", provider: str = ""):
        """Initialize the decoder.

        Args:
            encoding: Text encoding of the stream
            provider: Provider name, for error reporting
        """
        self.encoding = encoding
        self.provider = provider
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self.bytes_in = 0
        self.chars_out = 0

    def append(self, chunk: bytes) -> str:
        """
        Decode a chunk, buffering any incomplete trailing sequence.

        Args:
            chunk: Raw bytes as received from the transport

        Returns:
            Text completed by this chunk (possibly empty)
        """
        if not chunk:
            return ""
        self.bytes_in += len(chunk)
        try:
            text = self._decoder.decode(bytes(chunk), final=False)
        except (UnicodeDecodeError, TypeError, ValueError) as e:
            # Only reachable for codecs that reject input despite errors="replace"
            error = DecodeError(f"Dropping undecodable {len(chunk)} byte chunk: {e}", provider=self.provider)
            error.original_error = e
            logger.debug(error.message)
            self._decoder.reset()
            return ""
        self.chars_out += len(text)
        return text

    def flush(self) -> str:
        """
        Force out any buffered bytes at end of stream.

        Incomplete trailing sequences are decoded best-effort as replacement
        characters; this never raises.
        """
        try:
            text = self._decoder.decode(b"", final=True)
        except (UnicodeDecodeError, ValueError) as e:
            logger.debug(f"Decode failure while flushing trailing bytes: {e}")
            text = ""
        finally:
            self._decoder.reset()
        if text:
            logger.debug(f"Flushed {len(text)} trailing character(s) from decoder buffer")
        self.chars_out += len(text)
        return text

    @property
    def pending_bytes(self) -> int:
        """Number of bytes held back waiting for the rest of a character."""
        buffered, _ = self._decoder.getstate()
        return len(buffered)

    def reset(self) -> None:
        self._decoder.reset()
        self.bytes_in = 0
        self.chars_out = 0

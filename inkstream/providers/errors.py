"""
Error taxonomy and mapping utilities.

Everything below the session boundary is either absorbed locally or
normalized into one of the ``ProviderError`` subclasses defined here before it
reaches a caller; provider-specific error shapes never leak out.
"""

from typing import Optional

import httpx

from .base import ErrorKind, ProviderError


class DecodeError(ProviderError):
    """Bytes that could not be decoded. Always recovered locally."""
    kind = ErrorKind.DECODE


class FrameParseError(ProviderError):
    """A single malformed provider record. Logged and skipped."""
    kind = ErrorKind.FRAME_PARSE


class ClassificationError(ProviderError):
    """A record that could not be classified; its text falls back to the answer."""
    kind = ErrorKind.CLASSIFICATION


class TransportError(ProviderError):
    """Connection, timeout or HTTP status failure."""
    kind = ErrorKind.TRANSPORT


class ProviderSignaledError(ProviderError):
    """An explicit error event sent by the provider inside the stream. Never retried."""
    kind = ErrorKind.PROVIDER_SIGNALED


class CredentialError(ProviderError):
    """No credential available for a provider that requires one."""
    kind = ErrorKind.CREDENTIAL


class PipelineError(ProviderError):
    """An unexpected failure inside the pipeline itself."""
    kind = ErrorKind.INTERNAL


class ErrorMapper:
    """Maps transport-level exceptions to ``TransportError``."""

    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    RETRYABLE_EXCEPTIONS = (
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.ReadError,
        httpx.RemoteProtocolError,
        ConnectionResetError,
        ConnectionRefusedError,
        TimeoutError,
    )

    # Pattern table for human-readable messages
    ERROR_PATTERNS = {
        'rate_limit': {
            'patterns': ['rate limit', 'too many requests', 'quota exceeded',
                         'too_many_requests', 'rate_limit_exceeded', 'throttled'],
            'message': 'Rate limit exceeded, please wait before retrying'
        },
        'authentication': {
            'patterns': ['invalid api key', 'authentication', 'unauthorized',
                         'invalid_api_key', 'incorrect api key'],
            'message': 'Invalid API key or authentication failed'
        },
        'timeout': {
            'patterns': ['timeout', 'timed out'],
            'message': 'Request timed out'
        },
        'network': {
            'patterns': ['connection', 'network', 'dns', 'reset by peer'],
            'message': 'Network connection error'
        },
        'server_error': {
            'patterns': ['server error', 'internal error', 'service unavailable',
                         'overloaded', 'bad gateway'],
            'message': 'Provider server error, please retry'
        },
    }

    STATUS_MESSAGES = {
        400: 'Invalid request parameters',
        401: 'Invalid API key or authentication failed',
        403: 'Permission denied for this operation',
        404: 'Model or endpoint not found',
        429: 'Rate limit exceeded, please wait before retrying',
    }

    @staticmethod
    def is_retryable(error: BaseException, status_code: Optional[int] = None) -> bool:
        """
        Determine if a transport failure may be retried.

        Args:
            error: The exception to check
            status_code: HTTP status already extracted from the error, if any

        Returns:
            bool: True for transient connection/timeout failures and 429/5xx statuses
        """
        if status_code is None:
            status_code = getattr(error, 'status_code', None)
        if status_code is not None:
            return status_code in ErrorMapper.RETRYABLE_STATUS_CODES
        return isinstance(error, ErrorMapper.RETRYABLE_EXCEPTIONS)

    @staticmethod
    def get_retry_after(error: BaseException) -> Optional[float]:
        """Extract a Retry-After value (seconds) from an error's response, if any."""
        response = getattr(error, 'response', None)
        headers = getattr(response, 'headers', None)
        if headers is not None:
            retry_after = headers.get('Retry-After')
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass
        return getattr(error, 'retry_after', None)

    @staticmethod
    def user_message(error: BaseException, status_code: Optional[int] = None) -> str:
        """Human-readable description of a failure."""
        if status_code is not None:
            if status_code in ErrorMapper.STATUS_MESSAGES:
                return ErrorMapper.STATUS_MESSAGES[status_code]
            if status_code >= 500:
                return 'Provider server error, please retry'

        error_msg = str(error).lower()
        for info in ErrorMapper.ERROR_PATTERNS.values():
            if any(pattern in error_msg for pattern in info['patterns']):
                return info['message']
        return 'Unexpected error while streaming'

    @staticmethod
    def map_transport_error(error: BaseException, provider: str) -> TransportError:
        """
        Normalize any exception raised by the transport into ``TransportError``.

        Args:
            error: The exception raised while opening or reading the stream
            provider: Provider name

        Returns:
            TransportError with retryability and a readable message
        """
        if isinstance(error, TransportError):
            return error

        status_code = getattr(error, 'status_code', None)
        if status_code is None and isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code

        detail = str(error) or type(error).__name__
        transport_error = TransportError(
            message=f"{provider}: {ErrorMapper.user_message(error, status_code)} ({detail})",
            provider=provider,
            status_code=status_code,
            retry_after=ErrorMapper.get_retry_after(error),
        )
        transport_error.is_retryable = ErrorMapper.is_retryable(error, status_code)
        transport_error.original_error = error
        return transport_error

    @staticmethod
    def from_status(
        provider: str,
        status_code: int,
        body: str = "",
        retry_after: Optional[float] = None
    ) -> TransportError:
        """Build a ``TransportError`` for an HTTP error response."""
        message = f"{provider}: {ErrorMapper.user_message(Exception(body), status_code)} (HTTP {status_code})"
        excerpt = body.strip()[:200]
        if excerpt:
            message = f"{message}: {excerpt}"
        error = TransportError(
            message=message,
            provider=provider,
            status_code=status_code,
            retry_after=retry_after,
        )
        error.is_retryable = status_code in ErrorMapper.RETRYABLE_STATUS_CODES
        return error

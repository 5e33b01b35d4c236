from .retry import RetryPolicy, SessionRetryConfig
from .session import GenerationSession, SessionHandle, start_session
from .state import GenerationState, SessionStatus

__all__ = [
    "GenerationSession",
    "GenerationState",
    "RetryPolicy",
    "SessionHandle",
    "SessionRetryConfig",
    "SessionStatus",
    "start_session",
]

from .logging import SessionLogger

__all__ = ["SessionLogger"]

from .adapter import OllamaAdapter
from .parsers import OllamaChatParser

__all__ = ["OllamaAdapter", "OllamaChatParser"]

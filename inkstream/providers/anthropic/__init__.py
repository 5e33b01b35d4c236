from .adapter import AnthropicAdapter
from .parsers import MessagesStreamParser

__all__ = ["AnthropicAdapter", "MessagesStreamParser"]

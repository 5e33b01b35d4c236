from .adapter import DashScopeAdapter
from .parsers import DashScopeParser

__all__ = ["DashScopeAdapter", "DashScopeParser"]

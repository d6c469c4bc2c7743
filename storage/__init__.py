"""
Storage Module
Provider result cache
"""
from .cache import BaseCache, MemoryCache

__all__ = [
    "BaseCache",
    "MemoryCache",
]

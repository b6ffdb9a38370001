"""Configuration interface for memstore.

Usage:
    from memstore.config import settings
"""

from .settings import MemStoreSettings, settings

__all__ = [
    "MemStoreSettings",
    "settings",
]

"""
Core configuration for the Baton Event Service.
"""
from .config import settings, Settings

__all__ = ["settings", "Settings"]

"""
Config package export.

Keeps import sites clean and stable:
    from global_error_handler.config import get_settings, Settings
"""

from __future__ import annotations

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

"""
Sync settings persistence.
"""

from .cache import (
    SettingsCache,
    InMemorySettingsCache,
    JsonFileSettingsCache,
    dispatch_save,
)

__all__ = [
    "SettingsCache",
    "InMemorySettingsCache",
    "JsonFileSettingsCache",
    "dispatch_save",
]

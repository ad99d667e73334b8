"""
Event contract between front ends and the sync pipeline.
"""

from .bus import EventBus, EventName
from .handlers import SyncEventHandlers, coerce_settings, BUSY_MESSAGE

__all__ = [
    "EventBus",
    "EventName",
    "SyncEventHandlers",
    "coerce_settings",
    "BUSY_MESSAGE",
]

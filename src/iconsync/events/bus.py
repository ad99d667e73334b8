"""
In-process event bus.

Transport-agnostic carrier for the UI event contract: a front end
registers listeners by event name and emits requests; handlers reply by
emitting result events on the same bus.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Union


logger = logging.getLogger(__name__)


class EventName(str, Enum):
    """Event names of the UI contract."""
    # Requests
    SYNC_TO_GITHUB = "SYNC_TO_GITHUB"
    DOWNLOAD_MANIFEST = "DOWNLOAD_MANIFEST"
    GET_CACHED_SETTINGS = "GET_CACHED_SETTINGS"
    SAVE_SETTINGS = "SAVE_SETTINGS"
    # Replies
    SYNC_PROGRESS = "SYNC_PROGRESS"
    SYNC_TO_GITHUB_RESULT = "SYNC_TO_GITHUB_RESULT"
    MANIFEST_DATA = "MANIFEST_DATA"
    MANIFEST_ERROR = "MANIFEST_ERROR"
    CACHED_SETTINGS_RESULT = "CACHED_SETTINGS_RESULT"


Listener = Callable[..., None]


def _key(name: Union[EventName, str]) -> str:
    return name.value if isinstance(name, EventName) else str(name)


class EventBus:
    """
    Synchronous publish/subscribe bus.

    Listeners run in registration order on the emitting thread. A failing
    listener is logged and does not stop the remaining listeners.

    Example:
        >>> bus = EventBus()
        >>> bus.on(EventName.SYNC_PROGRESS, print)
        >>> bus.emit(EventName.SYNC_PROGRESS, "Extracting icons from Figma...")
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def on(self, name: Union[EventName, str], listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that unregisters the listener
        """
        key = _key(name)
        with self._lock:
            self._listeners.setdefault(key, []).append(listener)

        def unsubscribe() -> None:
            self.off(key, listener)

        return unsubscribe

    def off(self, name: Union[EventName, str], listener: Listener) -> None:
        key = _key(name)
        with self._lock:
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

    def emit(self, name: Union[EventName, str], *args: Any) -> int:
        """
        Deliver an event to every listener of that name.

        Returns:
            Number of listeners called
        """
        key = _key(name)
        with self._lock:
            listeners = list(self._listeners.get(key, []))

        if not listeners:
            logger.debug(f"No listeners for event {key}")

        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception(f"Listener for {key} failed")
        return len(listeners)

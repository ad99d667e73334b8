"""
Persistence of user sync settings.

The pipeline never waits for a settings save: saves are dispatched on a
daemon thread and failures are only logged.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..core.models import SyncSettings


logger = logging.getLogger(__name__)

SETTINGS_KEY = "githubSyncSettings"


class SettingsCache(ABC):
    """
    Abstract base class for settings caches.
    """

    @abstractmethod
    def load(self) -> Optional[SyncSettings]:
        """
        Load cached settings.

        Returns:
            The settings, or None if nothing usable is cached
        """
        pass

    @abstractmethod
    def save(self, settings: SyncSettings) -> None:
        """
        Persist settings, replacing any cached value.

        Raises:
            OSError if the write fails
        """
        pass


class InMemorySettingsCache(SettingsCache):
    """Process-local cache; nothing survives the process."""

    def __init__(self, settings: Optional[SyncSettings] = None):
        self._settings = settings
        self._lock = threading.Lock()

    def load(self) -> Optional[SyncSettings]:
        with self._lock:
            return self._settings

    def save(self, settings: SyncSettings) -> None:
        with self._lock:
            self._settings = settings


class JsonFileSettingsCache(SettingsCache):
    """
    Settings stored in a small JSON file.

    File layout: {"githubSyncSettings": "<settings as a JSON string>"}
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def load(self) -> Optional[SyncSettings]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
            raw = document.get(SETTINGS_KEY)
            if not raw:
                return None
            if not isinstance(raw, str):
                logger.error(f"Failed to get cached settings: expected a JSON string, got {type(raw).__name__}")
                return None
            return SyncSettings.from_dict(json.loads(raw))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to get cached settings: {e}")
            return None

    def save(self, settings: SyncSettings) -> None:
        document = {SETTINGS_KEY: json.dumps(settings.to_dict())}
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            tmp_path.replace(self.path)
        logger.debug(f"Saved settings to: {self.path}")


def dispatch_save(cache: SettingsCache, settings: SyncSettings) -> threading.Thread:
    """
    Save settings on a background thread without waiting for it.

    Args:
        cache: Target cache
        settings: Settings to persist

    Returns:
        The started thread (callers normally ignore it)
    """
    def _save() -> None:
        try:
            cache.save(settings)
        except Exception as e:
            logger.error(f"Failed to save settings to cache: {e}")

    thread = threading.Thread(target=_save, name="settings-save", daemon=True)
    thread.start()
    return thread

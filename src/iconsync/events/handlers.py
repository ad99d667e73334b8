"""
Handlers for the UI event contract.

Requests and their replies:
- SYNC_TO_GITHUB(settings)   -> SYNC_PROGRESS(message)*, SYNC_TO_GITHUB_RESULT(success, message)
- DOWNLOAD_MANIFEST()        -> SYNC_PROGRESS(message)*, MANIFEST_DATA(json)
                                or SYNC_PROGRESS("Error: ..."), MANIFEST_ERROR(message)
- GET_CACHED_SETTINGS()      -> CACHED_SETTINGS_RESULT(settings or None)
- SAVE_SETTINGS(settings)    -> no reply
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Union

from ..core.exceptions import IconSyncError
from ..core.models import SyncResult, SyncSettings
from ..runner.sync_runner import ProgressCallback, SyncOrchestrator
from ..settings.cache import SettingsCache, dispatch_save
from .bus import EventBus, EventName


logger = logging.getLogger(__name__)

BUSY_MESSAGE = "A sync is already in progress"
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"

OrchestratorFactory = Callable[[ProgressCallback], SyncOrchestrator]


def coerce_settings(settings: Union[SyncSettings, Dict[str, Any]]) -> SyncSettings:
    """Accept settings as a model or as the form's dict payload."""
    if isinstance(settings, SyncSettings):
        return settings
    if isinstance(settings, dict):
        return SyncSettings.from_dict(settings)
    raise TypeError(f"Unsupported settings payload: {type(settings).__name__}")


def failure_message(error: Exception) -> str:
    if isinstance(error, IconSyncError):
        return error.message
    return str(error) or UNKNOWN_ERROR_MESSAGE


class SyncEventHandlers:
    """
    Binds the event contract to the orchestrator and the settings cache.

    Only one run (sync or manifest download) executes at a time; a
    request arriving while busy is answered with a failure instead of
    starting an overlapping run.
    """

    def __init__(
        self,
        bus: EventBus,
        orchestrator_factory: OrchestratorFactory,
        settings_cache: SettingsCache,
    ):
        """
        Initialize the handlers.

        Args:
            bus: Event bus to listen and reply on
            orchestrator_factory: Builds an orchestrator wired to a progress callback
            settings_cache: Where settings are cached
        """
        self.bus = bus
        self.orchestrator_factory = orchestrator_factory
        self.settings_cache = settings_cache
        self.last_result: Optional[SyncResult] = None
        self.last_save: Optional[threading.Thread] = None
        self._busy_lock = threading.Lock()
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def register(self) -> "SyncEventHandlers":
        """Subscribe all request handlers on the bus."""
        self.bus.on(EventName.SYNC_TO_GITHUB, self.on_sync_to_github)
        self.bus.on(EventName.DOWNLOAD_MANIFEST, self.on_download_manifest)
        self.bus.on(EventName.GET_CACHED_SETTINGS, self.on_get_cached_settings)
        self.bus.on(EventName.SAVE_SETTINGS, self.on_save_settings)
        return self

    def _acquire(self) -> bool:
        with self._busy_lock:
            if self._busy:
                return False
            self._busy = True
            return True

    def _release(self) -> None:
        with self._busy_lock:
            self._busy = False

    def _progress(self, message: str) -> None:
        self.bus.emit(EventName.SYNC_PROGRESS, message)

    def on_sync_to_github(self, settings: Union[SyncSettings, Dict[str, Any]]) -> None:
        if not self._acquire():
            logger.warning("Sync requested while another run is in progress")
            self.bus.emit(EventName.SYNC_TO_GITHUB_RESULT, False, BUSY_MESSAGE)
            return

        self.last_result = None
        success, message = False, UNKNOWN_ERROR_MESSAGE
        try:
            settings = coerce_settings(settings)
            self.last_save = dispatch_save(self.settings_cache, settings)

            orchestrator = self.orchestrator_factory(self._progress)
            result = orchestrator.sync_to_remote(settings)
            self.last_result = result
            success, message = result.success, result.message
        except Exception as e:
            logger.exception(f"Sync error: {e}")
            message = failure_message(e)
        finally:
            self._release()

        self.bus.emit(EventName.SYNC_TO_GITHUB_RESULT, success, message)

    def on_download_manifest(self) -> None:
        if not self._acquire():
            logger.warning("Manifest requested while another run is in progress")
            self._progress(f"Error: {BUSY_MESSAGE}")
            self.bus.emit(EventName.MANIFEST_ERROR, BUSY_MESSAGE)
            return

        self.last_result = None
        data, message = None, UNKNOWN_ERROR_MESSAGE
        try:
            orchestrator = self.orchestrator_factory(self._progress)
            result = orchestrator.build_local_manifest()
            self.last_result = result

            if result.success and result.manifest is not None:
                data = result.manifest.to_json()
            else:
                message = result.message
        except Exception as e:
            logger.exception(f"Download manifest error: {e}")
            message = failure_message(e)
        finally:
            self._release()

        if data is not None:
            self.bus.emit(EventName.MANIFEST_DATA, data)
            return

        logger.error(f"Download manifest error: {message}")
        self._progress(f"Error: {message}")
        self.bus.emit(EventName.MANIFEST_ERROR, message)

    def on_get_cached_settings(self) -> None:
        self.bus.emit(EventName.CACHED_SETTINGS_RESULT, self.settings_cache.load())

    def on_save_settings(self, settings: Union[SyncSettings, Dict[str, Any]]) -> None:
        self.last_save = dispatch_save(self.settings_cache, coerce_settings(settings))

"""
Runners for icon synchronization.
"""

from .sync_runner import SyncOrchestrator, build_orchestrator, DEFAULT_MANIFEST_PATH

__all__ = ["SyncOrchestrator", "build_orchestrator", "DEFAULT_MANIFEST_PATH"]

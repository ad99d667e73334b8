"""
Orchestrator for icon synchronization runs.
"""

import logging
import uuid
from typing import Callable, List, Optional, Tuple

from ..core.exceptions import IconSyncError, UnknownFailure
from ..core.logging import CorrelationContext, log_with_context
from ..core.models import (
    IconGroup,
    Manifest,
    SyncResult,
    SyncSettings,
    SyncState,
    utc_now,
)
from ..core.scene import SceneProvider
from ..connectors.github import GitHubContentsPublisher
from ..extraction.locator import SvgNodeLocator, extract_groups
from ..manifest.builder import (
    DEFAULT_COMMIT_MESSAGE_TEMPLATE,
    ManifestBuilder,
    commit_message,
)
from ..naming.canonicalizer import NameCanonicalizer


logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_PATH = "figma-icons-manifest.json"

ProgressCallback = Callable[[str], None]


class SyncOrchestrator:
    """
    Drives one synchronization run through its stages.

    Remote path:  IDLE -> EXTRACTING -> NORMALIZING -> PUBLISHING -> SUCCEEDED | FAILED
    Local path:   IDLE -> EXTRACTING -> NORMALIZING -> BUILDING   -> SUCCEEDED | FAILED

    Stages run strictly one after another. Any exception ends the run in
    FAILED; callers always get exactly one SyncResult and never an
    exception.
    """

    def __init__(
        self,
        scene_provider: SceneProvider,
        publisher: Optional[GitHubContentsPublisher] = None,
        locator: Optional[SvgNodeLocator] = None,
        canonicalizer: Optional[NameCanonicalizer] = None,
        builder: Optional[ManifestBuilder] = None,
        manifest_path: str = DEFAULT_MANIFEST_PATH,
        commit_message_template: str = DEFAULT_COMMIT_MESSAGE_TEMPLATE,
        progress: Optional[ProgressCallback] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            scene_provider: Supplies the page to extract from
            publisher: Remote publisher (a default GitHub publisher if omitted)
            locator: Icon locator
            canonicalizer: Name canonicalizer
            builder: Manifest builder
            manifest_path: Repository path the manifest is written to
            commit_message_template: Template with a {count} placeholder
            progress: Called with a human-readable message at stage entry
        """
        self.scene_provider = scene_provider
        self.publisher = publisher or GitHubContentsPublisher()
        self.locator = locator or SvgNodeLocator()
        self.canonicalizer = canonicalizer or NameCanonicalizer()
        self.builder = builder or ManifestBuilder()
        self.manifest_path = manifest_path
        self.commit_message_template = commit_message_template
        self.progress = progress

        self.state = SyncState.IDLE
        self.history: List[SyncState] = [SyncState.IDLE]

    def _transition(self, state: SyncState) -> None:
        logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _notify(self, message: str) -> None:
        log_with_context(logger, logging.INFO, message, stage=self.state.value)
        if self.progress is not None:
            self.progress(message)

    def _start(self, run_id: Optional[str]) -> SyncResult:
        self.state = SyncState.IDLE
        self.history = [SyncState.IDLE]
        return SyncResult(
            success=False,
            message="",
            state=SyncState.IDLE,
            run_id=run_id or str(uuid.uuid4()),
        )

    def extract_and_normalize(self) -> Tuple[List[IconGroup], int]:
        """
        Run the extraction and naming stages.

        Returns:
            (groups, icon_count)
        """
        self._transition(SyncState.EXTRACTING)
        self._notify("Extracting icons from Figma...")

        self.locator.reset_metrics()
        page = self.scene_provider.get_current_page()
        groups = extract_groups(page, self.locator)
        logger.info(
            f"Extraction: {self.locator.metrics['icons_found']} icons found, "
            f"{self.locator.metrics['icons_rejected']} rejected, "
            f"{self.locator.metrics['nodes_visited']} nodes visited"
        )

        self._transition(SyncState.NORMALIZING)
        self.canonicalizer.canonicalize(groups)

        icon_count = sum(len(group.icons) for group in groups)
        return groups, icon_count

    def _build(self, groups: List[IconGroup]) -> Manifest:
        manifest = self.builder.build(groups)
        logger.info(f"Manifest size: {manifest.size_bytes / 1024:.2f} KB")
        return manifest

    def sync_to_remote(self, settings: SyncSettings, run_id: Optional[str] = None) -> SyncResult:
        """
        Extract, normalize, build and publish the manifest.

        Args:
            settings: Publish target (repository and token)
            run_id: Optional run identifier

        Returns:
            SyncResult (success or failure)
        """
        result = self._start(run_id)

        with CorrelationContext(run_id=result.run_id, repository=settings.repository):
            logger.info(f"Starting sync run: {result.run_id}")
            try:
                groups, icon_count = self.extract_and_normalize()

                self._transition(SyncState.PUBLISHING)
                self._notify(f"Syncing {icon_count} icons to GitHub...")
                manifest = self._build(groups)

                self._notify("Uploading to GitHub...")
                publish_result = self.publisher.publish(
                    settings.repository,
                    settings.access_token,
                    self.manifest_path,
                    manifest.to_json(),
                    commit_message(manifest, self.commit_message_template),
                )

                result.manifest = manifest
                result.publish_result = publish_result
                result.icon_count = manifest.icon_count
                return self._succeed(result, "Sync successful!")

            except Exception as e:
                return self._fail(result, e)

    def build_local_manifest(self, run_id: Optional[str] = None) -> SyncResult:
        """
        Extract, normalize and build the manifest without publishing.

        Returns:
            SyncResult whose manifest is set on success
        """
        result = self._start(run_id)

        with CorrelationContext(run_id=result.run_id):
            logger.info(f"Starting manifest build: {result.run_id}")
            try:
                groups, _ = self.extract_and_normalize()

                self._transition(SyncState.BUILDING)
                self._notify("Building manifest...")
                manifest = self._build(groups)

                result.manifest = manifest
                result.icon_count = manifest.icon_count
                return self._succeed(
                    result,
                    f"Manifest built: {manifest.icon_count} icons in {manifest.group_count} groups",
                )

            except Exception as e:
                return self._fail(result, e)

    def _succeed(self, result: SyncResult, message: str) -> SyncResult:
        self._transition(SyncState.SUCCEEDED)
        result.success = True
        result.message = message
        result.state = SyncState.SUCCEEDED
        result.completed_at = utc_now()
        logger.info(message)
        return result

    def _fail(self, result: SyncResult, error: Exception) -> SyncResult:
        if not isinstance(error, IconSyncError):
            logger.exception(f"Unexpected error in stage {self.state.value}")
            error = UnknownFailure(str(error) or "Unknown error occurred")
        else:
            logger.error(f"Sync error in stage {self.state.value}: {error}")

        self._transition(SyncState.FAILED)
        result.success = False
        result.message = error.message
        result.failure_kind = error.kind
        result.state = SyncState.FAILED
        result.completed_at = utc_now()
        return result


def build_orchestrator(
    config,
    scene_provider: SceneProvider,
    connector=None,
    progress: Optional[ProgressCallback] = None,
) -> SyncOrchestrator:
    """
    Build an orchestrator from a SyncConfig.

    Args:
        config: SyncConfig instance
        scene_provider: Supplies the page to extract from
        connector: Optional connector for the publisher (HTTP by default)
        progress: Optional progress callback

    Returns:
        Configured SyncOrchestrator
    """
    github = config.get_github_config()
    extraction = config.get_extraction_config()

    publisher = GitHubContentsPublisher(
        connector=connector,
        api_url=github.get("api_url", "https://api.github.com"),
        branch=github.get("branch"),
        timeout=github.get("timeout", 30),
        user_agent=github.get("user_agent"),
    )

    return SyncOrchestrator(
        scene_provider=scene_provider,
        publisher=publisher,
        locator=SvgNodeLocator(icon_size=extraction.get("icon_size", 24)),
        builder=ManifestBuilder(
            include_empty_groups=extraction.get("include_empty_groups", True)
        ),
        manifest_path=github.get("manifest_path", DEFAULT_MANIFEST_PATH),
        commit_message_template=github.get(
            "commit_message_template", DEFAULT_COMMIT_MESSAGE_TEMPLATE
        ),
        progress=progress,
    )

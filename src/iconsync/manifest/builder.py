"""
Manifest assembly.

Pure transform from canonicalized icon groups to a Manifest. No I/O.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..core.models import IconGroup, Manifest, utc_now


logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE_TEMPLATE = "feat: Update icons manifest - {count} icons"


class ManifestBuilder:
    """
    Wraps icon groups into a timestamped Manifest.

    Serialized key order is fixed by the model (lastSyncTime, groups;
    name, icons; id, name, type, svg, lastModified), so identical inputs
    always produce byte-identical JSON.
    """

    def __init__(
        self,
        include_empty_groups: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the builder.

        Args:
            include_empty_groups: Keep groups that contain no icons
            clock: Source of the manifest timestamp when none is given
        """
        self.include_empty_groups = include_empty_groups
        self.clock = clock

    def build(
        self,
        groups: List[IconGroup],
        generated_at: Optional[datetime] = None,
    ) -> Manifest:
        """
        Assemble a manifest.

        Args:
            groups: Canonicalized groups in container order
            generated_at: Manifest timestamp (defaults to the builder clock)

        Returns:
            The manifest
        """
        selected = [
            IconGroup(name=group.name, icons=list(group.icons), container_id=group.container_id)
            for group in groups
            if self.include_empty_groups or group.icons
        ]

        manifest = Manifest(
            generated_at=generated_at or self.clock(),
            groups=selected,
        )

        for group in manifest.groups:
            logger.debug(f"  {group.name}: {len(group.icons)} icons")
        logger.info(
            f"Built manifest: {manifest.group_count} groups, {manifest.icon_count} icons"
        )
        return manifest


def build_manifest(
    groups: List[IconGroup],
    generated_at: Optional[datetime] = None,
    include_empty_groups: bool = True,
) -> Manifest:
    """Build a manifest with a default builder."""
    return ManifestBuilder(include_empty_groups=include_empty_groups).build(
        groups, generated_at=generated_at
    )


def commit_message(manifest: Manifest, template: str = DEFAULT_COMMIT_MESSAGE_TEMPLATE) -> str:
    """Commit message for publishing a manifest, e.g. 'feat: Update icons manifest - 3 icons'."""
    return template.format(count=manifest.icon_count, groups=manifest.group_count)

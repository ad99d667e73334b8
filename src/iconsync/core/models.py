"""
Core data models for the icon sync pipeline.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import FailureKind


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    """Convert integer epoch milliseconds to a UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@dataclass
class IconRecord:
    """
    One icon discovered in the scene graph.

    Attributes:
        id: Opaque identifier from the scene graph, unique within a pass
        shape_kind: Node kind that qualified the icon (e.g. 'INSTANCE')
        raw_name: Display name at extraction time, not guaranteed safe or unique
        markup: Exported SVG text
        extracted_at: When the node was exported
        canonical_name: Unique slug assigned by the name canonicalizer
    """
    id: str
    shape_kind: str
    raw_name: str
    markup: str
    extracted_at: datetime = field(default_factory=utc_now)
    canonical_name: Optional[str] = None

    @property
    def publish_name(self) -> str:
        """Name written to the manifest."""
        return self.canonical_name if self.canonical_name is not None else self.raw_name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in manifest key order."""
        return {
            "id": self.id,
            "name": self.publish_name,
            "type": self.shape_kind,
            "svg": self.markup,
            "lastModified": to_epoch_ms(self.extracted_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IconRecord":
        """Create from a manifest icon entry."""
        return cls(
            id=data["id"],
            shape_kind=data.get("type", "INSTANCE"),
            raw_name=data["name"],
            markup=data.get("svg", ""),
            extracted_at=from_epoch_ms(data.get("lastModified", 0)),
            canonical_name=data["name"],
        )


@dataclass
class IconGroup:
    """
    Icons sharing one visual container in the source document.

    Attributes:
        name: Label text of the container, or the container's own name
        icons: Icons in traversal order
        container_id: Id of the source container (not serialized)
    """
    name: str
    icons: List[IconRecord] = field(default_factory=list)
    container_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "icons": [icon.to_dict() for icon in self.icons],
        }


@dataclass
class Manifest:
    """
    The publishable artifact: every group and icon of one run.
    """
    generated_at: datetime
    groups: List[IconGroup] = field(default_factory=list)

    @property
    def icon_count(self) -> int:
        return sum(len(group.icons) for group in self.groups)

    @property
    def group_count(self) -> int:
        return len(self.groups)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "lastSyncTime": to_epoch_ms(self.generated_at),
            "groups": [group.to_dict() for group in self.groups],
        }

    def to_json(self) -> str:
        """Serialize as pretty-printed JSON with 2-space indentation."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @property
    def size_bytes(self) -> int:
        return len(self.to_json().encode("utf-8"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        """Create from a serialized manifest."""
        return cls(
            generated_at=from_epoch_ms(data.get("lastSyncTime", 0)),
            groups=[
                IconGroup(
                    name=group.get("name", ""),
                    icons=[IconRecord.from_dict(icon) for icon in group.get("icons", [])],
                )
                for group in data.get("groups", [])
            ],
        )

    def save(self, path: Path) -> None:
        """Save manifest to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json())
            f.write("\n")

        logger.info(f"Saved manifest to: {path}")

    @classmethod
    def load(cls, path: Path) -> "Manifest":
        """Load manifest from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        manifest = cls.from_dict(data)
        logger.info(f"Loaded manifest from: {path}")
        return manifest


@dataclass
class SyncSettings:
    """
    User-supplied publish target.

    Serialized with the keys the settings form uses (githubRepo,
    githubToken) so cached settings stay readable across front ends.
    """
    repository: str
    access_token: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "githubRepo": self.repository,
            "githubToken": self.access_token,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncSettings":
        return cls(
            repository=data.get("githubRepo") or "",
            access_token=data.get("githubToken") or "",
        )

    def __repr__(self) -> str:
        masked = f"{self.access_token[:4]}..." if self.access_token else ""
        return f"SyncSettings(repository={self.repository!r}, access_token={masked!r})"


class SyncState(str, Enum):
    """States of a synchronization run."""
    IDLE = "idle"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing"
    BUILDING = "building"
    PUBLISHING = "publishing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class PublishResult:
    """
    Outcome of a successful create-or-update.

    Attributes:
        path: Repository path that was written
        created: True if the path did not exist before the write
        previous_sha: Revision token of the overwritten file, if any
        content_sha: Revision token of the new file content
        commit_sha: Commit created by the write
        html_url: Browser URL of the written file
    """
    path: str
    created: bool
    previous_sha: Optional[str] = None
    content_sha: Optional[str] = None
    commit_sha: Optional[str] = None
    html_url: Optional[str] = None


@dataclass
class SyncResult:
    """Terminal result of a synchronization run."""
    success: bool
    message: str
    state: SyncState
    run_id: str
    failure_kind: Optional[FailureKind] = None
    manifest: Optional[Manifest] = None
    publish_result: Optional[PublishResult] = None
    icon_count: int = 0
    started_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "state": self.state.value,
            "run_id": self.run_id,
            "failure_kind": self.failure_kind.value if self.failure_kind else None,
            "icon_count": self.icon_count,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

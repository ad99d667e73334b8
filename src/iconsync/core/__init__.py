"""
Core abstractions for the icon sync pipeline.

Contains the data model, scene graph variants, connector interface,
exceptions, and logging utilities.
"""

from .models import (
    IconRecord, IconGroup, Manifest, SyncSettings, SyncState,
    SyncResult, PublishResult,
)
from .scene import (
    NodeType, InstanceNode, GroupNode, FrameNode, TextNode, OtherNode,
    SceneNode, ScenePage, SceneProvider,
)
from .connector import Connector, ConnectorRequest, ConnectorResponse
from .exceptions import FailureKind, IconSyncError

__all__ = [
    # Models
    "IconRecord",
    "IconGroup",
    "Manifest",
    "SyncSettings",
    "SyncState",
    "SyncResult",
    "PublishResult",
    # Scene
    "NodeType",
    "InstanceNode",
    "GroupNode",
    "FrameNode",
    "TextNode",
    "OtherNode",
    "SceneNode",
    "ScenePage",
    "SceneProvider",
    # Connectors
    "Connector",
    "ConnectorRequest",
    "ConnectorResponse",
    # Exceptions
    "FailureKind",
    "IconSyncError",
]

"""
Scene provider backed by a JSON scene document.

Document format:

    {
      "name": "Icons",
      "children": [
        {"type": "FRAME", "id": "1:1", "name": "Arrows", "children": [
          {"type": "TEXT", "id": "1:2", "name": "Title", "characters": "Arrows"},
          {"type": "GROUP", "id": "1:3", "name": "svg", "children": [
            {"type": "INSTANCE", "id": "1:4", "name": "Arrow Right",
             "width": 24, "height": 24, "svg": "<svg ...>...</svg>"}
          ]}
        ]}
      ]
    }

Instance markup is taken from "svg" (inline) or "svgFile" (a path relative
to the document). Files are read at export time, so a missing file is a
per-node export failure rather than a load error.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConfigError
from ..core.scene import (
    Exporter,
    FrameNode,
    GroupNode,
    InstanceNode,
    NodeType,
    OtherNode,
    SceneNode,
    ScenePage,
    SceneProvider,
    TextNode,
)


logger = logging.getLogger(__name__)


def _inline_exporter(markup: str) -> Exporter:
    data = markup.encode("utf-8")
    return lambda: data


def _file_exporter(path: Path) -> Exporter:
    def export() -> bytes:
        with open(path, "rb") as f:
            return f.read()
    return export


def _missing_exporter(node_id: str) -> Exporter:
    def export() -> bytes:
        raise FileNotFoundError(f"No SVG markup for node {node_id}")
    return export


def parse_node(data: Dict[str, Any], base_dir: Optional[Path] = None) -> SceneNode:
    """
    Build a scene node (and its subtree) from its JSON form.

    Args:
        data: Node mapping
        base_dir: Directory that svgFile paths are relative to

    Returns:
        The scene node

    Raises:
        ConfigError: If the node is malformed
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Scene node must be an object, got {type(data).__name__}")

    node_id = data.get("id")
    if node_id is None or node_id == "":
        raise ConfigError(f"Scene node without id: {data.get('name')!r}")
    node_id = str(node_id)
    name = str(data.get("name", ""))
    type_name = str(data.get("type", NodeType.OTHER.value)).upper()

    raw_children = data.get("children") or []
    if not isinstance(raw_children, list):
        raise ConfigError(f"children of node {node_id} must be a list")

    try:
        if type_name == NodeType.TEXT.value:
            return TextNode(id=node_id, name=name, characters=str(data.get("characters", "")))

        children = [parse_node(child, base_dir) for child in raw_children]
        width = float(data.get("width", 0))
        height = float(data.get("height", 0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid scene node {node_id}: {e}") from e

    if type_name == NodeType.INSTANCE.value:
        if data.get("svg") is not None:
            exporter = _inline_exporter(str(data["svg"]))
        elif data.get("svgFile"):
            svg_path = Path(data["svgFile"])
            if base_dir is not None and not svg_path.is_absolute():
                svg_path = base_dir / svg_path
            exporter = _file_exporter(svg_path)
        else:
            exporter = _missing_exporter(node_id)
        return InstanceNode(
            id=node_id,
            name=name,
            width=width,
            height=height,
            exporter=exporter,
            children=children,
        )
    if type_name == NodeType.GROUP.value:
        return GroupNode(id=node_id, name=name, children=children)
    if type_name == NodeType.FRAME.value:
        return FrameNode(id=node_id, name=name, children=children)
    return OtherNode(
        id=node_id,
        name=name,
        type_name=type_name,
        width=width,
        height=height,
        children=children,
    )


def parse_page(data: Dict[str, Any], base_dir: Optional[Path] = None) -> ScenePage:
    """Build a page from its JSON form."""
    if not isinstance(data, dict):
        raise ConfigError("Scene document must be a JSON object")
    raw_children = data.get("children") or []
    if not isinstance(raw_children, list):
        raise ConfigError("Scene document 'children' must be a list")
    children: List[SceneNode] = [parse_node(child, base_dir) for child in raw_children]
    return ScenePage(name=str(data.get("name", "")), children=children)


class JsonSceneProvider(SceneProvider):
    """
    Scene provider reading a JSON scene document from disk.

    The document is re-read on every get_current_page() call so each sync
    run sees the current file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_current_page(self) -> ScenePage:
        if not self.path.exists():
            raise ConfigError(f"Scene document not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to read scene document {self.path}: {e}") from e

        page = parse_page(data, base_dir=self.path.parent)
        logger.info(f"Loaded scene document {self.path}: {len(page.children)} top-level nodes")
        return page

    def get_name(self) -> str:
        return "json_scene"


class StaticSceneProvider(SceneProvider):
    """Scene provider returning an in-memory page."""

    def __init__(self, page: ScenePage):
        self.page = page

    def get_current_page(self) -> ScenePage:
        return self.page

    def get_name(self) -> str:
        return "static_scene"

"""
Icon node discovery and export.

Walks a scene graph depth-first, finds component instances that match the
icon shape contract (exactly icon_size x icon_size), and exports each to
validated SVG markup. A matching node is a leaf for the search: its
children are never visited, whether its export succeeded or not.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ..core.exceptions import ExportFailure, InvalidMarkupStructure
from ..core.models import IconGroup, IconRecord, utc_now
from ..core.scene import (
    GroupNode,
    InstanceNode,
    SceneNode,
    ScenePage,
    TextNode,
    node_children,
)


logger = logging.getLogger(__name__)

DEFAULT_ICON_SIZE = 24


@dataclass(frozen=True)
class Found:
    """The node is an icon and was exported."""
    record: IconRecord


@dataclass(frozen=True)
class Rejected:
    """The node matched the shape contract but its export failed."""
    node_id: str
    reason: str


@dataclass(frozen=True)
class NotFound:
    """The node is not an icon; its children should be searched."""


NodeOutcome = Union[Found, Rejected, NotFound]

NOT_FOUND = NotFound()


def validate_markup(markup: str) -> bool:
    """Return True if the trimmed markup is wrapped in an svg root element."""
    trimmed = markup.strip()
    return trimmed.startswith("<svg") and trimmed.endswith("</svg>")


def decode_markup(data: Union[bytes, str]) -> str:
    """Decode exported bytes as UTF-8; undecodable bytes become U+FFFD."""
    if isinstance(data, str):
        return data
    return bytes(data).decode("utf-8", errors="replace")


def is_icon_candidate(node: SceneNode, icon_size: float = DEFAULT_ICON_SIZE) -> bool:
    """An icon is an instance whose local bounds are exactly icon_size square."""
    return (
        isinstance(node, InstanceNode)
        and node.width == icon_size
        and node.height == icon_size
    )


def export_markup(node: InstanceNode) -> str:
    """
    Export a node and validate the result.

    Args:
        node: The instance node to export

    Returns:
        The SVG markup text

    Raises:
        ExportFailure: If the host export call fails
        InvalidMarkupStructure: If the export is not an svg document
    """
    try:
        data = node.export_svg()
    except Exception as e:
        raise ExportFailure(
            f"Failed to export SVG for node {node.name}: {e}", node_id=node.id
        ) from e

    markup = decode_markup(data)
    if not validate_markup(markup):
        raise InvalidMarkupStructure(
            f"Invalid SVG structure for node {node.name}", node_id=node.id
        )
    return markup


class SvgNodeLocator:
    """
    Depth-first, pre-order search for icon nodes.

    The per-node step returns a Found, Rejected or NotFound outcome and the
    search only recurses into children on NotFound.
    """

    def __init__(
        self,
        icon_size: float = DEFAULT_ICON_SIZE,
        clock: Callable = utc_now,
    ):
        """
        Initialize the locator.

        Args:
            icon_size: Exact width and height a node must have to be an icon
            clock: Returns the extraction timestamp for each exported icon
        """
        self.icon_size = icon_size
        self.clock = clock
        self.metrics = self._empty_metrics()

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "nodes_visited": 0,
            "icons_found": 0,
            "icons_rejected": 0,
        }

    def reset_metrics(self) -> None:
        self.metrics = self._empty_metrics()

    def visit(self, node: SceneNode) -> NodeOutcome:
        """Classify a single node without looking at its children."""
        self.metrics["nodes_visited"] += 1

        if not is_icon_candidate(node, self.icon_size):
            return NOT_FOUND

        try:
            markup = export_markup(node)
        except (ExportFailure, InvalidMarkupStructure) as e:
            logger.warning(f"Skipping node {node.id}: {e}")
            self.metrics["icons_rejected"] += 1
            return Rejected(node_id=node.id, reason=str(e))

        record = IconRecord(
            id=node.id,
            shape_kind=node.node_type.value,
            raw_name=node.name,
            markup=markup,
            extracted_at=self.clock(),
        )
        self.metrics["icons_found"] += 1
        logger.debug(f"Found icon: {node.name} ({node.node_type.value}, id: {node.id})")
        return Found(record)

    def locate(self, root: SceneNode) -> List[IconRecord]:
        """
        Find all icons at or below a node.

        Args:
            root: Node to start the search at (the root itself is visited)

        Returns:
            Icon records in traversal order
        """
        icons: List[IconRecord] = []
        self._search(root, icons)
        return icons

    def locate_in_children(self, holder: SceneNode) -> List[IconRecord]:
        """Find all icons below a holder node, without visiting the holder itself."""
        icons: List[IconRecord] = []
        for child in node_children(holder):
            self._search(child, icons)
        return icons

    def _search(self, node: SceneNode, icons: List[IconRecord]) -> None:
        outcome = self.visit(node)
        if isinstance(outcome, Found):
            icons.append(outcome.record)
        elif isinstance(outcome, NotFound):
            for child in node_children(node):
                self._search(child, icons)


def find_label(container: SceneNode) -> Optional[TextNode]:
    """First text child of a container."""
    for child in node_children(container):
        if isinstance(child, TextNode):
            return child
    return None


def find_holder(container: SceneNode) -> Optional[GroupNode]:
    """First group child of a container; icons are searched below it."""
    for child in node_children(container):
        if isinstance(child, GroupNode):
            return child
    return None


def extract_groups(
    page: ScenePage,
    locator: Optional[SvgNodeLocator] = None,
) -> List[IconGroup]:
    """
    Extract one icon group per top-level container of a page.

    Top-level nodes without children are not containers and are skipped.
    A container without an icon holder still yields a group, with no icons.

    Args:
        page: The page to extract from
        locator: Locator to use (a default one is created if omitted)

    Returns:
        Groups in page order
    """
    locator = locator or SvgNodeLocator()
    groups: List[IconGroup] = []

    for container in page.children:
        children = node_children(container)
        if not children:
            continue

        label = find_label(container)
        holder = find_holder(container)

        name = container.name
        if label is not None and label.characters and label.characters.strip():
            name = label.characters.strip()

        if holder is None:
            logger.info(f"Container '{name}' has no icon holder group")
            icons: List[IconRecord] = []
        else:
            icons = locator.locate_in_children(holder)

        for icon in icons:
            logger.debug(f"  - {icon.raw_name} (id: {icon.id})")
        logger.info(f"Group '{name}': {len(icons)} icons")

        groups.append(IconGroup(name=name, icons=icons, container_id=container.id))

    return groups

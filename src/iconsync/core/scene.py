"""
Scene graph model supplied by the host design document.

Nodes are a closed set of tagged variants. Each variant carries only the
fields the extraction pipeline needs: instances are exportable and sized,
groups and frames hold children, text nodes hold characters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Union


class NodeType(str, Enum):
    """Shape-kind tag of a scene node."""
    INSTANCE = "INSTANCE"
    GROUP = "GROUP"
    FRAME = "FRAME"
    TEXT = "TEXT"
    OTHER = "OTHER"


# Export capability: returns raw markup bytes or raises.
Exporter = Callable[[], bytes]


@dataclass
class InstanceNode:
    """
    A reusable-component instance, the only variant that can be an icon.

    Attributes:
        id: Stable identifier assigned by the host
        name: Display name
        width: Width in the node's own coordinate space
        height: Height in the node's own coordinate space
        exporter: Callable producing the node's SVG markup as bytes
        children: Nested nodes (instances may contain further structure)
    """
    id: str
    name: str
    width: float
    height: float
    exporter: Optional[Exporter] = None
    children: List["SceneNode"] = field(default_factory=list)
    node_type: NodeType = field(default=NodeType.INSTANCE, init=False)

    def export_svg(self) -> bytes:
        """Export this node as SVG bytes."""
        if self.exporter is None:
            raise RuntimeError(f"Node {self.id} has no export capability")
        return self.exporter()


@dataclass
class GroupNode:
    """A plain grouping of nodes."""
    id: str
    name: str
    children: List["SceneNode"] = field(default_factory=list)
    node_type: NodeType = field(default=NodeType.GROUP, init=False)


@dataclass
class FrameNode:
    """A frame; top-level icon containers are usually frames."""
    id: str
    name: str
    children: List["SceneNode"] = field(default_factory=list)
    node_type: NodeType = field(default=NodeType.FRAME, init=False)


@dataclass
class TextNode:
    """A text layer. Its characters label an icon group."""
    id: str
    name: str
    characters: str = ""
    node_type: NodeType = field(default=NodeType.TEXT, init=False)


@dataclass
class OtherNode:
    """Any node kind the pipeline does not treat specially (vectors, rectangles...)."""
    id: str
    name: str
    type_name: str = "OTHER"
    width: float = 0.0
    height: float = 0.0
    children: List["SceneNode"] = field(default_factory=list)
    node_type: NodeType = field(default=NodeType.OTHER, init=False)


SceneNode = Union[InstanceNode, GroupNode, FrameNode, TextNode, OtherNode]


def node_children(node: SceneNode) -> List[SceneNode]:
    """Return the children of a node, or an empty list for leaf variants."""
    if isinstance(node, TextNode):
        return []
    return node.children


@dataclass
class ScenePage:
    """The current page: an ordered sequence of top-level nodes."""
    name: str
    children: List[SceneNode] = field(default_factory=list)


class SceneProvider(ABC):
    """
    Abstract host scene provider.

    Supplies the page whose top-level children are the icon containers.
    """

    @abstractmethod
    def get_current_page(self) -> ScenePage:
        """
        Return the page to extract icons from.

        Raises:
            ConfigError if the scene cannot be loaded
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the provider name/identifier."""
        pass

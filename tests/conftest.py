"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from iconsync.core.models import SyncSettings
from iconsync.core.scene import FrameNode, GroupNode, InstanceNode, ScenePage, TextNode
from iconsync.connectors.test_connector import ContentsTestConnector


VALID_TOKEN = "ghp_" + "a" * 36


def make_svg(body: str = '<path d="M4 12h16"/>') -> str:
    """A minimal 24x24 svg document."""
    return (
        '<svg width="24" height="24" viewBox="0 0 24 24" xmlns="http://www.w3.org/2000/svg">'
        f"{body}</svg>"
    )


def make_icon(
    node_id: str,
    name: str,
    size: float = 24,
    markup: Optional[str] = None,
    children: Optional[List] = None,
) -> InstanceNode:
    """An instance node exporting the given markup (a default svg if omitted)."""
    data = (markup if markup is not None else make_svg()).encode("utf-8")
    return InstanceNode(
        id=node_id,
        name=name,
        width=size,
        height=size,
        exporter=lambda: data,
        children=children or [],
    )


def build_sample_page() -> ScenePage:
    """
    Page with three icon containers and one loose node.

    Arrows: labelled, three icons (one nested in a 32x32 instance)
    Misc:   unlabelled, one icon two groups deep
    Empty:  labelled holder with no icons
    """
    arrows = FrameNode(
        id="1:1",
        name="Arrows Frame",
        children=[
            TextNode(id="1:2", name="Title", characters="Arrows"),
            GroupNode(
                id="1:3",
                name="svg",
                children=[
                    make_icon("1:4", "Arrow Right"),
                    make_icon("1:5", "arrow-right"),
                    make_icon("1:6", "Big", size=32, children=[make_icon("1:7", "Arrow_Right!")]),
                ],
            ),
        ],
    )
    misc = FrameNode(
        id="2:1",
        name="Misc",
        children=[
            GroupNode(
                id="2:2",
                name="svg",
                children=[GroupNode(id="2:3", name="inner", children=[make_icon("2:4", "Close")])],
            ),
        ],
    )
    empty = FrameNode(
        id="3:1",
        name="Empty Frame",
        children=[
            TextNode(id="3:2", name="Title", characters="Empty Set"),
            GroupNode(id="3:3", name="svg", children=[]),
        ],
    )
    loose = make_icon("4:1", "Loose")
    return ScenePage(name="Icons", children=[arrows, misc, empty, loose])


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "cli: Tests that drive the command line entry point")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so handlers never outlive a test's captured streams."""
    yield
    package_logger = logging.getLogger("iconsync")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_page() -> ScenePage:
    """Fixture providing the sample icon page."""
    return build_sample_page()


@pytest.fixture
def contents_connector():
    """Fixture providing an empty in-memory contents store."""
    connector = ContentsTestConnector()
    yield connector
    connector.close()


@pytest.fixture
def valid_token() -> str:
    return VALID_TOKEN


@pytest.fixture
def sync_settings() -> SyncSettings:
    """Fixture providing settings that pass local validation."""
    return SyncSettings(repository="test-owner/test-repo", access_token=VALID_TOKEN)

"""
Icon extraction from scene graphs.
"""

from .locator import (
    SvgNodeLocator,
    Found,
    Rejected,
    NotFound,
    extract_groups,
    validate_markup,
    decode_markup,
    export_markup,
    is_icon_candidate,
)

__all__ = [
    "SvgNodeLocator",
    "Found",
    "Rejected",
    "NotFound",
    "extract_groups",
    "validate_markup",
    "decode_markup",
    "export_markup",
    "is_icon_candidate",
]

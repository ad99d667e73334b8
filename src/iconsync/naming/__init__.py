"""
Icon name canonicalization.
"""

from .canonicalizer import (
    NameCanonicalizer,
    NameRegistry,
    CanonicalizationReport,
    canonicalize_groups,
    format_name,
    FALLBACK_NAME,
)

__all__ = [
    "NameCanonicalizer",
    "NameRegistry",
    "CanonicalizationReport",
    "canonicalize_groups",
    "format_name",
    "FALLBACK_NAME",
]

"""
Canonical icon names.

Rewrites every extracted icon name into a lowercase, hyphen-delimited slug
that is unique across all groups of one run. The pass is deterministic:
the same traversal order and raw names always give the same names.

Rules:
- Every run of characters outside [a-z0-9] becomes one hyphen
- Leading and trailing hyphens are stripped
- A name that formats to nothing becomes "icon"
- Taken names get the first free "-N" suffix, N starting at 1
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Set

from ..core.models import IconGroup, IconRecord


logger = logging.getLogger(__name__)

FALLBACK_NAME = "icon"

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_HYPHEN_RUN_RE = re.compile(r"-+")


def format_name(raw_name: str, fallback: str = FALLBACK_NAME) -> str:
    """
    Format a display name as a slug, without disambiguation.

    Args:
        raw_name: Source display name
        fallback: Slug used when nothing of the name survives

    Returns:
        The formatted slug

    Example:
        >>> format_name("Arrow_Right!")
        'arrow-right'
    """
    slug = _NON_SLUG_RE.sub("-", (raw_name or "").lower())
    slug = slug.strip("-")
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug or fallback


class NameRegistry:
    """
    Accumulator of the names already assigned in one run.

    Threaded explicitly through a canonicalization pass; a new registry
    means a new naming scope.
    """

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._used: Set[str] = set(names or [])

    def __contains__(self, name: str) -> bool:
        return name in self._used

    def __len__(self) -> int:
        return len(self._used)

    def claim(self, base: str) -> str:
        """
        Reserve and return the first free name derived from base.

        Args:
            base: Formatted slug

        Returns:
            base itself if free, else base-1, base-2, ...
        """
        candidate = base
        counter = 1
        while candidate in self._used:
            candidate = f"{base}-{counter}"
            counter += 1
        self._used.add(candidate)
        return candidate


@dataclass
class RenameEntry:
    """An icon whose published name differs from its raw name."""
    icon_id: str
    raw_name: str
    canonical_name: str


@dataclass
class CanonicalizationReport:
    """
    Result of one canonicalization pass.

    Attributes:
        renamed: Icons whose canonical name differs from their raw name
        changed: Icons whose canonical_name value changed during this pass
        unique_names: Number of names assigned
    """
    renamed: List[RenameEntry] = field(default_factory=list)
    changed: int = 0
    unique_names: int = 0


def iter_icons(groups: Iterable[IconGroup]) -> Iterator[IconRecord]:
    """Flatten groups in (group order, within-group order)."""
    for group in groups:
        for icon in group.icons:
            yield icon


class NameCanonicalizer:
    """
    Assigns unique, filesystem-safe names to every icon of a run.

    Example:
        >>> canonicalizer = NameCanonicalizer()
        >>> report = canonicalizer.canonicalize(groups)
        >>> groups[0].icons[0].canonical_name
        'arrow-right'
    """

    def __init__(self, fallback: str = FALLBACK_NAME):
        self.fallback = fallback

    def canonicalize(
        self,
        groups: List[IconGroup],
        registry: Optional[NameRegistry] = None,
    ) -> CanonicalizationReport:
        """
        Assign canonical names in place.

        Args:
            groups: All groups of the run, in container order
            registry: Names already taken (a fresh registry if omitted)

        Returns:
            CanonicalizationReport describing the pass
        """
        registry = registry if registry is not None else NameRegistry()
        report = CanonicalizationReport()

        for icon in iter_icons(groups):
            unique_name = registry.claim(format_name(icon.raw_name, self.fallback))

            if unique_name != icon.raw_name:
                report.renamed.append(RenameEntry(icon.id, icon.raw_name, unique_name))
                logger.debug(f"Renamed: {icon.raw_name} -> {unique_name} (id: {icon.id})")

            if icon.canonical_name != unique_name:
                report.changed += 1

            icon.canonical_name = unique_name

        report.unique_names = len(registry)
        logger.info(f"Total renamed: {len(report.renamed)}")
        logger.info(f"Total unique names: {report.unique_names}")
        return report


def canonicalize_groups(
    groups: List[IconGroup],
    registry: Optional[NameRegistry] = None,
) -> CanonicalizationReport:
    """Canonicalize with the default fallback name."""
    return NameCanonicalizer().canonicalize(groups, registry=registry)

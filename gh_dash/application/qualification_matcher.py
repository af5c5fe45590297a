"""Match releases against the qualification registry."""

from datetime import date, datetime
from typing import List, Optional, Set

from gh_dash.application.release_analyzer import parse_release_date
from gh_dash.domain.qualification import (
    QualificationEntry,
    QualificationMatch,
    QualificationRegistry,
    ReleaseBadge,
    ReleaseBadgeKind,
)
from gh_dash.domain.repository import Release, RepositorySlug


def version_candidates(tag: str) -> Set[str]:
    """The tag itself plus the tag with one leading ``v`` removed."""
    candidates = {tag}
    if tag.startswith("v"):
        candidates.add(tag[1:])
    return candidates


def parse_registry_date(value: Optional[str]) -> Optional[date]:
    """Parse a registry date cell (``YYYY-MM-DD``, ``YYYY/MM/DD`` or a timestamp)."""
    parsed = parse_release_date(value)
    if parsed is not None or not value:
        return parsed
    try:
        return datetime.strptime(value.strip(), "%Y/%m/%d").date()
    except ValueError:
        return None


def _rows_for(owner: str, repo: str, registry: QualificationRegistry) -> List[QualificationEntry]:
    return [entry for entry in registry if entry.org == owner and entry.repo == repo]


def lookup_exact(
    owner: str, repo: str, tag: str, registry: Optional[QualificationRegistry]
) -> Optional[QualificationMatch]:
    """
    Find the registry row qualifying exactly this release tag.

    The first matching row in registry order wins. A row without any URL
    (qualification or release) does not produce a match.
    """
    if not registry:
        return None

    candidates = version_candidates(tag)
    for entry in _rows_for(owner, repo, registry):
        if entry.version in candidates:
            if entry.link is None:
                return None
            return QualificationMatch(url=entry.link, date=entry.date, version=entry.version)
    return None


def lookup_prior(
    owner: str, repo: str, tag: str, registry: Optional[QualificationRegistry]
) -> Optional[QualificationMatch]:
    """
    Find the most recently qualified other version of the repository.

    Rows are ranked by qualification date, falling back to release date;
    rows without a parsable date rank last. When no row has a parsable date
    the first row in registry order is used.
    """
    if not registry:
        return None

    candidates = version_candidates(tag)
    rows = [entry for entry in _rows_for(owner, repo, registry) if entry.version not in candidates]
    if not rows:
        return None

    dated = [(parse_registry_date(entry.date), index) for index, entry in enumerate(rows)]
    if all(parsed is None for parsed, _ in dated):
        chosen = rows[0]
    else:
        # Latest date first; ties keep registry order
        best = max(
            (item for item in dated if item[0] is not None),
            key=lambda item: (item[0], -item[1]),
        )
        chosen = rows[best[1]]

    if chosen.link is None:
        return None
    return QualificationMatch(url=chosen.link, date=chosen.date, version=chosen.version or None)


def resolve_release_badge(
    slug: RepositorySlug,
    release: Optional[Release],
    registry: Optional[QualificationRegistry],
) -> ReleaseBadge:
    """Decide which latest-release badge variant a row gets."""
    if release is None:
        return ReleaseBadge(kind=ReleaseBadgeKind.NO_RELEASE)

    exact = lookup_exact(slug.owner, slug.name, release.tag, registry)
    if exact is not None:
        return ReleaseBadge(kind=ReleaseBadgeKind.QUALIFIED, release=release, match=exact)

    prior = lookup_prior(slug.owner, slug.name, release.tag, registry)
    if prior is not None:
        return ReleaseBadge(kind=ReleaseBadgeKind.PREVIOUSLY_QUALIFIED, release=release, match=prior)

    return ReleaseBadge(kind=ReleaseBadgeKind.RELEASE_ONLY, release=release)

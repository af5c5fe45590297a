"""Release history analysis: latest qualifying release and year-to-date counts."""

import re
from datetime import date, datetime
from typing import Iterable, Optional

from gh_dash.domain.repository import Release

# Accepts "2026-03-15T10:00:00Z" as well as a bare "2026-03-15"
_ISO_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)?$")


def parse_release_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an ISO-8601 release timestamp into a date.

    Args:
        value: Timestamp such as ``2026-03-15T10:00:00Z``

    Returns:
        The calendar date, or None for empty, missing or malformed input
    """
    if not isinstance(value, str) or not value:
        return None
    match = _ISO_DATE_PREFIX.match(value.strip())
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), "%Y-%m-%d").date()
    except ValueError:
        return None


def derive_latest_release(releases: Optional[Iterable[Release]]) -> Optional[Release]:
    """Return the first non-draft, non-prerelease entry in the given order."""
    if not releases:
        return None
    for release in releases:
        if release.is_live:
            return release
    return None


def count_ytd_releases(releases: Optional[Iterable[Release]], today: Optional[date] = None) -> int:
    """
    Count live releases published during the current calendar year.

    Drafts, prereleases and entries without a parsable timestamp are left out.
    ``today`` pins the evaluation date; it defaults to the local date.
    """
    if not releases:
        return 0
    year = (today or date.today()).year

    count = 0
    for release in releases:
        if not release.is_live:
            continue
        published = parse_release_date(release.published_at)
        if published is not None and published.year == year:
            count += 1
    return count

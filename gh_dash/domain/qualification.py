"""Domain entities for the package qualification registry."""

import enum
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from gh_dash.domain.repository import Release
from gh_dash.domain.validation import first_non_empty

REQUIRED_COLUMNS = (
    "org",
    "repo",
    "version",
    "release.url",
    "release.date",
    "qualification.url",
    "qualification.date",
)


@dataclass(frozen=True)
class QualificationEntry:
    """One registry row recording a qualified repository version."""

    org: str
    repo: str
    version: str
    release_url: Optional[str] = None
    release_date: Optional[str] = None
    qualification_url: Optional[str] = None
    qualification_date: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Optional[str]]) -> "QualificationEntry":
        """Build an entry from a row keyed by the registry column names."""
        return cls(
            org=_cell(record.get("org")) or "",
            repo=_cell(record.get("repo")) or "",
            version=_cell(record.get("version")) or "",
            release_url=_cell(record.get("release.url")),
            release_date=_cell(record.get("release.date")),
            qualification_url=_cell(record.get("qualification.url")),
            qualification_date=_cell(record.get("qualification.date")),
        )

    @property
    def link(self) -> Optional[str]:
        return first_non_empty(self.qualification_url, self.release_url)

    @property
    def date(self) -> Optional[str]:
        return first_non_empty(self.qualification_date, self.release_date)


QualificationRegistry = List[QualificationEntry]


@dataclass(frozen=True)
class QualificationMatch:
    """Result of a registry lookup; only the matcher creates these."""

    url: str
    date: Optional[str] = None
    version: Optional[str] = None


class ReleaseBadgeKind(enum.Enum):
    NO_RELEASE = "no_release"
    RELEASE_ONLY = "release_only"
    QUALIFIED = "qualified"
    PREVIOUSLY_QUALIFIED = "previously_qualified"


@dataclass(frozen=True)
class ReleaseBadge:
    """Resolved badge variant for the latest-release column."""

    kind: ReleaseBadgeKind
    release: Optional[Release] = None
    match: Optional[QualificationMatch] = None


def _cell(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_registry(
    records: Optional[Iterable[Mapping[str, Optional[str]]]],
    columns: Optional[Iterable[str]] = None,
) -> Optional[QualificationRegistry]:
    """
    Convert raw registry rows into entries.

    Args:
        records: Rows keyed by column name (e.g. from ``csv.DictReader``)
        columns: Header of the table; defaults to the keys of the first row

    Returns:
        List of entries, or None when the table is empty or any required
        column is missing
    """
    if records is None:
        return None
    rows: List[Dict[str, Optional[str]]] = [dict(record) for record in records]
    if not rows:
        return None

    header = set(columns) if columns is not None else set(rows[0].keys())
    if not all(column in header for column in REQUIRED_COLUMNS):
        return None

    return [QualificationEntry.from_record(row) for row in rows]

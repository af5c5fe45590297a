"""Domain entities for GitHub repository status."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from gh_dash.domain.validation import first_non_empty, sanitize_count, validate_repo_slugs

GITHUB_WEB_URL = "https://github.com"


@dataclass(frozen=True)
class RepositorySlug:
    """Immutable ``owner/repo`` identifier."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "RepositorySlug":
        """Split a validated ``owner/repo`` string."""
        validate_repo_slugs([value])
        owner, name = value.split("/", 1)
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def html_url(self) -> str:
        return f"{GITHUB_WEB_URL}/{self.owner}/{self.name}"

    @property
    def releases_url(self) -> str:
        return f"{self.html_url}/releases"

    @property
    def milestones_url(self) -> str:
        return f"{self.html_url}/milestones"

    def compare_url(self, base: str, head: str) -> str:
        return f"{self.html_url}/compare/{base}...{head}"


@dataclass(frozen=True)
class Release:
    """A published (or draft) release as reported by the API."""

    tag: str
    published_at: Optional[str] = None
    is_draft: bool = False
    is_prerelease: bool = False
    url: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Release":
        """
        Build a release from a REST payload.

        Missing ``draft``/``prerelease`` flags are treated as False and an
        unnamed release falls back to the ``name`` field.
        """
        return cls(
            tag=first_non_empty(payload.get("tag_name"), payload.get("name"), "Unnamed release"),
            published_at=first_non_empty(payload.get("published_at")),
            is_draft=payload.get("draft") is True,
            is_prerelease=payload.get("prerelease") is True,
            url=first_non_empty(payload.get("html_url")),
        )

    @property
    def is_live(self) -> bool:
        return not self.is_draft and not self.is_prerelease


@dataclass(frozen=True)
class Milestone:
    """Open milestone with sanitized issue counts."""

    title: str
    open_count: float = 0
    closed_count: float = 0
    url: Optional[str] = None
    number: Optional[int] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Milestone":
        number = payload.get("number")
        return cls(
            title=first_non_empty(payload.get("title"), "Unnamed milestone"),
            open_count=sanitize_count(payload.get("open_issues")),
            closed_count=sanitize_count(payload.get("closed_issues")),
            url=first_non_empty(payload.get("html_url")),
            number=int(sanitize_count(number)) if number is not None else None,
        )

    @property
    def total(self) -> float:
        return self.open_count + self.closed_count


@dataclass(frozen=True)
class BranchComparison:
    """Ahead/behind counts of a head branch relative to a base branch."""

    ahead_by: float = 0
    behind_by: float = 0

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "BranchComparison":
        return cls(
            ahead_by=sanitize_count(payload.get("ahead_by")),
            behind_by=sanitize_count(payload.get("behind_by")),
        )


OUTPUT_COLUMNS = (
    "repo",
    "latest_release",
    "upcoming_milestones",
    "dev_branch_status",
    "ytd_releases",
)


@dataclass(frozen=True)
class ReportRow:
    """One rendered output row; every field is an HTML fragment."""

    repo: str
    latest_release: str
    upcoming_milestones: str
    dev_branch_status: str
    ytd_releases: str

    def as_dict(self) -> Dict[str, str]:
        return {column: getattr(self, column) for column in OUTPUT_COLUMNS}

"""HTML fragment builders for the repository status table.

Every function here is pure: output depends only on its arguments and the
``BadgeTheme`` passed in.
"""

import enum
import html
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from gh_dash.domain.qualification import QualificationMatch, ReleaseBadge, ReleaseBadgeKind
from gh_dash.domain.repository import BranchComparison, Milestone, ReportRow, RepositorySlug
from gh_dash.domain.validation import Number, first_non_empty

SHIELD_ENTITY = "&#128737;"


class BadgeVariant(enum.Enum):
    SKY = "sky"
    EMERALD = "emerald"
    SLATE = "slate"


@dataclass(frozen=True)
class BadgeTheme:
    """CSS classes and colours used by the badge builders."""

    sky_class: str = "badge badge--sky"
    emerald_class: str = "badge badge--emerald"
    slate_class: str = "badge badge--slate"
    milestone_class: str = "badge badge--milestone"
    progress_fill: str = "#38bdf8"
    progress_remainder: str = "#e0f2fe"

    def css_class(self, variant: BadgeVariant) -> str:
        return {
            BadgeVariant.SKY: self.sky_class,
            BadgeVariant.EMERALD: self.emerald_class,
            BadgeVariant.SLATE: self.slate_class,
        }[variant]


DEFAULT_THEME = BadgeTheme()


def _escape(value: str) -> str:
    return html.escape(value, quote=True)


def format_count(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def anchor(href: str, inner_html: str) -> str:
    """Wrap already-rendered HTML in a link."""
    return f'<a href="{_escape(href)}">{inner_html}</a>'


def badge_label(
    text: str, title: str, variant: BadgeVariant = BadgeVariant.SKY, theme: BadgeTheme = DEFAULT_THEME
) -> str:
    return '<span class="{}" title="{}">{}</span>'.format(
        theme.css_class(variant), _escape(title), _escape(text)
    )


def milestone_label(text: str, tooltip: str, completion: float, theme: BadgeTheme = DEFAULT_THEME) -> str:
    """Badge whose background is filled left to right by ``completion`` (0-1)."""
    completion = max(0.0, min(1.0, completion)) if math.isfinite(completion) else 0.0
    percent = round(completion * 100, 1)
    background = "linear-gradient(90deg, {fill} 0%, {fill} {p:.1f}%, {rest} {p:.1f}%, {rest} 100%)".format(
        fill=theme.progress_fill, rest=theme.progress_remainder, p=percent
    )
    return '<span class="{}" title="{}" style="background:{};">{}</span>'.format(
        theme.milestone_class, _escape(tooltip), background, _escape(text)
    )


def format_repo_link(slug: RepositorySlug) -> str:
    return anchor(slug.html_url, _escape(slug.full_name))


def qualification_title(date: Optional[str]) -> str:
    if not date:
        return "Package qualified"
    return f"Package qualified on {date}"


def prior_qualification_title(date: Optional[str], version: Optional[str]) -> str:
    base = f"Previously qualified (version {version or 'unknown'})"
    if not date:
        return base
    return f"{base} on {date}"


def qualification_badge(
    match: QualificationMatch, title: str, variant: BadgeVariant, theme: BadgeTheme = DEFAULT_THEME
) -> str:
    label = '<span class="{}" title="{}">{}</span>'.format(
        theme.css_class(variant), _escape(title), SHIELD_ENTITY
    )
    return anchor(match.url, label)


def format_release_summary(
    slug: RepositorySlug, badge: ReleaseBadge, theme: BadgeTheme = DEFAULT_THEME
) -> str:
    """
    Render the latest-release cell.

    A missing release links to the releases listing. Otherwise the tag badge
    links to the release page and is followed by a qualification shield
    for qualified and previously qualified variants.
    """
    if badge.kind is ReleaseBadgeKind.NO_RELEASE or badge.release is None:
        label = badge_label("No release", "No published release found", BadgeVariant.SLATE, theme)
        return anchor(slug.releases_url, label)

    release = badge.release
    if release.published_at:
        title = f"Released {release.published_at[:10]}"
    else:
        title = "Release date unavailable"
    target = first_non_empty(release.url, f"{slug.releases_url}/tag/{release.tag}")
    parts = [anchor(target, badge_label(release.tag, title, BadgeVariant.EMERALD, theme))]

    if badge.kind is ReleaseBadgeKind.QUALIFIED and badge.match is not None:
        parts.append(
            qualification_badge(
                badge.match, qualification_title(badge.match.date), BadgeVariant.EMERALD, theme
            )
        )
    elif badge.kind is ReleaseBadgeKind.PREVIOUSLY_QUALIFIED and badge.match is not None:
        parts.append(
            qualification_badge(
                badge.match,
                prior_qualification_title(badge.match.date, badge.match.version),
                BadgeVariant.SLATE,
                theme,
            )
        )

    return " ".join(parts)


def format_single_milestone(
    slug: RepositorySlug, milestone: Milestone, theme: BadgeTheme = DEFAULT_THEME
) -> Optional[str]:
    """Progress badge for one milestone; None when it has no issues."""
    total = milestone.total
    if total <= 0:
        return None

    tooltip = "{}: {} open of {}".format(
        milestone.title, format_count(milestone.open_count), format_count(total)
    )
    label = milestone_label(milestone.title, tooltip, milestone.closed_count / total, theme)

    if milestone.url:
        target = milestone.url
    elif milestone.number is not None:
        target = f"{slug.html_url}/milestone/{milestone.number}"
    else:
        target = slug.milestones_url
    return anchor(target, label)


def format_milestone_summary(
    slug: RepositorySlug, milestones: Optional[Iterable[Milestone]], theme: BadgeTheme = DEFAULT_THEME
) -> str:
    entries = []
    for milestone in milestones or []:
        entry = format_single_milestone(slug, milestone, theme)
        if entry:
            entries.append(entry)

    if not entries:
        label = badge_label("None", "No open milestones", BadgeVariant.SLATE, theme)
        return anchor(slug.milestones_url, label)
    return " ".join(entries)


def branch_status_text(comparison: Optional[BranchComparison]) -> str:
    """Describe how far the head branch is ahead of/behind the base."""
    if comparison is None:
        return "Unavailable"

    ahead, behind = comparison.ahead_by, comparison.behind_by
    if ahead == 0 and behind == 0:
        return "In sync"
    if ahead > 0 and behind == 0:
        return f"+{format_count(ahead)}"
    if behind > 0 and ahead == 0:
        return f"-{format_count(behind)}"
    if ahead > 0 and behind > 0:
        return f"+{format_count(ahead)}, -{format_count(behind)}"
    return "Unavailable"


def format_branch_comparison(
    slug: RepositorySlug, comparison: Optional[BranchComparison], base: str = "main", head: str = "dev"
) -> str:
    return anchor(slug.compare_url(base, head), _escape(branch_status_text(comparison)))


def format_ytd_releases(slug: RepositorySlug, count: int) -> str:
    """Year-to-date count, always linked to the releases listing."""
    return anchor(slug.releases_url, str(count))


def build_report_row(
    slug: RepositorySlug,
    release_badge: ReleaseBadge,
    milestones: Optional[Iterable[Milestone]],
    comparison: Optional[BranchComparison],
    ytd_count: int,
    theme: BadgeTheme = DEFAULT_THEME,
    base: str = "main",
    head: str = "dev",
) -> ReportRow:
    return ReportRow(
        repo=format_repo_link(slug),
        latest_release=format_release_summary(slug, release_badge, theme),
        upcoming_milestones=format_milestone_summary(slug, milestones, theme),
        dev_branch_status=format_branch_comparison(slug, comparison, base, head),
        ytd_releases=format_ytd_releases(slug, ytd_count),
    )

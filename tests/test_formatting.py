"""Tests for the HTML fragment builders."""

from gh_dash.application.formatting import (
    BadgeTheme,
    BadgeVariant,
    badge_label,
    branch_status_text,
    build_report_row,
    format_branch_comparison,
    format_milestone_summary,
    format_release_summary,
    format_repo_link,
    format_ytd_releases,
    milestone_label,
    prior_qualification_title,
    qualification_title,
)
from gh_dash.domain.qualification import QualificationMatch, ReleaseBadge, ReleaseBadgeKind
from gh_dash.domain.repository import BranchComparison, Milestone, Release, RepositorySlug

SLUG = RepositorySlug("org", "repo")
RELEASE = Release(
    tag="v1.0.0",
    published_at="2025-01-01T12:00:00Z",
    url="https://github.com/org/repo/releases/tag/v1.0.0",
)


class TestBadgeLabel:
    def test_variant_classes(self):
        assert 'class="badge badge--emerald"' in badge_label("x", "t", BadgeVariant.EMERALD)
        assert 'class="badge badge--slate"' in badge_label("x", "t", BadgeVariant.SLATE)
        assert 'class="badge badge--sky"' in badge_label("x", "t")

    def test_escapes_text_and_title(self):
        label = badge_label("<b>", 'say "hi"', BadgeVariant.SKY)
        assert "&lt;b&gt;" in label
        assert "&quot;hi&quot;" in label

    def test_custom_theme(self):
        theme = BadgeTheme(emerald_class="pill pill-green")
        assert 'class="pill pill-green"' in badge_label("x", "t", BadgeVariant.EMERALD, theme)


class TestMilestoneLabel:
    def test_fill_percentage(self):
        label = milestone_label("M", "tip", 0.4)
        assert "#38bdf8 40.0%" in label
        assert "#e0f2fe 40.0%" in label
        assert 'class="badge badge--milestone"' in label

    def test_completion_is_clamped(self):
        assert "#38bdf8 100.0%" in milestone_label("M", "tip", 3.0)
        assert "#38bdf8 0.0%" in milestone_label("M", "tip", -1.0)
        assert "#38bdf8 0.0%" in milestone_label("M", "tip", float("nan"))


class TestRepoLink:
    def test_link(self):
        assert format_repo_link(SLUG) == '<a href="https://github.com/org/repo">org/repo</a>'


class TestReleaseSummary:
    def test_no_release(self):
        result = format_release_summary(SLUG, ReleaseBadge(kind=ReleaseBadgeKind.NO_RELEASE))
        assert result.startswith('<a href="https://github.com/org/repo/releases">')
        assert "No release" in result
        assert "badge--slate" in result

    def test_release_only(self):
        result = format_release_summary(
            SLUG, ReleaseBadge(kind=ReleaseBadgeKind.RELEASE_ONLY, release=RELEASE)
        )
        assert result.startswith('<a href="https://github.com/org/repo/releases/tag/v1.0.0">')
        assert 'title="Released 2025-01-01"' in result
        assert "badge--emerald" in result
        assert "&#128737;" not in result

    def test_release_without_url_or_date(self):
        release = Release(tag="v2.0.0")
        result = format_release_summary(
            SLUG, ReleaseBadge(kind=ReleaseBadgeKind.RELEASE_ONLY, release=release)
        )
        assert '<a href="https://github.com/org/repo/releases/tag/v2.0.0">' in result
        assert "Release date unavailable" in result

    def test_qualified_badge(self):
        match = QualificationMatch(url="https://q/qualification_v1_0_0.md", date="2025-01-15")
        result = format_release_summary(
            SLUG, ReleaseBadge(kind=ReleaseBadgeKind.QUALIFIED, release=RELEASE, match=match)
        )
        assert result.startswith('<a href="https://github.com/org/repo/releases/tag/v1.0.0">')
        shield = result.split("</a> ", 1)[1]
        assert shield == (
            '<a href="https://q/qualification_v1_0_0.md">'
            '<span class="badge badge--emerald" title="Package qualified on 2025-01-15">&#128737;</span></a>'
        )

    def test_previously_qualified_badge(self):
        match = QualificationMatch(url="https://q/qualification_v1_0_0.md", date="2025-01-15", version="v1.0.0")
        release = Release(tag="v1.1.0", published_at="2025-02-01T12:00:00Z")
        result = format_release_summary(
            SLUG, ReleaseBadge(kind=ReleaseBadgeKind.PREVIOUSLY_QUALIFIED, release=release, match=match)
        )
        assert "badge--slate" in result
        assert "&#128737;" in result
        assert "qualification_v1_0_0" in result
        assert "Previously qualified (version v1.0.0) on 2025-01-15" in result


class TestQualificationTitles:
    def test_qualified(self):
        assert qualification_title("2025-01-15") == "Package qualified on 2025-01-15"
        assert qualification_title(None) == "Package qualified"
        assert qualification_title("") == "Package qualified"

    def test_prior(self):
        assert prior_qualification_title(None, "v1.0.0") == "Previously qualified (version v1.0.0)"
        assert prior_qualification_title("2025-01-15", None) == (
            "Previously qualified (version unknown) on 2025-01-15"
        )


class TestMilestoneSummary:
    def test_open_of_total(self):
        milestones = [
            Milestone(title="Milestone A", open_count=3, closed_count=2,
                      url="https://github.com/org/repo/milestone/1"),
            Milestone(title="Backlog"),
        ]
        result = format_milestone_summary(SLUG, milestones)
        assert result.startswith('<a href="https://github.com/org/repo/milestone/1">')
        assert "Milestone A: 3 open of 5" in result
        assert "Backlog" not in result
        assert "#38bdf8 40.0%" in result

    def test_falls_back_to_milestone_number(self):
        result = format_milestone_summary(SLUG, [Milestone(title="M", open_count=1, number=7)])
        assert '<a href="https://github.com/org/repo/milestone/7">' in result

    def test_falls_back_to_listing(self):
        result = format_milestone_summary(SLUG, [Milestone(title="M", open_count=1)])
        assert '<a href="https://github.com/org/repo/milestones">' in result

    def test_multiple_joined_by_space(self):
        milestones = [
            Milestone(title="A", open_count=1, url="https://a"),
            Milestone(title="B", closed_count=1, url="https://b"),
        ]
        result = format_milestone_summary(SLUG, milestones)
        assert result.count("<a ") == 2
        assert "</a> <a" in result

    def test_none_placeholder(self):
        for milestones in (None, [], [Milestone(title="Empty")]):
            result = format_milestone_summary(SLUG, milestones)
            assert result.startswith('<a href="https://github.com/org/repo/milestones">')
            assert ">None</span>" in result
            assert 'title="No open milestones"' in result


class TestBranchComparison:
    def test_status_text(self):
        assert branch_status_text(BranchComparison(2, 1)) == "+2, -1"
        assert branch_status_text(BranchComparison(0, 0)) == "In sync"
        assert branch_status_text(BranchComparison(0, 3)) == "-3"
        assert branch_status_text(BranchComparison(4, 0)) == "+4"
        assert branch_status_text(None) == "Unavailable"

    def test_link(self):
        assert format_branch_comparison(SLUG, BranchComparison(2, 1)) == (
            '<a href="https://github.com/org/repo/compare/main...dev">+2, -1</a>'
        )


class TestYtdReleases:
    def test_zero_is_still_a_link(self):
        assert format_ytd_releases(SLUG, 0) == '<a href="https://github.com/org/repo/releases">0</a>'

    def test_count(self):
        assert format_ytd_releases(SLUG, 12) == '<a href="https://github.com/org/repo/releases">12</a>'


class TestBuildReportRow:
    def test_all_fields(self):
        row = build_report_row(
            SLUG,
            ReleaseBadge(kind=ReleaseBadgeKind.NO_RELEASE),
            None,
            None,
            0,
        )
        assert row.repo == '<a href="https://github.com/org/repo">org/repo</a>'
        assert "No release" in row.latest_release
        assert "None" in row.upcoming_milestones
        assert row.dev_branch_status.endswith(">Unavailable</a>")
        assert row.ytd_releases.endswith(">0</a>")

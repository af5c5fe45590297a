"""Application service that assembles the repository status table."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import List, Optional, Sequence

from gh_dash.application.formatting import DEFAULT_THEME, BadgeTheme, build_report_row
from gh_dash.application.qualification_matcher import resolve_release_badge
from gh_dash.application.release_analyzer import count_ytd_releases, derive_latest_release
from gh_dash.domain.qualification import QualificationRegistry
from gh_dash.domain.repository import ReportRow, RepositorySlug
from gh_dash.domain.validation import validate_repo_slugs
from gh_dash.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)


class SummaryService:
    """Service for summarizing the status of a list of GitHub repositories."""

    BASE_BRANCH = "main"
    HEAD_BRANCH = "dev"
    DEFAULT_MAX_WORKERS = 4
    FETCHES_PER_REPOSITORY = 4

    def __init__(
        self,
        github_client: GitHubRestClient,
        max_workers: Optional[int] = None,
        theme: BadgeTheme = DEFAULT_THEME,
    ):
        """
        Initialize summary service.

        Args:
            github_client: GitHub API client
            max_workers: Repositories processed in parallel. If None, uses
                GH_DASH_MAX_WORKERS. 1 processes repositories sequentially.
            theme: Badge classes and colours for the rendered fragments
        """
        if max_workers is None:
            max_workers = int(os.getenv("GH_DASH_MAX_WORKERS", self.DEFAULT_MAX_WORKERS))

        self.github_client = github_client
        self.max_workers = max(1, max_workers)
        self.theme = theme

    def summarize_repositories(
        self,
        repos: Sequence[str],
        registry: Optional[QualificationRegistry] = None,
    ) -> List[ReportRow]:
        """
        Build one status row per repository.

        Args:
            repos: ``owner/repo`` identifiers; output keeps this order
            registry: Qualification registry snapshot, shared read-only

        Returns:
            Rows in input order, one per identifier

        Raises:
            ValidationError: If any identifier is malformed (before any fetch)
            GitHubAPIError: If any fetch fails for a reason other than 403/404
        """
        validate_repo_slugs(repos)
        slugs = [RepositorySlug.parse(repo) for repo in repos]

        logger.info(f"Summarizing {len(slugs)} repositories")

        if self.max_workers == 1:
            rows = [self.summarize_repository(slug, registry) for slug in slugs]
        else:
            rows = self._summarize_parallel(slugs, registry)

        logger.info(f"Summary completed for {len(rows)} repositories")
        return rows

    def _summarize_parallel(
        self,
        slugs: List[RepositorySlug],
        registry: Optional[QualificationRegistry],
    ) -> List[ReportRow]:
        results: List[ReportRow] = [None] * len(slugs)  # type: ignore[list-item]

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="gh-dash-repo")
        try:
            future_to_index = {
                executor.submit(self.summarize_repository, slug, registry): index
                for index, slug in enumerate(slugs)
            }
            done, _ = wait(future_to_index, return_when=FIRST_EXCEPTION)

            for future in done:
                error = future.exception()
                if error is not None:
                    logger.error(f"Aborting run: {slugs[future_to_index[future]].full_name} failed: {error}")
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise error

            for future, index in future_to_index.items():
                results[index] = future.result()
        finally:
            executor.shutdown(wait=True)

        return results

    def summarize_repository(
        self,
        slug: RepositorySlug,
        registry: Optional[QualificationRegistry] = None,
    ) -> ReportRow:
        """Fetch the four status signals for one repository and format its row."""
        owner, name = slug.owner, slug.name
        client = self.github_client

        with ThreadPoolExecutor(
            max_workers=self.FETCHES_PER_REPOSITORY, thread_name_prefix="gh-dash-fetch"
        ) as executor:
            latest_future = executor.submit(client.fetch_latest_release, owner, name)
            history_future = executor.submit(client.fetch_releases, owner, name)
            milestones_future = executor.submit(client.fetch_open_milestones, owner, name)
            comparison_future = executor.submit(
                client.fetch_branch_comparison, owner, name, self.BASE_BRANCH, self.HEAD_BRANCH
            )
            futures = [latest_future, history_future, milestones_future, comparison_future]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
            for future in done:
                if future.exception() is not None:
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise future.exception()

            latest = latest_future.result()
            history = history_future.result()
            milestones = milestones_future.result()
            comparison = comparison_future.result()

        if latest is None:
            latest = derive_latest_release(history)

        row = build_report_row(
            slug,
            resolve_release_badge(slug, latest, registry),
            milestones,
            comparison,
            count_ytd_releases(history),
            theme=self.theme,
            base=self.BASE_BRANCH,
            head=self.HEAD_BRANCH,
        )
        logger.info(f"Summarized {slug.full_name}")
        return row

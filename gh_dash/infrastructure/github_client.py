"""GitHub REST API client with a uniform soft/hard failure policy."""

import base64
import binascii
import logging
import os
import threading
from typing import Any, Dict, List, Optional

import requests

from gh_dash.domain.repository import BranchComparison, Milestone, Release

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Raised for failures that must abort the whole run."""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class RequestBudgetExceeded(GitHubAPIError):
    """Raised when a client has spent its request budget for the run."""
    pass


class RequestBudget:
    """Thread-safe cap on the number of requests issued in one run."""

    def __init__(self, max_requests: int):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.used = 0
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        with self._lock:
            return self.max_requests - self.used

    def consume(self, path: str):
        with self._lock:
            if self.used >= self.max_requests:
                raise RequestBudgetExceeded(
                    f"Request budget of {self.max_requests} exhausted before GET {path}",
                    path=path,
                )
            self.used += 1


class GitHubRestClient:
    """Client for the GitHub REST endpoints used by the status report."""

    API_URL = "https://api.github.com"
    DEFAULT_TIMEOUT_SECONDS = 10.0
    MILESTONES_PER_PAGE = 100

    PERMISSION_HINT = (
        "Provide a PAT with repo + issues (read) scope for private repos."
    )

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        budget: Optional[RequestBudget] = None,
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: GitHub personal access token. If None, uses GITHUB_TOKEN env var.
            api_url: API base URL. If None, uses GH_DASH_API_URL or the public API.
            timeout: Per-request timeout in seconds. If None, uses GH_DASH_TIMEOUT.
            budget: Optional cap on the number of requests for this run.
        """
        if token is None:
            token = os.getenv("GITHUB_TOKEN")
        if api_url is None:
            api_url = os.getenv("GH_DASH_API_URL", self.API_URL)
        if timeout is None:
            timeout = float(os.getenv("GH_DASH_TIMEOUT", self.DEFAULT_TIMEOUT_SECONDS))

        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.budget = budget
        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

        # Anonymous access when no token is available
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    def safe_get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        repo_label: Optional[str] = None,
    ) -> Optional[Any]:
        """
        Issue one GET request and classify the outcome.

        Args:
            path: API path relative to the base URL
            params: Query parameters
            repo_label: ``owner/repo`` used in the permission warning

        Returns:
            Decoded JSON body, or None when the resource is absent (404) or
            access was denied (403)

        Raises:
            GitHubAPIError: On network errors, timeouts, non-JSON bodies and
                every other non-2xx status
        """
        if self.budget is not None:
            self.budget.consume(path)

        url = f"{self.api_url}{path}"
        try:
            response = requests.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"GET {path} failed: {e}", path=path) from e

        if response.status_code == 404:
            logger.debug(f"GET {path} returned 404; treating as absent")
            return None

        if response.status_code == 403:
            message = "GitHub API returned 403 (permission denied)"
            if repo_label:
                message += f" for {repo_label}"
            if response.headers.get("X-RateLimit-Remaining") == "0":
                message += " (rate limit exhausted)"
            logger.warning(f"{message}; falling back to empty result. {self.PERMISSION_HINT}")
            return None

        if not 200 <= response.status_code < 300:
            raise GitHubAPIError(
                f"GET {path} returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                path=path,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                f"GET {path} returned a malformed JSON body",
                status_code=response.status_code,
                path=path,
            ) from e

    def fetch_latest_release(self, owner: str, repo: str) -> Optional[Release]:
        """Fetch the latest published release, or None if there is none."""
        path = f"/repos/{owner}/{repo}/releases/latest"
        data = self.safe_get(path, repo_label=f"{owner}/{repo}")
        if data is None:
            return None
        return Release.from_api(self._expect(data, dict, path))

    def fetch_releases(self, owner: str, repo: str) -> Optional[List[Release]]:
        """Fetch the release history as returned by the API (newest first)."""
        path = f"/repos/{owner}/{repo}/releases"
        data = self.safe_get(path, repo_label=f"{owner}/{repo}")
        if data is None:
            return None
        return [Release.from_api(item) for item in self._expect_items(data, path)]

    def fetch_open_milestones(self, owner: str, repo: str) -> Optional[List[Milestone]]:
        """Fetch open milestones for a repository."""
        path = f"/repos/{owner}/{repo}/milestones"
        params = {"state": "open", "per_page": self.MILESTONES_PER_PAGE}
        data = self.safe_get(path, params=params, repo_label=f"{owner}/{repo}")
        if data is None:
            return None
        return [Milestone.from_api(item) for item in self._expect_items(data, path)]

    def fetch_branch_comparison(
        self, owner: str, repo: str, base: str, head: str
    ) -> Optional[BranchComparison]:
        """Compare ``head`` against ``base``; None if either branch is missing."""
        path = f"/repos/{owner}/{repo}/compare/{base}...{head}"
        data = self.safe_get(path, repo_label=f"{owner}/{repo}")
        if data is None:
            return None
        return BranchComparison.from_api(self._expect(data, dict, path))

    def fetch_file_contents(
        self, owner: str, repo: str, path: str, ref: Optional[str] = None
    ) -> Optional[str]:
        """
        Fetch a file through the contents API and decode it as UTF-8 text.

        Returns None when the file is absent, inaccessible, or its content
        cannot be decoded.
        """
        api_path = f"/repos/{owner}/{repo}/contents/{path}"
        params = {"ref": ref} if ref else None
        data = self.safe_get(api_path, params=params, repo_label=f"{owner}/{repo}")
        if not isinstance(data, dict) or not data.get("content"):
            return None

        try:
            return base64.b64decode(data["content"]).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, TypeError) as e:
            logger.warning(f"Could not decode contents of {owner}/{repo}/{path}: {e}")
            return None

    @staticmethod
    def _expect(data: Any, kind: type, path: str) -> Any:
        if not isinstance(data, kind):
            raise GitHubAPIError(
                f"GET {path} returned {type(data).__name__}, expected {kind.__name__}",
                path=path,
            )
        return data

    @classmethod
    def _expect_items(cls, data: Any, path: str) -> List[Dict[str, Any]]:
        items = cls._expect(data, list, path)
        if not all(isinstance(item, dict) for item in items):
            raise GitHubAPIError(f"GET {path} returned a list with non-object items", path=path)
        return items

"""Loading the qualification registry CSV from a URL or a local file."""

import csv
import io
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

import requests

from gh_dash.domain.qualification import QualificationRegistry, normalize_registry
from gh_dash.infrastructure.github_client import GitHubAPIError, GitHubRestClient

logger = logging.getLogger(__name__)

_RAW_URL = re.compile(r"^https?://raw\.githubusercontent\.com/([^/]+)/([^/]+)/([^/]+)/(.+)$")
_BLOB_URL = re.compile(r"^https?://github\.com/([^/]+)/([^/]+)/blob/([^/]+)/(.+)$")

DOWNLOAD_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class GitHubFileRef:
    """Location of a file inside a GitHub repository."""

    owner: str
    repo: str
    ref: str
    path: str


def default_registry_source() -> str:
    return os.getenv("GH_DASH_QUAL_REGISTRY_URL", "")


def parse_github_file_url(url: str) -> Optional[GitHubFileRef]:
    """Split a ``raw.githubusercontent.com`` or ``github.com/.../blob`` URL."""
    for pattern in (_RAW_URL, _BLOB_URL):
        match = pattern.match(url)
        if match:
            owner, repo, ref, path = match.groups()
            return GitHubFileRef(owner=owner, repo=repo, ref=ref, path=path)
    return None


def parse_registry_csv(text: str) -> Optional[QualificationRegistry]:
    """Parse registry CSV text; None if the table lacks a required column."""
    reader = csv.DictReader(io.StringIO(text))
    rows = list(reader)
    return normalize_registry(rows, columns=reader.fieldnames or [])


def _read_local(path: str) -> Optional[str]:
    try:
        with open(path, "r", newline="", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read qualification registry {path}: {e}")
        return None


def _download(url: str) -> Optional[str]:
    try:
        timeout = float(os.getenv("GH_DASH_TIMEOUT", DOWNLOAD_TIMEOUT_SECONDS))
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.text
    except requests.exceptions.RequestException as e:
        logger.warning(f"Direct download of qualification registry failed: {e}")
        return None


def _fetch_via_api(url: str, client: GitHubRestClient) -> Optional[str]:
    file_ref = parse_github_file_url(url)
    if file_ref is None:
        return None
    logger.info(f"Fetching qualification registry through the contents API: {file_ref.owner}/{file_ref.repo}")
    try:
        return client.fetch_file_contents(file_ref.owner, file_ref.repo, file_ref.path, ref=file_ref.ref)
    except GitHubAPIError as e:
        logger.warning(f"Contents API fetch of qualification registry failed: {e}")
        return None


def load_qualification_registry(
    source: Optional[str] = None,
    token: Optional[str] = None,
    client: Optional[GitHubRestClient] = None,
) -> Optional[QualificationRegistry]:
    """
    Load the qualification registry.

    Args:
        source: URL or local path of the registry CSV. If None, uses
            GH_DASH_QUAL_REGISTRY_URL.
        token: GitHub token for the contents-API fallback (private repos)
        client: Client for the contents-API fallback; built from ``token``
            when omitted

    Returns:
        Registry entries, or None when no source is configured or the table
        cannot be read or is missing required columns
    """
    if source is None:
        source = default_registry_source()
    if not source:
        return None

    if not re.match(r"^https?://", source):
        text = _read_local(source)
    else:
        text = _download(source)
        if text is None:
            text = _fetch_via_api(source, client or GitHubRestClient(token=token))

    if text is None:
        return None

    try:
        registry = parse_registry_csv(text)
    except csv.Error as e:
        logger.warning(f"Qualification registry is not valid CSV: {e}")
        return None

    if registry is None:
        logger.warning("Qualification registry is empty or missing required columns; ignoring it")
        return None

    logger.info(f"Loaded {len(registry)} qualification registry entries")
    return registry

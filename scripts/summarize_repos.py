#!/usr/bin/env python3
"""Script to summarize GitHub repository status and dump it to CSV and JSON."""

import argparse
import logging
import os
import re
import sys
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from gh_dash.application.summary_service import SummaryService
from gh_dash.infrastructure.github_client import GitHubRestClient, RequestBudget
from gh_dash.infrastructure.qualification_registry import load_qualification_registry
from gh_dash.infrastructure.report_export import write_rows_csv, write_rows_json

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Summarize GitHub repository status.")
    parser.add_argument(
        "repos",
        nargs="*",
        help="Repositories as owner/repo. Defaults to GH_DASH_REPOS.",
    )
    parser.add_argument(
        "--registry",
        default=None,
        help="Qualification registry CSV URL or path. Defaults to GH_DASH_QUAL_REGISTRY_URL.",
    )
    parser.add_argument(
        "--output-dir",
        default=os.getenv("OUTPUT_DIR", "artifacts"),
        help="Directory for the CSV and JSON output.",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Summarize repositories and write the status table."""
    args = parse_args(argv)
    try:
        repos = args.repos or [r for r in re.split(r"[\s,]+", os.getenv("GH_DASH_REPOS", "")) if r]

        github_token = os.getenv("GITHUB_TOKEN")
        if not github_token:
            logger.warning("GITHUB_TOKEN not found. Using unauthenticated requests (limited rate).")

        max_requests = os.getenv("GH_DASH_MAX_REQUESTS")
        budget = RequestBudget(int(max_requests)) if max_requests else None

        github_client = GitHubRestClient(token=github_token, budget=budget)
        registry = load_qualification_registry(args.registry, client=github_client)

        service = SummaryService(github_client)
        rows = service.summarize_repositories(repos, registry=registry)

        os.makedirs(args.output_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        csv_file = os.path.join(args.output_dir, f"status_{timestamp}.csv")
        json_file = os.path.join(args.output_dir, f"status_{timestamp}.json")

        write_rows_csv(rows, csv_file)
        write_rows_json(rows, json_file)

        logger.info(f"Status summary completed. Files: {csv_file}, {json_file}")
        return 0

    except Exception as e:
        logger.error(f"Status summary failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

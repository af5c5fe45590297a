"""Writing the status table to CSV and JSON."""

import csv
import json
import logging
from typing import List

from gh_dash.domain.repository import OUTPUT_COLUMNS, ReportRow

logger = logging.getLogger(__name__)


def write_rows_csv(rows: List[ReportRow], output_file: str):
    """Write rows to CSV with the report column order."""
    with open(output_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=list(OUTPUT_COLUMNS))
        writer.writeheader()
        writer.writerows(row.as_dict() for row in rows)

    logger.info(f"Wrote {len(rows)} rows to {output_file}")


def write_rows_json(rows: List[ReportRow], output_file: str):
    """Write rows to JSON as a list of objects."""
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump([row.as_dict() for row in rows], f, indent=2, ensure_ascii=False)

    logger.info(f"Wrote {len(rows)} rows to {output_file}")

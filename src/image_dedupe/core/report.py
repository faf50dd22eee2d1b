"""Durable JSON record of a duplicate-detection run."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from image_dedupe.core.models import DeletionResult, DuplicateGroup

logger = logging.getLogger(__name__)

REPORT_PREFIX = "duplicate-images-report"


def iso_timestamp(moment: datetime) -> str:
    """Format as ISO-8601 UTC with milliseconds, e.g. 2024-05-01T12:30:00.123Z."""
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class ReportWriter:
    """Writes one report file per run into an output directory."""

    def __init__(self, output_dir: Path):
        """
        Initialize the report writer.

        Args:
            output_dir: Directory for report files (created on write if missing)
        """
        self.output_dir = Path(output_dir)

    def write(
        self,
        groups: Sequence[DuplicateGroup],
        deleted_files: Sequence[Path],
        failed_deletions: Sequence[DeletionResult] = (),
        timestamp: Optional[datetime] = None,
    ) -> Path:
        """
        Write the run report.

        Args:
            groups: Duplicate groups found (may be empty)
            deleted_files: Files actually removed (may be empty)
            failed_deletions: Deletions that were attempted but failed
            timestamp: Run completion time (default: now)

        Returns:
            Path of the written report

        Raises:
            OSError: If the directory or file cannot be written
        """
        timestamp = timestamp or datetime.now(timezone.utc)

        report = {
            "duplicateGroups": [group.to_list() for group in groups],
            "deletedFiles": [str(p) for p in deleted_files],
            "failedDeletions": [
                {"path": str(r.path), "error": r.error} for r in failed_deletions
            ],
            "timestamp": iso_timestamp(timestamp),
        }

        logger.debug(f"Creating output directory: {self.output_dir}")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        report_path = self._report_path(timestamp)
        logger.debug(f"Writing report to {report_path}")
        with open(report_path, "x", encoding="utf-8") as f:
            json.dump(report, f, indent=2)

        logger.info(f"Duplicate images report saved to: {report_path}")
        return report_path

    def _report_path(self, timestamp: datetime) -> Path:
        """Timestamped file name, suffixed with a counter if it already exists."""
        stamp = timestamp.astimezone().strftime("%Y%m%d-%H%M%S")
        report_path = self.output_dir / f"{REPORT_PREFIX}-{stamp}.json"

        counter = 1
        while report_path.exists():
            report_path = self.output_dir / f"{REPORT_PREFIX}-{stamp}-{counter}.json"
            counter += 1

        return report_path

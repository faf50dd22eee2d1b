"""End-to-end duplicate image run: scan, group, resolve, report."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from image_dedupe.core.comparator import PairwiseComparator
from image_dedupe.core.deleter import FileDeleter
from image_dedupe.core.grouper import DuplicateGrouper
from image_dedupe.core.models import Candidate, DeletionResult, RunReport
from image_dedupe.core.report import ReportWriter
from image_dedupe.core.resolver import DuplicateResolver, KeepChooser, RetentionPolicy
from image_dedupe.core.scanner import ImageScanner
from image_dedupe.utils.config import Config

logger = logging.getLogger(__name__)


class DuplicateFinder:
    """Runs one duplicate-image invocation against a directory."""

    def __init__(
        self,
        config: Config,
        comparator: Optional[PairwiseComparator] = None,
        deleter: Optional[FileDeleter] = None,
        report_writer: Optional[ReportWriter] = None,
        show_progress: bool = True,
    ):
        """
        Initialize the finder.

        Args:
            config: Configuration instance
            comparator: Pairwise comparator (built from config if None)
            deleter: File deleter (built from config if None)
            report_writer: Report writer (writes to config 'report_dir' if None)
            show_progress: Show progress bars
        """
        self.config = config
        self.show_progress = show_progress
        self.comparator = comparator or PairwiseComparator(config.comparator_config())
        self.scanner = ImageScanner(config, show_progress=show_progress)
        self.grouper = DuplicateGrouper(
            self.comparator,
            strategy=config.get("grouping.strategy", "anchor"),
            show_progress=show_progress,
        )
        self.resolver = DuplicateResolver(deleter or FileDeleter(config))
        self.report_writer = report_writer or ReportWriter(config.get_report_dir())

    def run(
        self,
        directory: Path,
        policy: RetentionPolicy,
        chooser: Optional[KeepChooser] = None,
        recursive: bool = False,
    ) -> RunReport:
        """
        Find duplicates in a directory, apply the policy and write the report.

        Args:
            directory: Directory to scan
            policy: Retention policy for every group
            chooser: Keep-file callback, required for interactive policy
            recursive: Include images in subdirectories

        Returns:
            RunReport describing the run, with report_path set

        Raises:
            FileNotFoundError: If the directory doesn't exist (no report is written)
            NotADirectoryError: If the path is not a directory (no report is written)
            OSError: If an image cannot be read or the report cannot be written
            ValueError: If policy is interactive and no chooser is given
        """
        logger.info("Starting Find Duplicate Images")
        if policy is RetentionPolicy.INTERACTIVE and chooser is None:
            raise ValueError("Interactive resolution requires a chooser")

        files = self.scanner.scan_directory(Path(directory), recursive=recursive)
        logger.debug(f"Found {len(files)} image files: {', '.join(str(f) for f in files)}")

        candidates = [Candidate(path) for path in files]
        groups = self.grouper.group_duplicates(candidates)

        deleted_files: List[Path] = []
        failed_deletions: List[DeletionResult] = []
        if groups:
            for outcome in self.resolver.resolve(groups, policy, chooser):
                deleted_files.extend(outcome.deleted_paths)
                failed_deletions.extend(outcome.failed)
        else:
            logger.info("No duplicate images found.")

        timestamp = datetime.now(timezone.utc)
        report_path = self.report_writer.write(
            groups, deleted_files, failed_deletions, timestamp=timestamp
        )

        logger.debug(
            f"Find Duplicate Images completed: {len(groups)} duplicate groups found, "
            f"{len(deleted_files)} deleted"
        )
        return RunReport(
            groups=groups,
            deleted_files=deleted_files,
            failed_deletions=failed_deletions,
            timestamp=timestamp,
            report_path=report_path,
        )

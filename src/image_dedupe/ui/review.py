"""
Terminal review of duplicate groups.

Shows each group's members with their metadata and asks which file to keep.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.table import Table
from PIL import Image

from image_dedupe.core.models import DuplicateGroup, RunReport

logger = logging.getLogger(__name__)

KEEP_ALL = 0


class ImageMetadata:
    """Image metadata for comparison."""

    def __init__(self, path: Path):
        """
        Initialize metadata for an image.

        Args:
            path: Path to the image file
        """
        self.path = path
        self.size_bytes = 0
        self.modified: Optional[datetime] = None
        self.width: Optional[int] = None
        self.height: Optional[int] = None
        self.format: Optional[str] = None

        try:
            stat = path.stat()
            self.size_bytes = stat.st_size
            self.modified = datetime.fromtimestamp(stat.st_mtime)
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            return

        try:
            with Image.open(path) as img:
                self.width, self.height = img.size
                self.format = img.format
        except Exception as e:
            logger.debug(f"Could not read image metadata for {path}: {e}")

    @property
    def size_mb(self) -> float:
        """File size in megabytes."""
        return self.size_bytes / (1024 * 1024)

    @property
    def resolution(self) -> Optional[str]:
        """Resolution as 'WIDTHxHEIGHT' or None."""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None


class ReviewUI:
    """Terminal-based review interface using Rich."""

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize review UI.

        Args:
            console: Rich console instance (creates new one if None)
        """
        self.console = console or Console()
        self._group_num = 0

    def choose_keep(self, group: DuplicateGroup) -> Optional[Path]:
        """
        Ask which member of a group to keep.

        Args:
            group: Duplicate group to review

        Returns:
            Path to keep, or None to keep every file (also on an aborted prompt)
        """
        self._group_num += 1
        self.console.print()
        self.console.print(self._group_table(group, self._group_num))
        self.console.print(
            f"[yellow]Choose a file to keep (1-{len(group)}), "
            f"or {KEEP_ALL} / Enter to keep all[/yellow]"
        )

        while True:
            try:
                answer = click.prompt(
                    "Keep", default="", show_default=False, type=str
                )
            except click.Abort:
                logger.debug("Prompt aborted, keeping all files in group")
                return None

            answer = answer.strip()
            if not answer:
                return None
            if answer.isdigit():
                choice = int(answer)
                if choice == KEEP_ALL:
                    return None
                if 1 <= choice <= len(group):
                    return group[choice - 1]

            self.console.print(f"[red]Invalid choice:[/red] {answer}")

    def _group_table(self, group: DuplicateGroup, group_num: int) -> Table:
        table = Table(
            title=f"Duplicate Group {group_num}",
            box=box.DOUBLE,
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("#", style="dim", width=3)
        table.add_column("File", style="cyan")
        table.add_column("Resolution", justify="right")
        table.add_column("Size", justify="right")
        table.add_column("Date Modified", justify="right")

        for idx, path in enumerate(group, 1):
            meta = ImageMetadata(path)
            table.add_row(
                str(idx),
                str(path),
                meta.resolution or "N/A",
                f"{meta.size_mb:.2f} MB",
                meta.modified.strftime("%Y-%m-%d") if meta.modified else "N/A",
            )
        return table

    def show_report(self, report: RunReport, max_groups: int = 10) -> None:
        """
        Display the results of a run.

        Args:
            report: Finished run report
            max_groups: Number of groups to list before summarising the rest
        """
        if not report.groups:
            self.console.print("[green]✓ No duplicate images found![/green]")
        else:
            self.console.print(
                f"\n[bold green]Found {len(report.groups)} duplicate groups "
                f"({report.duplicate_count} duplicates):[/bold green]\n"
            )
            deleted = set(report.deleted_files)
            for num, group in enumerate(report.groups[:max_groups], 1):
                self.console.print(self._result_table(group, num, deleted))
            if len(report.groups) > max_groups:
                self.console.print(
                    f"[dim]... and {len(report.groups) - max_groups} more groups[/dim]\n"
                )

        summary = Table(title="Summary", box=box.ROUNDED)
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="green")
        summary.add_row("Duplicate Groups", str(len(report.groups)))
        summary.add_row("Files Deleted", str(len(report.deleted_files)))
        summary.add_row("Deletions Failed", str(len(report.failed_deletions)))
        if report.report_path:
            summary.add_row("Report", str(report.report_path))
        self.console.print(summary)

        if report.failed_deletions:
            self.console.print(
                f"[yellow]⚠ {len(report.failed_deletions)} files could not be deleted "
                "(see report for details)[/yellow]"
            )

    def _result_table(self, group: DuplicateGroup, group_num: int, deleted: set) -> Table:
        table = Table(title=f"Group {group_num}", show_header=True, header_style="bold cyan")
        table.add_column("File")
        table.add_column("Status", justify="center")

        for path in group:
            status = "[red]DELETED ✗[/red]" if path in deleted else "[green]KEPT ✓[/green]"
            table.add_row(str(path), status)
        return table

"""Command-line interface for image-dedupe."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from image_dedupe import __version__
from image_dedupe.core.finder import DuplicateFinder
from image_dedupe.core.grouper import DuplicateGrouper
from image_dedupe.core.resolver import RetentionPolicy, policy_choices
from image_dedupe.ui.review import ReviewUI
from image_dedupe.utils.config import Config
from image_dedupe.utils.logger import daily_log_file, setup_logger

console = Console()
logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_CANCELLED = 130


class DedupeGroup(click.Group):
    """Click group that reports usage errors with the generic error exit code.

    Bad options and arguments are input errors, so they exit with EXIT_ERROR.
    """

    def make_context(self, *args, **kwargs):
        try:
            return super().make_context(*args, **kwargs)
        except click.UsageError as e:
            e.exit_code = EXIT_ERROR
            raise

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = EXIT_ERROR
            raise


@click.group(cls=DedupeGroup)
@click.version_option(version=__version__, prog_name="image-dedupe")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ~/.image-dedupe/config.json)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Optional[Path]) -> None:
    """
    Image Dedupe - find visually duplicate images and decide which to keep.

    Every run writes a JSON report listing the duplicate groups found and the
    files that were deleted.
    """
    ctx.ensure_object(dict)
    config = Config(config_file)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose

    setup_logger(
        "image_dedupe",
        level=logging.DEBUG if verbose else logging.INFO,
        log_file=daily_log_file(config.get_log_dir()),
        console=console,
    )


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_dir",
    type=click.Path(path_type=Path),
    help="Directory containing images to check for duplicates",
)
@click.option(
    "--delete",
    "-d",
    "delete_option",
    type=click.Choice(policy_choices(), case_sensitive=False),
    help="no: list only, yes: choose one to keep per group, all: keep the first of each group",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for the JSON report (default: from config)",
)
@click.option(
    "--recursive/--no-recursive",
    default=False,
    help="Include images in subdirectories",
)
@click.option(
    "--tolerance",
    type=click.FloatRange(0.0, 1.0),
    help="Per-pixel colour tolerance, 0-1 (default: from config)",
)
@click.option(
    "--max-diff-pixels",
    type=click.IntRange(min=0),
    help="Images differing in fewer pixels are duplicates (default: from config)",
)
@click.option(
    "--strategy",
    type=click.Choice(DuplicateGrouper.STRATEGIES, case_sensitive=False),
    help="Grouping strategy (default: from config)",
)
@click.option(
    "--recycle-bin/--permanent",
    default=None,
    help="Move deleted files to the recycle bin or delete permanently (default: from config)",
)
@click.option(
    "--no-prompt",
    is_flag=True,
    help="Never prompt; a missing --input or --delete cancels the run",
)
@click.option(
    "--show-progress/--no-progress",
    default=True,
    help="Show progress bars",
)
@click.pass_context
def find(
    ctx: click.Context,
    input_dir: Optional[Path],
    delete_option: Optional[str],
    output_dir: Optional[Path],
    recursive: bool,
    tolerance: Optional[float],
    max_diff_pixels: Optional[int],
    strategy: Optional[str],
    recycle_bin: Optional[bool],
    no_prompt: bool,
    show_progress: bool,
) -> None:
    """
    Find duplicate images in a directory.

    Images are compared by exact pixel hash and then by a pixel difference
    count. Duplicates are listed, or deleted according to --delete.

    Example:
        image-dedupe find --input ~/Pictures/export --delete all
    """
    config: Config = ctx.obj["config"]

    # Override config for this run only
    if tolerance is not None:
        config.set("comparison.pixel_tolerance", tolerance, persist=False)
    if max_diff_pixels is not None:
        config.set("comparison.max_diff_pixels", max_diff_pixels, persist=False)
    if strategy:
        config.set("grouping.strategy", strategy.lower(), persist=False)
    if recycle_bin is not None:
        config.set("safety.use_recycle_bin", recycle_bin, persist=False)
    if output_dir:
        config.set("report_dir", str(output_dir), persist=False)

    console.print(
        f"\n[bold cyan]Image Dedupe v{__version__}[/bold cyan] - Find Duplicate Images\n"
    )

    if input_dir is None:
        input_dir = None if no_prompt else _prompt_directory()
        if input_dir is None:
            _cancel("No input directory provided, cancelling...")

    if delete_option is None:
        delete_option = None if no_prompt else _prompt_delete_option()
        if delete_option is None:
            _cancel("No delete option provided, cancelling...")

    policy = RetentionPolicy.parse(delete_option)
    review_ui = ReviewUI(console)
    chooser = review_ui.choose_keep if policy is RetentionPolicy.INTERACTIVE else None

    try:
        finder = DuplicateFinder(config, show_progress=show_progress)
        report = finder.run(input_dir, policy, chooser=chooser, recursive=recursive)
    except (FileNotFoundError, NotADirectoryError) as e:
        logger.error(str(e))
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(EXIT_ERROR)
    except Exception as e:
        logger.error(f"Unexpected error in Find Duplicate Images: {e}")
        logger.debug("Error details", exc_info=True)
        console.print(f"[red]✗ Error during duplicate detection:[/red] {e}")
        sys.exit(EXIT_ERROR)

    review_ui.show_report(report)


@cli.command()
@click.option(
    "--folder", "-f", required=True, help="Folder name or pattern to protect"
)
@click.pass_context
def protect(ctx: click.Context, folder: str) -> None:
    """
    Add a folder to the protected folders list.

    Files in protected folders are never deleted, even when they are
    duplicates.
    """
    config: Config = ctx.obj["config"]
    config.add_protected_folder(folder)

    console.print(f"[green]✓ Protected folder added:[/green] {folder}")
    console.print("\n[cyan]Current protected folders:[/cyan]")
    for pf in config.get("protected_folders", []):
        console.print(f"  • {pf}")


@cli.command()
@click.option(
    "--folder", "-f", required=True, help="Folder name or pattern to unprotect"
)
@click.pass_context
def unprotect(ctx: click.Context, folder: str) -> None:
    """
    Remove a folder from the protected folders list.
    """
    config: Config = ctx.obj["config"]
    config.remove_protected_folder(folder)

    console.print(f"[green]✓ Protected folder removed:[/green] {folder}")


def _prompt_directory() -> Optional[Path]:
    """Ask for the input directory until an existing one or a blank answer is given."""
    while True:
        try:
            value = click.prompt(
                "Enter the directory containing images to check for duplicates "
                "(or press Enter to cancel)",
                default="",
                show_default=False,
            )
        except click.Abort:
            return None

        value = value.strip()
        if not value:
            return None

        directory = Path(value).expanduser()
        if directory.is_dir():
            logger.debug(f"Input directory provided: {directory}")
            return directory
        console.print("[red]Directory not found.[/red]")


def _prompt_delete_option() -> Optional[str]:
    """Ask for the retention policy; None if the prompt is aborted."""
    try:
        return click.prompt(
            "Do you want to delete duplicate images? "
            "(no: list duplicates only, yes: choose one to keep in each group, "
            "all: keep the first image of each group without prompting)",
            type=click.Choice([p.value for p in RetentionPolicy], case_sensitive=False),
            default=RetentionPolicy.LIST_ONLY.value,
        )
    except click.Abort:
        return None


def _cancel(message: str) -> None:
    logger.info(message)
    console.print("[yellow]Operation cancelled.[/yellow]")
    sys.exit(EXIT_CANCELLED)


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()

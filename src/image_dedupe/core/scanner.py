"""File scanner for discovering images in directories."""

import logging
import os
from pathlib import Path
from typing import List

from tqdm import tqdm

from image_dedupe.utils.config import Config

logger = logging.getLogger(__name__)


class ImageScanner:
    """Scans directories for image files with progress tracking."""

    # Supported image extensions
    IMAGE_EXTENSIONS = {
        ".jpg",
        ".jpeg",
        ".png",
        ".webp",
        ".gif",
    }

    def __init__(self, config: Config, show_progress: bool = True):
        """
        Initialize the image scanner.

        Args:
            config: Configuration instance
            show_progress: Show progress bar during scanning
        """
        self.config = config
        self.show_progress = show_progress

    def scan_directory(
        self, directory: Path, recursive: bool = False, skip_hidden: bool = False
    ) -> List[Path]:
        """
        Scan a directory for image files.

        Args:
            directory: Directory path to scan
            recursive: Recursively scan subdirectories
            skip_hidden: Skip hidden files and folders

        Returns:
            Image file paths sorted by path (the discovery order)

        Raises:
            FileNotFoundError: If directory doesn't exist
            NotADirectoryError: If the path is not a directory
            PermissionError: If directory is not accessible
        """
        if not directory.exists():
            raise FileNotFoundError(f"Input directory not found: {directory}")

        if not directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {directory}")

        logger.debug(f"Reading directory: {directory}")

        try:
            all_files = self._discover_files(directory, recursive, skip_hidden)
        except PermissionError as e:
            logger.error(f"Permission denied: {e}")
            raise

        image_files: List[Path] = []
        file_iter = tqdm(
            all_files,
            desc="Filtering images",
            unit="file",
            disable=not self.show_progress,
        )
        for file_path in file_iter:
            if self._is_image_file(file_path):
                image_files.append(file_path)

        image_files.sort()
        logger.info(f"Found {len(image_files)} image files in {directory}")
        return image_files

    def _discover_files(
        self, directory: Path, recursive: bool, skip_hidden: bool
    ) -> List[Path]:
        """
        Discover all regular files in a directory.

        Args:
            directory: Directory to scan
            recursive: Scan subdirectories
            skip_hidden: Skip hidden files/folders

        Returns:
            List of all file paths
        """
        files: List[Path] = []

        if not recursive:
            for item in directory.iterdir():
                if skip_hidden and item.name.startswith("."):
                    continue
                if item.is_file():
                    files.append(item)
            return files

        def on_error(error: OSError) -> None:
            logger.warning(f"Permission denied accessing directory: {error}")

        for root, dirs, filenames in os.walk(directory, onerror=on_error):
            root_path = Path(root)

            if skip_hidden:
                dirs[:] = [d for d in dirs if not d.startswith(".")]

            # Skip symlinked directories to avoid loops
            dirs[:] = [d for d in dirs if not (root_path / d).is_symlink()]

            for filename in filenames:
                if skip_hidden and filename.startswith("."):
                    continue
                file_path = root_path / filename
                if file_path.is_file():
                    files.append(file_path)

        return files

    def _is_image_file(self, file_path: Path) -> bool:
        """
        Check if a file is a supported image type.

        Args:
            file_path: File path to check

        Returns:
            True if file is a supported image
        """
        return file_path.suffix.lower() in self.IMAGE_EXTENSIONS

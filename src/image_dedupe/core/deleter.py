"""Best-effort file deletion that reports a result instead of raising."""

import logging
from pathlib import Path
from typing import Optional

from send2trash import send2trash

from image_dedupe.core.models import DeletionResult
from image_dedupe.utils.config import Config

logger = logging.getLogger(__name__)

PROTECTED = "protected"
MISSING = "missing"


class FileDeleter:
    """Deletes single files, either permanently or via the recycle bin."""

    def __init__(self, config: Optional[Config] = None, use_recycle_bin: Optional[bool] = None):
        """
        Initialize the deleter.

        Args:
            config: Configuration instance (protected folders, recycle bin default)
            use_recycle_bin: Override the 'safety.use_recycle_bin' setting
        """
        self.config = config
        if use_recycle_bin is None:
            use_recycle_bin = bool(config.get("safety.use_recycle_bin", False)) if config else False
        self.use_recycle_bin = use_recycle_bin

    def delete(self, file_path: Path) -> DeletionResult:
        """
        Delete one file.

        Args:
            file_path: File to delete

        Returns:
            DeletionResult; failures carry 'protected', 'missing' or the OS error text
        """
        if self.config is not None and self.config.is_path_protected(file_path):
            logger.warning(f"Skipping protected file: {file_path}")
            return DeletionResult.failure(file_path, PROTECTED)

        try:
            if self.use_recycle_bin:
                send2trash(str(file_path))
                logger.info(f"Moved duplicate image to recycle bin: {file_path}")
            else:
                file_path.unlink()
                logger.info(f"Deleted duplicate image: {file_path}")
        except FileNotFoundError:
            logger.error(f"Failed to delete {file_path}: file not found")
            return DeletionResult.failure(file_path, MISSING)
        except Exception as e:
            logger.error(f"Failed to delete {file_path}: {e}")
            return DeletionResult.failure(file_path, str(e) or type(e).__name__)

        return DeletionResult.success(file_path)

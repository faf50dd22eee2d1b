"""Core functionality for image duplicate detection and resolution."""

from image_dedupe.core.comparator import ComparatorConfig, PairwiseComparator
from image_dedupe.core.deleter import FileDeleter
from image_dedupe.core.finder import DuplicateFinder
from image_dedupe.core.grouper import DuplicateGrouper
from image_dedupe.core.models import (
    Candidate,
    DeletionResult,
    DuplicateGroup,
    ResolutionOutcome,
    RunReport,
)
from image_dedupe.core.report import ReportWriter
from image_dedupe.core.resolver import DuplicateResolver, RetentionPolicy
from image_dedupe.core.scanner import ImageScanner

__all__ = [
    "Candidate",
    "ComparatorConfig",
    "DeletionResult",
    "DuplicateFinder",
    "DuplicateGroup",
    "DuplicateGrouper",
    "DuplicateResolver",
    "FileDeleter",
    "ImageScanner",
    "PairwiseComparator",
    "ReportWriter",
    "ResolutionOutcome",
    "RetentionPolicy",
    "RunReport",
]

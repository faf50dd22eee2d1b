"""Data model shared by the grouper, resolver and report writer."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional


class Candidate:
    """An image file considered for duplicate comparison.

    Content is read from disk on first access and held until ``release``.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._content: Optional[bytes] = None

    @property
    def content(self) -> bytes:
        """Raw file bytes. Raises OSError if the file cannot be read."""
        if self._content is None:
            self._content = self.path.read_bytes()
        return self._content

    @property
    def loaded(self) -> bool:
        return self._content is not None

    def release(self) -> None:
        """Drop the cached content once no more comparisons need it."""
        self._content = None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Candidate) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"Candidate({str(self.path)!r})"


@dataclass
class DuplicateGroup:
    """Paths judged duplicate, in discovery order. The first member is the anchor."""

    paths: List[Path] = field(default_factory=list)

    @property
    def anchor(self) -> Path:
        return self.paths[0]

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def __getitem__(self, index: int) -> Path:
        return self.paths[index]

    def to_list(self) -> List[str]:
        return [str(p) for p in self.paths]


@dataclass(frozen=True)
class DeletionResult:
    """Outcome of one best-effort deletion."""

    path: Path
    deleted: bool
    error: Optional[str] = None

    @classmethod
    def success(cls, path: Path) -> "DeletionResult":
        return cls(path=path, deleted=True)

    @classmethod
    def failure(cls, path: Path, error: str) -> "DeletionResult":
        return cls(path=path, deleted=False, error=error)


@dataclass
class ResolutionOutcome:
    """What the retention policy decided for one group, and what actually happened."""

    group: DuplicateGroup
    keep: Optional[Path] = None
    delete: List[Path] = field(default_factory=list)
    results: List[DeletionResult] = field(default_factory=list)

    @property
    def deleted_paths(self) -> List[Path]:
        return [r.path for r in self.results if r.deleted]

    @property
    def failed(self) -> List[DeletionResult]:
        return [r for r in self.results if not r.deleted]


@dataclass(frozen=True)
class RunReport:
    """Immutable record of one invocation."""

    groups: List[DuplicateGroup]
    deleted_files: List[Path]
    failed_deletions: List[DeletionResult]
    timestamp: datetime
    report_path: Optional[Path] = None

    @property
    def duplicate_count(self) -> int:
        """Number of files beyond the first in every group."""
        return sum(len(g) - 1 for g in self.groups)

"""Apply a retention policy to duplicate groups."""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from image_dedupe.core.deleter import FileDeleter
from image_dedupe.core.models import DuplicateGroup, ResolutionOutcome

logger = logging.getLogger(__name__)

# Given a group, return the path to keep, or None to keep every member.
KeepChooser = Callable[[DuplicateGroup], Optional[Path]]


class RetentionPolicy(str, Enum):
    """Which group members get deleted. Values match the --delete option."""

    LIST_ONLY = "no"
    INTERACTIVE = "yes"
    AUTO_KEEP_FIRST = "all"

    @classmethod
    def parse(cls, value: str) -> "RetentionPolicy":
        """
        Parse a policy name or alias (case-insensitive).

        Args:
            value: One of no/yes/all or list-only/interactive/auto-keep-first

        Returns:
            Matching RetentionPolicy

        Raises:
            ValueError: If the value is not recognised
        """
        key = value.strip().lower()
        for policy in cls:
            if key == policy.value or key in _ALIASES[policy]:
                return policy
        raise ValueError(
            f"Invalid delete option: {value}. Must be one of: {', '.join(policy_choices())}"
        )


_ALIASES = {
    RetentionPolicy.LIST_ONLY: ("list-only", "list"),
    RetentionPolicy.INTERACTIVE: ("interactive",),
    RetentionPolicy.AUTO_KEEP_FIRST: ("auto-keep-first", "auto"),
}


def policy_choices() -> List[str]:
    """All accepted spellings, primary values first."""
    choices = [p.value for p in RetentionPolicy]
    for policy in RetentionPolicy:
        choices.extend(_ALIASES[policy])
    return choices


class DuplicateResolver:
    """Decides what to keep in each group and performs the deletions."""

    def __init__(self, deleter: Optional[FileDeleter] = None):
        """
        Initialize the resolver.

        Args:
            deleter: File deleter (permanent deletion with no protection if None)
        """
        self.deleter = deleter or FileDeleter()

    def resolve(
        self,
        groups: Sequence[DuplicateGroup],
        policy: RetentionPolicy,
        chooser: Optional[KeepChooser] = None,
    ) -> List[ResolutionOutcome]:
        """
        Resolve every group under one policy.

        Args:
            groups: Duplicate groups in discovery order
            policy: Retention policy for the whole run
            chooser: Callback picking the file to keep (required for INTERACTIVE)

        Returns:
            One ResolutionOutcome per group, in the same order

        Raises:
            ValueError: If policy is INTERACTIVE and no chooser is given
        """
        if policy is RetentionPolicy.INTERACTIVE and chooser is None:
            raise ValueError("Interactive resolution requires a chooser")

        if policy is RetentionPolicy.LIST_ONLY:
            logger.info(
                f"Found {len(groups)} duplicate image groups. "
                "No files deleted as per user selection."
            )
            return [ResolutionOutcome(group=group) for group in groups]

        outcomes = []
        for group in groups:
            if policy is RetentionPolicy.AUTO_KEEP_FIRST:
                outcome = self._keep(group, group.anchor)
                logger.debug(
                    f"Auto-keeping {group.anchor} and deleting "
                    f"{', '.join(str(p) for p in outcome.delete)}"
                )
            else:
                outcome = self._keep(group, self._ask(chooser, group))
            outcomes.append(outcome)

        deleted = sum(len(o.deleted_paths) for o in outcomes)
        failed = sum(len(o.failed) for o in outcomes)
        logger.info(
            f"Found {len(groups)} duplicate image groups, deleted {deleted} files"
            + (f", {failed} deletions failed" if failed else "")
        )
        return outcomes

    def _ask(self, chooser: KeepChooser, group: DuplicateGroup) -> Optional[Path]:
        keep = chooser(group)
        if keep is not None and keep not in group:
            logger.warning(f"Chosen file {keep} is not in the group, keeping all")
            keep = None
        logger.debug(f"User chose to keep {keep if keep else 'all'} for group {', '.join(group.to_list())}")
        return keep

    def _keep(self, group: DuplicateGroup, keep: Optional[Path]) -> ResolutionOutcome:
        if keep is None:
            return ResolutionOutcome(group=group)

        to_delete = [p for p in group if p != keep]
        results = [self.deleter.delete(path) for path in to_delete]
        return ResolutionOutcome(group=group, keep=keep, delete=to_delete, results=results)

"""Partition candidate images into duplicate groups."""

import logging
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from image_dedupe.core.comparator import PairwiseComparator
from image_dedupe.core.models import Candidate, DuplicateGroup
from image_dedupe.core.normalizer import NormalizedImage

logger = logging.getLogger(__name__)


class DuplicateGrouper:
    """Runs the pairwise comparator across candidates and collects groups.

    Two strategies are available:

    - ``anchor`` (default): each unclaimed candidate, in discovery order,
      anchors a group and claims every later unclaimed candidate that matches
      it. Members are only known to match the anchor, not each other, so two
      members of a group may fail a direct comparison.
    - ``connected``: every pair is compared and groups are the connected
      components of the "duplicate" graph. This is transitive, and it may
      merge or split groups differently than ``anchor``.
    """

    STRATEGIES = ("anchor", "connected")

    def __init__(
        self,
        comparator: PairwiseComparator,
        strategy: str = "anchor",
        show_progress: bool = True,
    ):
        """
        Initialize the grouper.

        Args:
            comparator: Pairwise duplicate decision
            strategy: 'anchor' or 'connected'
            show_progress: Show a progress bar while comparing
        """
        if strategy not in self.STRATEGIES:
            raise ValueError(
                f"Unknown grouping strategy '{strategy}', expected one of {self.STRATEGIES}"
            )
        self.comparator = comparator
        self.strategy = strategy
        self.show_progress = show_progress

    def group_duplicates(self, candidates: Sequence[Candidate]) -> List[DuplicateGroup]:
        """
        Group candidates that are duplicates of one another.

        Args:
            candidates: Candidates in discovery order

        Returns:
            Groups of two or more paths, in discovery order

        Raises:
            OSError: If any candidate file cannot be read
        """
        if not candidates:
            logger.info("No candidates to compare")
            return []

        logger.info(
            f"Processing {len(candidates)} image files for duplicates "
            f"(strategy: {self.strategy})"
        )

        if self.strategy == "connected":
            groups = self._group_connected(candidates)
        else:
            groups = self._group_by_anchor(candidates)

        logger.info(f"Found {len(groups)} duplicate groups")
        return groups

    def _group_by_anchor(self, candidates: Sequence[Candidate]) -> List[DuplicateGroup]:
        count = len(candidates)
        claimed = [False] * count
        cache: Dict[int, Optional[NormalizedImage]] = {}
        groups: List[DuplicateGroup] = []

        progress = tqdm(
            total=count,
            desc="Comparing images",
            unit="file",
            disable=not self.show_progress,
        )
        try:
            for i in range(count):
                if claimed[i]:
                    continue

                members = [i]
                anchor_image = self._normalized(i, candidates, cache)

                for j in range(i + 1, count):
                    if claimed[j]:
                        continue
                    other_image = self._normalized(j, candidates, cache)
                    logger.debug(f"Comparing {candidates[i].path} with {candidates[j].path}")
                    if self._match(anchor_image, other_image):
                        members.append(j)
                        claimed[j] = True
                        cache.pop(j, None)
                        progress.update(1)

                claimed[i] = True
                cache.pop(i, None)
                progress.update(1)

                if len(members) > 1:
                    group = DuplicateGroup([candidates[k].path for k in members])
                    groups.append(group)
                    logger.info(f"Found duplicate group: {', '.join(group.to_list())}")
        finally:
            progress.close()

        return groups

    def _group_connected(self, candidates: Sequence[Candidate]) -> List[DuplicateGroup]:
        count = len(candidates)
        parent = list(range(count))

        def find(k: int) -> int:
            while parent[k] != k:
                parent[k] = parent[parent[k]]
                k = parent[k]
            return k

        cache: Dict[int, Optional[NormalizedImage]] = {}
        total_pairs = count * (count - 1) // 2

        progress = tqdm(
            total=total_pairs,
            desc="Comparing pairs",
            unit="pair",
            disable=not self.show_progress,
        )
        try:
            for i in range(count):
                image_i = self._normalized(i, candidates, cache)
                for j in range(i + 1, count):
                    image_j = self._normalized(j, candidates, cache)
                    logger.debug(f"Comparing {candidates[i].path} with {candidates[j].path}")
                    if self._match(image_i, image_j):
                        root_i, root_j = find(i), find(j)
                        if root_i != root_j:
                            # Lower index stays root so components keep discovery order
                            parent[max(root_i, root_j)] = min(root_i, root_j)
                    progress.update(1)
                cache.pop(i, None)
        finally:
            progress.close()

        components: Dict[int, List[int]] = {}
        for k in range(count):
            components.setdefault(find(k), []).append(k)

        groups = []
        for members in components.values():
            if len(members) > 1:
                group = DuplicateGroup([candidates[k].path for k in members])
                groups.append(group)
                logger.info(f"Found duplicate group: {', '.join(group.to_list())}")
        return groups

    def _normalized(
        self,
        index: int,
        candidates: Sequence[Candidate],
        cache: Dict[int, Optional[NormalizedImage]],
    ) -> Optional[NormalizedImage]:
        """Decode a candidate once; read errors propagate, decode errors cache None."""
        if index not in cache:
            candidate = candidates[index]
            content = candidate.content
            cache[index] = self.comparator.normalize(content)
            if cache[index] is None:
                logger.warning(f"Could not decode {candidate.path}, treating as unique")
            candidate.release()
        return cache[index]

    def _match(
        self,
        image_a: Optional[NormalizedImage],
        image_b: Optional[NormalizedImage],
    ) -> bool:
        if image_a is None or image_b is None:
            return False
        return self.comparator.compare(image_a, image_b)

"""Iterative refinement of a multiple alignment by re-partitioning."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np

from probmsa.algorithms.guide_tree import GuideTree
from probmsa.algorithms.mea import build_posterior, compute_alignment
from probmsa.algorithms.model_selection import DivergenceLevel
from probmsa.algorithms.progressive import ProgressiveAligner
from probmsa.algorithms.sparse import PosteriorMatrices
from probmsa.constants import (
    ADAPTIVE_MIN_FAMILY_SIZE,
    ADAPTIVE_MIN_PASSES,
    GAP_CHARACTERS,
    LARGE_FAMILY_SIZE,
    PATH_X,
    PATH_Y,
    REDUCED_REFINEMENT_REPS,
)
from probmsa.types.alignment import MultiSequence

LOGGER = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float: ...


class RefinementOutcome(IntEnum):
    """Result of one refinement pass."""

    ACCEPTED = 0
    INEFFECTIVE = 1
    PARTITION_FAILED = 2


@dataclass
class RefinementPolicy:
    """Pass budget and early stopping for the refinement loop.

    The budget starts at ``reps`` and drops to a fixed small value for highly
    similar or very large families. Mid-sized families that are not highly
    similar use the adaptive schedule: every unsuccessful pass extends the
    budget (up to four passes per sequence) and the loop stops once more than
    two ineffective passes per sequence have accumulated after the minimum
    number of passes.
    """

    num_sequences: int
    level: int
    reps: int
    passes_run: int = 0
    ineffective: int = 0
    budget: int = field(init=False)
    adaptive: bool = field(init=False)

    def __post_init__(self) -> None:
        if self.reps < 0:
            raise ValueError(f"reps must be >= 0, got {self.reps}")
        self.budget = self.reps
        if (
            self.level == DivergenceLevel.HIGHLY_SIMILAR
            or self.num_sequences >= LARGE_FAMILY_SIZE
        ):
            self.budget = REDUCED_REFINEMENT_REPS
        self.adaptive = (
            ADAPTIVE_MIN_FAMILY_SIZE < self.num_sequences < LARGE_FAMILY_SIZE
            and self.level < DivergenceLevel.HIGHLY_SIMILAR
        )

    def should_continue(self) -> bool:
        if self.passes_run >= self.budget:
            return False
        if (
            self.adaptive
            and self.ineffective > 2 * self.num_sequences
            and self.passes_run > ADAPTIVE_MIN_PASSES
        ):
            return False
        return True

    def record(self, outcome: RefinementOutcome) -> None:
        """Account for the outcome of one finished pass."""
        self.passes_run += 1
        if not self.adaptive or outcome == RefinementOutcome.ACCEPTED:
            return
        if self.budget < 4 * self.num_sequences:
            self.budget += 1
        if outcome == RefinementOutcome.INEFFECTIVE:
            self.ineffective += 1


def accuracy_before(
    alignment: MultiSequence,
    group_one: Sequence[int],
    group_two: Sequence[int],
    posterior: np.ndarray,
) -> float:
    """Expected accuracy of the current alignment under a two-group split.

    Each group's column index advances on columns where the group has at
    least one residue; columns where both groups have residues contribute
    the posterior at the pair of indices.
    """
    is_residue = np.array(
        [[r not in GAP_CHARACTERS for r in s.residues] for s in alignment],
        dtype=bool,
    ).reshape(len(alignment), alignment.columns)
    found_one = is_residue[list(group_one)].any(axis=0)
    found_two = is_residue[list(group_two)].any(axis=0)
    index_one = np.cumsum(found_one)
    index_two = np.cumsum(found_two)
    both = found_one & found_two
    values = posterior[index_one[both], index_two[both]]
    if values.size == 0:
        return 0.0
    # Sequential sum in column order, matching the decoder's accumulation.
    return float(np.cumsum(values)[-1])


class RefinementEngine:
    """Re-partition and re-align an alignment against the posterior store."""

    def __init__(
        self,
        matrices: PosteriorMatrices,
        cutoff: float = 0.0,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.matrices = matrices
        self.cutoff = cutoff
        self.rng = rng if rng is not None else np.random.default_rng()

    def partition(self, num_sequences: int) -> Tuple[List[int], List[int]]:
        """Assign every row to one of two groups by a fair coin."""
        group_one: List[int] = []
        group_two: List[int] = []
        for index in range(num_sequences):
            if self.rng.random() < 0.5:
                group_one.append(index)
            else:
                group_two.append(index)
        return group_one, group_two

    def refine_pass(
        self, alignment: MultiSequence
    ) -> Tuple[MultiSequence, RefinementOutcome]:
        """Run one randomized pass.

        The re-aligned result is always returned, even when it does not
        change the expected accuracy. A partition with an empty group returns
        the input alignment object unchanged.
        """
        group_one, group_two = self.partition(alignment.num_sequences)
        if not group_one or not group_two:
            return alignment, RefinementOutcome.PARTITION_FAILED

        one = alignment.project(group_one)
        two = alignment.project(group_two)
        posterior = build_posterior(one, two, self.matrices, self.cutoff)
        before = accuracy_before(alignment, group_one, group_two, posterior)

        path, score = compute_alignment(one.columns, two.columns, posterior)
        refined = one.add_gaps(path, PATH_X).merged_with(two.add_gaps(path, PATH_Y))

        # Exact comparison: any change in the float score counts as progress.
        if before == score:
            return refined, RefinementOutcome.INEFFECTIVE
        return refined, RefinementOutcome.ACCEPTED

    def run(
        self, alignment: MultiSequence, policy: RefinementPolicy
    ) -> MultiSequence:
        """Run passes until the policy stops."""
        counts = {outcome: 0 for outcome in RefinementOutcome}
        while policy.should_continue():
            alignment, outcome = self.refine_pass(alignment)
            policy.record(outcome)
            counts[outcome] += 1
        LOGGER.debug(
            "Refinement: %d passes (%d accepted, %d ineffective, %d failed partitions)",
            policy.passes_run,
            counts[RefinementOutcome.ACCEPTED],
            counts[RefinementOutcome.INEFFECTIVE],
            counts[RefinementOutcome.PARTITION_FAILED],
        )
        return alignment


class TreeNodeRefinement:
    """Refinement that splits the alignment at guide-tree nodes.

    Every internal node defines group one (the leaves under it) and group two
    (all other sequences); both are re-aligned with the progressive merge.
    """

    def __init__(self, aligner: ProgressiveAligner) -> None:
        self.aligner = aligner

    def refine_node(
        self, alignment: MultiSequence, node_labels: Sequence[int]
    ) -> MultiSequence:
        """Re-align one node's leaves against the rest; no-op on an empty group."""
        wanted = set(node_labels)
        group_one = [i for i, s in enumerate(alignment) if s.label in wanted]
        group_two = [i for i, s in enumerate(alignment) if s.label not in wanted]
        if not group_one or not group_two:
            return alignment
        return self.aligner.align_alignments(
            alignment.project(group_one), alignment.project(group_two)
        )

    def run(self, alignment: MultiSequence, tree: GuideTree) -> MultiSequence:
        for left, right in tree.alignment_orders():
            alignment = self.refine_node(alignment, left + right)
        return alignment


__all__ = [
    "RefinementOutcome",
    "RefinementPolicy",
    "RefinementEngine",
    "TreeNodeRefinement",
    "accuracy_before",
]

"""Progressive profile-profile alignment along the guide tree."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from probmsa.algorithms.guide_tree import GuideTree, TreeNode
from probmsa.algorithms.mea import build_posterior, compute_alignment
from probmsa.algorithms.sparse import PosteriorMatrices
from probmsa.constants import PATH_X, PATH_Y
from probmsa.types.alignment import MultiSequence

LOGGER = logging.getLogger(__name__)


class ProgressiveAligner:
    """Merge profiles bottom-up along a guide tree.

    Args:
        matrices: Posterior store addressed by sequence labels.
        cutoff: Posterior cells below this value are ignored.
        weights: Optional per-label sequence weights for the profile-profile
            posterior.
        alignment_order: Keep merge order instead of re-sorting by label.
    """

    def __init__(
        self,
        matrices: PosteriorMatrices,
        cutoff: float = 0.0,
        weights: Optional[Mapping[int, float]] = None,
        alignment_order: bool = False,
    ) -> None:
        self.matrices = matrices
        self.cutoff = cutoff
        self.weights = weights
        self.alignment_order = alignment_order

    def align(self, tree: GuideTree, sequences: MultiSequence) -> MultiSequence:
        """Resolve the whole tree into one alignment."""
        return self.process_node(tree.root, sequences)

    def process_node(self, node: TreeNode, sequences: MultiSequence) -> MultiSequence:
        if node.is_leaf:
            return sequences.project([node.index])
        left = self.process_node(node.left, sequences)
        right = self.process_node(node.right, sequences)
        return self.align_alignments(left, right)

    def align_alignments(
        self, align1: MultiSequence, align2: MultiSequence
    ) -> MultiSequence:
        """Merge two profiles using the best expected-accuracy path."""
        posterior = build_posterior(
            align1, align2, self.matrices, self.cutoff, self.weights
        )
        path, score = compute_alignment(align1.columns, align2.columns, posterior)

        if LOGGER.isEnabledFor(logging.DEBUG):
            total_length = sum(
                min(s.residue_count(), t.residue_count())
                for s in align1
                for t in align2
            )
            LOGGER.debug(
                "%s vs. %s: %.4f",
                align1.labels,
                align2.labels,
                score / total_length if total_length else 0.0,
            )

        merged = align1.add_gaps(path, PATH_X).merged_with(align2.add_gaps(path, PATH_Y))
        if not self.alignment_order:
            merged = merged.sorted_by_label()
        return merged


__all__ = ["ProgressiveAligner"]

"""End-to-end multiple sequence alignment pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from probmsa.algorithms.annotation import AnnotationScorer
from probmsa.algorithms.consistency import ConsistencyTransformer, normalized_weights
from probmsa.algorithms.guide_tree import GuideTree
from probmsa.algorithms.model_selection import ModelSelection, ModelSelector
from probmsa.algorithms.pairwise import PairwisePosteriorEngine
from probmsa.algorithms.partition_function import PartitionFunction
from probmsa.algorithms.progressive import ProgressiveAligner
from probmsa.algorithms.refinement import (
    RandomSource,
    RefinementEngine,
    RefinementPolicy,
    TreeNodeRefinement,
)
from probmsa.algorithms.sparse import PosteriorMatrices
from probmsa.config import AlignmentConfig
from probmsa.constants import INT_MULTIPLY, PATH_BOTH, PATH_X
from probmsa.types.alignment import MultiSequence
from probmsa.types.parameters import ModelParameters
from probmsa.utils.matrices import NUCLEOTIDE_ALIASES, default_parameters

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentResult:
    """Final alignment plus the intermediate products of a run."""

    alignment: MultiSequence
    parameters: ModelParameters
    selection: Optional[ModelSelection] = None
    matrices: Optional[PosteriorMatrices] = None
    distances: Optional[np.ndarray] = None
    tree: Optional[GuideTree] = None
    annotation: Optional[List[int]] = None


class _StageTimer:
    """Log the time spent in each pipeline stage."""

    def __init__(self) -> None:
        self._last = time.perf_counter()

    def lap(self, stage: str) -> None:
        now = time.perf_counter()
        LOGGER.info("%s used %.4f seconds.", stage, now - self._last)
        self._last = now


class MultipleAligner:
    """Align a set of sequences.

    Stages: model selection, pairwise posteriors, guide tree, consistency
    transformation, progressive alignment, iterative refinement and optional
    annotation.

    Args:
        config: Run configuration.
        params: Pair-HMM parameters; defaults derive from the substitution
            matrix of ``config.sequence_type``.
        rng: Random source for refinement partitions; defaults to a numpy
            generator seeded with ``config.random_seed``.
    """

    def __init__(
        self,
        config: Optional[AlignmentConfig] = None,
        params: Optional[ModelParameters] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.config = config or AlignmentConfig()
        self.params = params or default_parameters(self.config.sequence_type)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.random_seed)

    def align(self, sequences: MultiSequence) -> AlignmentResult:
        """Run the whole pipeline.

        Raises:
            ValueError: If there are no sequences or their labels are not
                ``0..n-1`` in input order.
        """
        num_seqs = sequences.num_sequences
        if num_seqs == 0:
            raise ValueError("No sequences to align.")
        if sequences.labels != list(range(num_seqs)):
            raise ValueError("Sequence labels must be 0..n-1 in input order.")
        if any(s.aligned for s in sequences):
            sequences = MultiSequence([s.ungapped() for s in sequences], name=sequences.name)

        if num_seqs == 1:
            only = sequences[0]
            alignment = sequences.add_gaps([PATH_BOTH] * len(only), PATH_X)
            annotation = self._annotate(alignment, PosteriorMatrices(1, {}))
            return AlignmentResult(
                alignment=alignment, parameters=self.params, annotation=annotation
            )

        config = self.config
        timer = _StageTimer()

        selection = ModelSelector(self.params).select(list(sequences))
        timer.lap("Model determination")

        partition_function = PartitionFunction(
            matrix_name=config.matrix_name,
            temperature=config.pf_temperature,
            gap_open=config.pf_gap_open,
            gap_extend=config.pf_gap_extend,
            aliases=NUCLEOTIDE_ALIASES if config.sequence_type == "nucleotide" else {},
        )
        engine = PairwisePosteriorEngine(
            selection.parameters,
            selection.level,
            partition_function,
            num_threads=config.workers,
        )
        matrices, distances = engine.compute_all(list(sequences))
        timer.lap("HMM computation")

        tree = GuideTree.from_distances(distances)
        weights = normalized_weights(tree.sequence_weights(), INT_MULTIPLY)
        timer.lap("Guide tree construction")

        transformer = ConsistencyTransformer(
            config.consistency_reps,
            num_threads=config.workers,
            weights=weights if config.weighted_consistency else None,
        )
        matrices = transformer.transform(matrices)
        timer.lap("Consistency transformation")

        aligner = ProgressiveAligner(
            matrices,
            cutoff=config.cutoff,
            weights=weights,
            alignment_order=config.alignment_order,
        )
        alignment = aligner.align(tree, sequences)
        timer.lap("Profile-profile alignment")
        saved_order = alignment.labels

        if config.refinement_strategy == "tree":
            refiner = TreeNodeRefinement(
                ProgressiveAligner(matrices, cutoff=config.cutoff, weights=weights)
            )
            alignment = refiner.run(alignment, tree)
        else:
            policy = RefinementPolicy(
                num_sequences=num_seqs,
                level=selection.level,
                reps=config.iterative_refinement_reps,
            )
            alignment = RefinementEngine(matrices, config.cutoff, self.rng).run(
                alignment, policy
            )
        timer.lap("Refinement")

        if config.alignment_order:
            alignment = alignment.reordered(saved_order)
        else:
            alignment = alignment.sorted_by_label()

        annotation = self._annotate(alignment, matrices)
        return AlignmentResult(
            alignment=alignment,
            parameters=selection.parameters,
            selection=selection,
            matrices=matrices,
            distances=distances,
            tree=tree,
            annotation=annotation,
        )

    def _annotate(
        self, alignment: MultiSequence, matrices: PosteriorMatrices
    ) -> Optional[List[int]]:
        if self.config.annotation_path is None:
            return None
        return AnnotationScorer(matrices).write(alignment, self.config.annotation_path)


__all__ = ["AlignmentResult", "MultipleAligner"]

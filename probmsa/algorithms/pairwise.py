"""Pairwise posterior computation and expected-accuracy distances."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from itertools import combinations
from typing import List, Sequence, Tuple

import numpy as np

from probmsa.algorithms.forward_backward import compute_posterior_matrix
from probmsa.algorithms.hmm import PairHMM
from probmsa.algorithms.mea import compute_alignment
from probmsa.algorithms.model_selection import DivergenceLevel
from probmsa.algorithms.partition_function import PartitionFunction
from probmsa.algorithms.sparse import PosteriorMatrices, SparsePosteriorMatrix
from probmsa.types.parameters import ModelParameters
from probmsa.types.sequence import SequenceType

LOGGER = logging.getLogger(__name__)


def merge_posteriors_rms(*posteriors: np.ndarray) -> np.ndarray:
    """Cell-wise root mean square of equally shaped posteriors."""
    if not posteriors:
        raise ValueError("At least one posterior is required.")
    stacked = np.stack([np.asarray(p, dtype=float) for p in posteriors])
    return np.sqrt(np.mean(stacked**2, axis=0))


def expected_accuracy_distance(accuracy: float, len_a: int, len_b: int) -> float:
    """``1 - accuracy / min(len_a, len_b)``; pairs with an empty sequence get 1."""
    shorter = min(len_a, len_b)
    if shorter == 0:
        return 1.0
    return 1.0 - accuracy / shorter


@dataclass(frozen=True)
class PairResult:
    """Sparse posterior and distance computed for one pair ``a < b``."""

    a: int
    b: int
    matrix: SparsePosteriorMatrix
    distance: float


class PairwisePosteriorEngine:
    """Compute every pairwise posterior with the strategy of a divergence level.

    * level >= 2: global partition-function posterior only
    * level 1: single-affine pair-HMM posterior only
    * level 0: RMS merge of double-affine, partition-function and
      single-affine posteriors
    """

    def __init__(
        self,
        params: ModelParameters,
        level: DivergenceLevel,
        partition_function: PartitionFunction,
        num_threads: int = 1,
    ) -> None:
        self.level = DivergenceLevel(level)
        self.partition_function = partition_function
        self.double_affine = PairHMM(params, double_affine=True)
        self.single_affine = PairHMM(params, double_affine=False)
        self.num_threads = max(1, num_threads)

    def posterior(
        self, a: int, b: int, seq_a: SequenceType, seq_b: SequenceType
    ) -> np.ndarray:
        """Dense (len_a + 1, len_b + 1) posterior for one pair."""
        if self.level >= DivergenceLevel.SIMILAR:
            return self.partition_function.compute_posterior(a, b, seq_a, seq_b)
        if self.level == DivergenceLevel.MEDIUM:
            return compute_posterior_matrix(self.single_affine, seq_a, seq_b)

        return merge_posteriors_rms(
            compute_posterior_matrix(self.double_affine, seq_a, seq_b),
            self.partition_function.compute_posterior(a, b, seq_a, seq_b),
            compute_posterior_matrix(self.single_affine, seq_a, seq_b),
        )

    def compute_pair(
        self, a: int, b: int, seq_a: SequenceType, seq_b: SequenceType
    ) -> PairResult:
        posterior = self.posterior(a, b, seq_a, seq_b)
        _, accuracy = compute_alignment(len(seq_a), len(seq_b), posterior)
        distance = expected_accuracy_distance(accuracy, len(seq_a), len(seq_b))
        matrix = SparsePosteriorMatrix.from_dense(posterior)
        LOGGER.debug(
            "Pair (%d, %d): accuracy %.4f, distance %.4f, %d cells",
            a,
            b,
            accuracy,
            distance,
            matrix.num_cells,
        )
        return PairResult(a=a, b=b, matrix=matrix, distance=distance)

    def compute_all(
        self, sequences: Sequence[SequenceType]
    ) -> Tuple[PosteriorMatrices, np.ndarray]:
        """Return the posterior store and the symmetric distance matrix.

        Sequences are addressed by their position in ``sequences``.
        """
        num_seqs = len(sequences)
        pairs = list(combinations(range(num_seqs), 2))

        def _task(pair: Tuple[int, int]) -> PairResult:
            a, b = pair
            return self.compute_pair(a, b, sequences[a], sequences[b])

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            results: List[PairResult] = list(executor.map(_task, pairs))

        distances = np.zeros((num_seqs, num_seqs), dtype=float)
        matrices = {}
        for result in results:
            distances[result.a, result.b] = distances[result.b, result.a] = result.distance
            matrices[(result.a, result.b)] = result.matrix
        return PosteriorMatrices(num_seqs, matrices), distances


__all__ = [
    "merge_posteriors_rms",
    "expected_accuracy_distance",
    "PairResult",
    "PairwisePosteriorEngine",
]

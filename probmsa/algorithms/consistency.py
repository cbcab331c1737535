"""Probabilistic consistency transformation over the pairwise posterior store."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import combinations
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from probmsa.algorithms.sparse import (
    OrientedMatrix,
    PosteriorMatrices,
    SparsePosteriorMatrix,
)

LOGGER = logging.getLogger(__name__)


def relax(
    left: OrientedMatrix,
    right: OrientedMatrix,
    posterior: np.ndarray,
    weight: Optional[float] = None,
) -> None:
    """Accumulate ``weight * (left @ right)`` into ``posterior`` in place.

    ``left`` relates sequence i to a third sequence k and ``right`` relates k
    to sequence j, each read in whichever orientation the store requires.
    """
    product = (left.csr @ right.csr).toarray()
    if weight is None:
        posterior += product
    else:
        posterior += weight * product


class ConsistencyTransformer:
    """Run rounds of the consistency (relaxation) transformation.

    Every round reads only the current store and produces a complete new one;
    the new store replaces the old one only once every pair is done.
    """

    def __init__(
        self,
        reps: int,
        num_threads: int = 1,
        weights: Optional[Mapping[int, float]] = None,
    ) -> None:
        if reps < 0:
            raise ValueError(f"Consistency reps must be >= 0, got {reps}")
        self.reps = reps
        self.num_threads = max(1, num_threads)
        self.weights = weights

    def transform(self, matrices: PosteriorMatrices) -> PosteriorMatrices:
        """Apply ``reps`` rounds; zero rounds return the input store itself."""
        for rep in range(self.reps):
            LOGGER.debug("Consistency round %d of %d", rep + 1, self.reps)
            matrices = self.relax_round(matrices)
        return matrices

    def relax_round(self, matrices: PosteriorMatrices) -> PosteriorMatrices:
        """One full round over every stored pair."""
        num_seqs = matrices.num_sequences
        pairs = list(combinations(range(num_seqs), 2))

        def _task(pair: Tuple[int, int]) -> SparsePosteriorMatrix:
            i, j = pair
            return self.relax_pair(matrices, i, j)

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            relaxed: List[SparsePosteriorMatrix] = list(executor.map(_task, pairs))
        return PosteriorMatrices(num_seqs, dict(zip(pairs, relaxed)))

    def relax_pair(
        self, matrices: PosteriorMatrices, i: int, j: int
    ) -> SparsePosteriorMatrix:
        """Relaxed posterior for ``i < j``, restricted to the original support."""
        original = matrices.stored(i, j)
        posterior = original.to_dense()
        others = [k for k in range(matrices.num_sequences) if k not in (i, j)]

        if self.weights is None:
            posterior += posterior
            for k in others:
                relax(matrices.oriented(i, k), matrices.oriented(k, j), posterior)
            posterior /= matrices.num_sequences
        else:
            wi, wj = self.weights[i], self.weights[j]
            self_weight = wi * wi * wj + wi * wj * wj
            posterior *= self_weight
            total = self_weight
            for k in others:
                weight = wi * wj * self.weights[k]
                total += weight
                relax(
                    matrices.oriented(i, k),
                    matrices.oriented(k, j),
                    posterior,
                    weight,
                )
            if total > 0:
                posterior /= total

        posterior[~original.support()] = 0.0
        relaxed = SparsePosteriorMatrix.from_dense(posterior)
        LOGGER.debug(
            "Relaxed (%d, %d): %d --> %d cells",
            i,
            j,
            original.num_cells,
            relaxed.num_cells,
        )
        return relaxed


def normalized_weights(weights: Sequence[int], scale: float) -> dict:
    """Integer sequence weights as floats keyed by sequence index."""
    return {index: float(value) / scale for index, value in enumerate(weights)}


__all__ = ["relax", "ConsistencyTransformer", "normalized_weights"]

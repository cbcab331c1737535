"""Maximum Expected Accuracy (MEA) decoding and profile-profile posteriors."""

from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

import numpy as np

from probmsa.algorithms.sparse import PosteriorMatrices
from probmsa.constants import PATH_BOTH, PATH_X, PATH_Y
from probmsa.types.alignment import MultiSequence

_MOVE_BOTH = 0
_MOVE_X = 1
_MOVE_Y = 2
_MOVE_SYMBOLS = (PATH_BOTH, PATH_X, PATH_Y)


def compute_alignment(
    len1: int, len2: int, posterior: np.ndarray
) -> Tuple[List[str], float]:
    """Find the path maximizing the summed posterior of its aligned cells.

    Gaps carry no penalty. Ties prefer aligning the two residues, then a gap
    in the first sequence (``Y``), then a gap in the second (``X``).

    Args:
        len1: Number of columns (or residues) on the first side.
        len2: Number of columns (or residues) on the second side.
        posterior: Array of shape (len1 + 1, len2 + 1).

    Returns:
        The path as ``B``/``X``/``Y`` symbols and its expected accuracy.
    """
    posterior = np.asarray(posterior, dtype=float)
    if posterior.shape != (len1 + 1, len2 + 1):
        raise ValueError(
            f"posterior shape {posterior.shape} does not match ({len1 + 1}, {len2 + 1})"
        )

    dp = np.zeros((len1 + 1, len2 + 1), dtype=float)
    ptr = np.empty((len1 + 1, len2 + 1), dtype=np.int8)
    ptr[0, :] = _MOVE_Y
    ptr[:, 0] = _MOVE_X

    for i in range(1, len1 + 1):
        above = dp[i - 1]
        match = above[:-1] + posterior[i, 1:]
        candidates = np.empty(len2 + 1, dtype=float)
        candidates[0] = above[0]
        candidates[1:] = np.maximum(match, above[1:])
        dp[i] = np.maximum.accumulate(candidates)

        left = dp[i, :-1]
        up = above[1:]
        best = match.copy()
        moves = np.full(len2, _MOVE_BOTH, dtype=np.int8)
        take_left = left > best
        best[take_left] = left[take_left]
        moves[take_left] = _MOVE_Y
        take_up = up > best
        moves[take_up] = _MOVE_X
        ptr[i, 1:] = moves

    path: List[str] = []
    i, j = len1, len2
    while i > 0 or j > 0:
        move = ptr[i, j]
        path.append(_MOVE_SYMBOLS[move])
        if move == _MOVE_BOTH:
            i, j = i - 1, j - 1
        elif move == _MOVE_X:
            i -= 1
        else:
            j -= 1
    path.reverse()
    return path, float(dp[len1, len2])


def build_posterior(
    align1: MultiSequence,
    align2: MultiSequence,
    matrices: PosteriorMatrices,
    cutoff: float,
    weights: Optional[Mapping[int, float]] = None,
) -> np.ndarray:
    """Profile-profile posterior between two alignments.

    Every stored cell ``(x, y, v)`` of the matrix relating a sequence ``s`` of
    ``align1`` to a sequence ``t`` of ``align2`` with ``v >= cutoff`` adds
    ``w_s * w_t * v`` at (column of residue ``x`` in ``s``, column of residue
    ``y`` in ``t``). With weights the result is divided by the summed pair
    weights; without them the plain sum is returned.

    Args:
        align1: First profile; every member must be aligned to a common length.
        align2: Second profile.
        matrices: Posterior store addressed by sequence labels.
        cutoff: Cells below this value are ignored.
        weights: Optional per-label sequence weights.

    Returns:
        Array of shape (align1.columns + 1, align2.columns + 1).
    """
    posterior = np.zeros((align1.columns + 1, align2.columns + 1), dtype=float)
    total_weight = 0.0

    mappings2 = [(t.label, t.residue_mapping()) for t in align2]
    for s in align1:
        mapping1 = s.residue_mapping()
        for label2, mapping2 in mappings2:
            weight = 1.0 if weights is None else float(weights[s.label] * weights[label2])
            total_weight += weight

            rows, columns, values = matrices.oriented(s.label, label2).cells()
            keep = values >= cutoff
            if not keep.any():
                continue
            # Residue-to-column maps are injective, so no index repeats.
            posterior[mapping1[rows[keep]], mapping2[columns[keep]]] += weight * values[keep]

    if weights is not None and total_weight > 0:
        posterior /= total_weight
    return posterior


__all__ = ["compute_alignment", "build_posterior"]

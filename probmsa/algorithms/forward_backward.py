"""Forward/backward dynamic programming for the pair HMM.

The tables have shape (num_states, n + 1, m + 1). Entry ``[s, i, j]`` of the
forward table is the log probability of emitting ``x[:i]`` and ``y[:j]`` and
ending in state ``s``; the backward table holds the log probability of
emitting the remaining suffixes from state ``s`` at ``(i, j)``.

All dynamic programming is done in LOG-SPACE, one anti-diagonal at a time:
every cell on diagonal ``i + j = d`` depends only on diagonals ``d - 1`` and
``d - 2``, so a whole diagonal is filled with one vectorized update.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from scipy.special import logsumexp

from probmsa.algorithms.base import PairModel
from probmsa.algorithms.hmm import MATCH_STATE, NEG_INF
from probmsa.types.sequence import SequenceType


def _diagonal(d: int, n: int, m: int) -> Tuple[np.ndarray, np.ndarray]:
    i = np.arange(max(0, d - m), min(n, d) + 1)
    return i, d - i


def compute_forward(
    hmm: PairModel, x_seq: SequenceType, y_seq: SequenceType
) -> Tuple[np.ndarray, float]:
    """Compute the forward table and the log partition value ``log Z``."""
    n, m = len(x_seq), len(y_seq)
    forward = np.full((hmm.num_states, n + 1, m + 1), NEG_INF)
    if n == 0 and m == 0:
        return forward, NEG_INF

    emit_match, emit_x, emit_y = hmm.emission_tables(x_seq, y_seq)
    trans = hmm.log_transitions
    xs = hmm.insert_x_states
    ys = hmm.insert_y_states
    to_match = trans[:, MATCH_STATE][:, None]

    for d in range(1, n + m + 1):
        i, j = _diagonal(d, n, m)

        sel = (i > 0) & (j > 0)
        if sel.any():
            mi, mj = i[sel], j[sel]
            prev = forward[:, mi - 1, mj - 1] + to_match
            forward[MATCH_STATE, mi, mj] = logsumexp(prev, axis=0) + emit_match[mi, mj]

        sel = i > 0
        if sel.any():
            xi, xj = i[sel], j[sel]
            opened = forward[MATCH_STATE, xi - 1, xj][None, :] + trans[MATCH_STATE, xs][:, None]
            extended = forward[xs[:, None], xi - 1, xj] + trans[xs, xs][:, None]
            forward[xs[:, None], xi, xj] = np.logaddexp(opened, extended) + emit_x[xi]

        sel = j > 0
        if sel.any():
            yi, yj = i[sel], j[sel]
            opened = forward[MATCH_STATE, yi, yj - 1][None, :] + trans[MATCH_STATE, ys][:, None]
            extended = forward[ys[:, None], yi, yj - 1] + trans[ys, ys][:, None]
            forward[ys[:, None], yi, yj] = np.logaddexp(opened, extended) + emit_y[yj]

        # Seed the cells reachable directly from the start distribution.
        if d == 1:
            if n > 0:
                forward[xs, 1, 0] = hmm.log_init[xs] + emit_x[1]
            if m > 0:
                forward[ys, 0, 1] = hmm.log_init[ys] + emit_y[1]
        elif d == 2 and n > 0 and m > 0:
            forward[MATCH_STATE, 1, 1] = hmm.log_init[MATCH_STATE] + emit_match[1, 1]

    log_z = float(logsumexp(forward[:, n, m] + hmm.log_end))
    return forward, log_z


def compute_backward(
    hmm: PairModel, x_seq: SequenceType, y_seq: SequenceType
) -> Tuple[np.ndarray, float]:
    """Compute the backward table and the log partition value ``log Z``."""
    n, m = len(x_seq), len(y_seq)
    num_states = hmm.num_states
    backward = np.full((num_states, n + 1, m + 1), NEG_INF)
    if n == 0 and m == 0:
        return backward, NEG_INF

    emit_match, emit_x, emit_y = hmm.emission_tables(x_seq, y_seq)
    trans = hmm.log_transitions
    xs = hmm.insert_x_states
    ys = hmm.insert_y_states

    backward[:, n, m] = hmm.log_end

    for d in range(n + m - 1, -1, -1):
        i, j = _diagonal(d, n, m)
        acc = np.full((num_states, len(i)), NEG_INF)

        sel = (i < n) & (j < m)
        if sel.any():
            mi, mj = i[sel] + 1, j[sel] + 1
            ahead = emit_match[mi, mj] + backward[MATCH_STATE, mi, mj]
            acc[:, sel] = np.logaddexp(
                acc[:, sel], trans[:, MATCH_STATE][:, None] + ahead[None, :]
            )

        sel = i < n
        if sel.any():
            xi, xj = i[sel] + 1, j[sel]
            ahead = emit_x[xi][None, :] + backward[xs[:, None], xi, xj]
            terms = trans[:, xs][:, :, None] + ahead[None, :, :]
            acc[:, sel] = np.logaddexp(acc[:, sel], logsumexp(terms, axis=1))

        sel = j < m
        if sel.any():
            yi, yj = i[sel], j[sel] + 1
            ahead = emit_y[yj][None, :] + backward[ys[:, None], yi, yj]
            terms = trans[:, ys][:, :, None] + ahead[None, :, :]
            acc[:, sel] = np.logaddexp(acc[:, sel], logsumexp(terms, axis=1))

        backward[:, i, j] = acc

    terms_start = []
    if n > 0 and m > 0:
        terms_start.append(
            hmm.log_init[MATCH_STATE] + emit_match[1, 1] + backward[MATCH_STATE, 1, 1]
        )
    if n > 0:
        terms_start.extend(hmm.log_init[xs] + emit_x[1] + backward[xs, 1, 0])
    if m > 0:
        terms_start.extend(hmm.log_init[ys] + emit_y[1] + backward[ys, 0, 1])
    log_z = float(logsumexp(terms_start))
    return backward, log_z


def compute_posterior_matrix(
    hmm: PairModel, x_seq: SequenceType, y_seq: SequenceType
) -> np.ndarray:
    """Return the (n+1, m+1) match posterior; row 0 and column 0 stay zero.

    A pair involving an empty sequence has no match cells and yields an
    all-zero matrix.
    """
    n, m = len(x_seq), len(y_seq)
    posterior = np.zeros((n + 1, m + 1), dtype=float)
    if n == 0 or m == 0:
        return posterior

    forward, log_z_f = compute_forward(hmm, x_seq, y_seq)
    backward, log_z_b = compute_backward(hmm, x_seq, y_seq)

    if not (math.isfinite(log_z_f) and math.isfinite(log_z_b)):
        raise ValueError(
            f"Forward and backward log-normalizers are not finite: {log_z_f} vs {log_z_b}"
        )
    if abs(log_z_f - log_z_b) > 1e-5 * max(1.0, abs(log_z_f)):
        raise ValueError(
            f"Forward and backward log-normalizers disagree: {log_z_f} vs {log_z_b}"
        )
    log_z = (log_z_f + log_z_b) * 0.5

    joint = forward[MATCH_STATE, 1:, 1:] + backward[MATCH_STATE, 1:, 1:] - log_z
    posterior[1:, 1:] = np.minimum(np.exp(joint), 1.0)
    return posterior


__all__ = ["compute_forward", "compute_backward", "compute_posterior_matrix"]

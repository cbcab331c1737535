"""Viterbi alignment for the pair HMM."""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from probmsa.algorithms.hmm import MATCH_STATE, NEG_INF, PairHMM
from probmsa.constants import PATH_BOTH, PATH_X, PATH_Y
from probmsa.types.sequence import SequenceType

# Backpointer value of cells entered from the start distribution.
START = -1


def compute_viterbi_alignment(
    hmm: PairHMM, x_seq: SequenceType, y_seq: SequenceType
) -> Tuple[List[str], float]:
    """Return the most probable alignment path and its log probability.

    The path is a list of ``B`` (both residues), ``X`` (first sequence only)
    and ``Y`` (second sequence only) symbols.
    """
    n, m = len(x_seq), len(y_seq)
    if n == 0 or m == 0:
        return [PATH_X] * n + [PATH_Y] * m, 0.0

    num_states = hmm.num_states
    emit_match, emit_x, emit_y = hmm.emission_tables(x_seq, y_seq)
    trans = hmm.log_transitions
    xs = hmm.insert_x_states
    ys = hmm.insert_y_states

    score = np.full((num_states, n + 1, m + 1), NEG_INF)
    pointer = np.full((num_states, n + 1, m + 1), START, dtype=np.int8)

    for d in range(1, n + m + 1):
        i = np.arange(max(0, d - m), min(n, d) + 1)
        j = d - i

        sel = (i > 0) & (j > 0)
        if sel.any():
            mi, mj = i[sel], j[sel]
            prev = score[:, mi - 1, mj - 1] + trans[:, MATCH_STATE][:, None]
            best = np.argmax(prev, axis=0)
            score[MATCH_STATE, mi, mj] = prev[best, np.arange(len(mi))] + emit_match[mi, mj]
            pointer[MATCH_STATE, mi, mj] = best

        for states, di, dj, emit, valid in (
            (xs, 1, 0, emit_x, i > 0),
            (ys, 0, 1, emit_y, j > 0),
        ):
            if not valid.any():
                continue
            ci, cj = i[valid], j[valid]
            opened = score[MATCH_STATE, ci - di, cj - dj][None, :] + trans[MATCH_STATE, states][:, None]
            extended = score[states[:, None], ci - di, cj - dj] + trans[states, states][:, None]
            positions = ci if di else cj
            # Ties prefer staying in the gap.
            stay = extended >= opened
            score[states[:, None], ci, cj] = np.where(stay, extended, opened) + emit[positions]
            pointer[states[:, None], ci, cj] = np.where(stay, states[:, None], MATCH_STATE)

        if d == 1:
            score[xs, 1, 0] = hmm.log_init[xs] + emit_x[1]
            pointer[xs, 1, 0] = START
            score[ys, 0, 1] = hmm.log_init[ys] + emit_y[1]
            pointer[ys, 0, 1] = START
        elif d == 2:
            score[MATCH_STATE, 1, 1] = hmm.log_init[MATCH_STATE] + emit_match[1, 1]
            pointer[MATCH_STATE, 1, 1] = START

    final = score[:, n, m] + hmm.log_end
    state = int(np.argmax(final))
    best_score = float(final[state])

    path: List[str] = []
    i, j = n, m
    while i > 0 or j > 0:
        previous = int(pointer[state, i, j])
        if state == MATCH_STATE:
            path.append(PATH_BOTH)
            i, j = i - 1, j - 1
        elif state % 2 == 1:
            path.append(PATH_X)
            i -= 1
        else:
            path.append(PATH_Y)
            j -= 1
        if previous == START:
            break
        state = previous

    path.reverse()
    return path, best_score


__all__ = ["compute_viterbi_alignment"]

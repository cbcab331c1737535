"""Pair Hidden Markov Model utilities."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from probmsa.constants import (
    NUCLEOTIDE_ALPHABET,
    UNKNOWN_PAIR_EMISSION,
    UNKNOWN_SINGLE_EMISSION,
)
from probmsa.algorithms.base import PairModel
from probmsa.types.parameters import ModelParameters
from probmsa.types.sequence import SequenceType
from probmsa.utils.matrices import NUCLEOTIDE_ALIASES

NEG_INF = float("-inf")

MATCH_STATE = 0


def _safe_log(values: np.ndarray) -> np.ndarray:
    """Elementwise log that maps zero probabilities to -inf without warnings."""
    values = np.asarray(values, dtype=float)
    out = np.full(values.shape, NEG_INF)
    np.log(values, out=out, where=values > 0)
    return out


def _aliases_for(alphabet: str) -> Dict[str, str]:
    if set(alphabet) <= set(NUCLEOTIDE_ALPHABET):
        return NUCLEOTIDE_ALIASES
    return {}


@dataclass(frozen=True)
class PairHMM(PairModel):
    """Pair HMM with one match state and one or two pairs of insert states.

    State 0 is the match state; insert pair ``k`` owns states ``2k + 1``
    (insert in X) and ``2k + 2`` (insert in Y). With ``double_affine=False``
    only the first insert pair is kept and the initial distribution is
    renormalized over the three remaining states.
    """

    params: ModelParameters
    double_affine: bool
    log_init: np.ndarray
    log_end: np.ndarray
    log_transitions: np.ndarray
    log_match: np.ndarray
    log_single: np.ndarray

    def __init__(self, params: ModelParameters, double_affine: bool = True) -> None:
        transitions = params.transitions
        pairs = transitions.num_insert_pairs if double_affine else 1
        num_states = 2 * pairs + 1

        init = np.array(transitions.init_distrib[:num_states], dtype=float)
        if init.sum() <= 0:
            raise ValueError("init_distrib must put mass on the kept states.")
        init /= init.sum()

        gap_open = np.array(transitions.gap_open[: 2 * pairs], dtype=float)
        gap_extend = np.array(transitions.gap_extend[: 2 * pairs], dtype=float)

        matrix = np.zeros((num_states, num_states), dtype=float)
        matrix[MATCH_STATE, MATCH_STATE] = 1.0 - gap_open.sum()
        for state in range(1, num_states):
            matrix[MATCH_STATE, state] = gap_open[state - 1]
            matrix[state, state] = gap_extend[state - 1]
            matrix[state, MATCH_STATE] = 1.0 - gap_extend[state - 1]

        emissions = params.emissions
        symbols = emissions.alphabet
        size = len(symbols)
        match = np.full((size + 1, size + 1), UNKNOWN_PAIR_EMISSION)
        single = np.full(size + 1, UNKNOWN_SINGLE_EMISSION)
        for i, a in enumerate(symbols):
            single[i] = emissions.single[a]
            for j, b in enumerate(symbols):
                match[i, j] = emissions.match[a][b]

        object.__setattr__(self, "params", params)
        object.__setattr__(self, "double_affine", double_affine)
        object.__setattr__(self, "log_init", _safe_log(init))
        object.__setattr__(self, "log_end", _safe_log(init))
        object.__setattr__(self, "log_transitions", _safe_log(matrix))
        object.__setattr__(self, "log_match", _safe_log(match))
        object.__setattr__(self, "log_single", _safe_log(single))

    def encode(self, residues: Sequence[str]) -> np.ndarray:
        """Map residues to alphabet indices; unknown residues get the last index."""
        symbols = self.params.emissions.alphabet
        index = {symbol: i for i, symbol in enumerate(symbols)}
        aliases = _aliases_for(symbols)
        return np.array(
            [index.get(aliases.get(r, r), len(symbols)) for r in residues],
            dtype=int,
        )

    def emission_tables(self, x_seq: SequenceType, y_seq: SequenceType):
        """Return log emission tables indexed by 1-based residue positions.

        Returns:
            ``(emit_match, emit_x, emit_y)`` of shapes (n+1, m+1), (n+1,) and
            (m+1,). Entries at position 0 are unused and left at zero.
        """
        x_codes = self.encode(x_seq.residues)
        y_codes = self.encode(y_seq.residues)
        n, m = len(x_codes), len(y_codes)

        emit_match = np.zeros((n + 1, m + 1), dtype=float)
        emit_x = np.zeros(n + 1, dtype=float)
        emit_y = np.zeros(m + 1, dtype=float)
        if n and m:
            emit_match[1:, 1:] = self.log_match[np.ix_(x_codes, y_codes)]
        if n:
            emit_x[1:] = self.log_single[x_codes]
        if m:
            emit_y[1:] = self.log_single[y_codes]
        return emit_match, emit_x, emit_y

    def log_trans(self, state_from: int, state_to: int) -> float:
        """Return the log transition probability between two states."""
        self._assert_state(state_from, "state_from")
        self._assert_state(state_to, "state_to")
        return float(self.log_transitions[state_from, state_to])

    def _assert_state(self, state: int, arg_name: str) -> None:
        if not 0 <= state < self.num_states:
            raise ValueError(
                f"{arg_name} must be in [0, {self.num_states}), got {state}"
            )

    def __repr__(self) -> str:
        kind = "double-affine" if self.double_affine else "single-affine"
        probs = ", ".join(f"{math.exp(v):.4g}" for v in self.log_init)
        return f"PairHMM({kind}, init=[{probs}])"


__all__ = ["PairHMM", "NEG_INF", "MATCH_STATE"]

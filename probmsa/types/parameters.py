"""
Parameter types for the pair Hidden Markov Model used to compute pairwise
posterior probabilities.

The model has one match state followed by pairs of insert states (insert in X,
insert in Y). Probabilities are stored in probability space; the model converts
them to log-space lookup tables.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Sequence, Tuple


def _validate_keys(
    data: Dict[str, object], expected: Sequence[str], context: str
) -> None:
    missing = [k for k in expected if k not in data]
    if missing:
        raise ValueError(f"{context} missing keys: {missing}")
    unexpected = [k for k in data if k not in expected]
    if unexpected:
        raise ValueError(f"{context} has unexpected keys: {unexpected}")


def _validate_probabilities(values: Sequence[float], context: str) -> None:
    for value in values:
        if not (0.0 <= value <= 1.0) or math.isnan(value):
            raise ValueError(f"{context} must contain probabilities, got {value}")


@dataclass(frozen=True)
class EmissionParameters:
    """Pair and single emission probabilities over an alphabet."""

    alphabet: str
    match: Dict[str, Dict[str, float]]
    single: Dict[str, float]

    def __post_init__(self) -> None:
        symbols = tuple(self.alphabet)
        if len(set(symbols)) != len(symbols):
            raise ValueError(f"alphabet has repeated symbols: {self.alphabet}")
        _validate_keys(self.match, symbols, "match emissions")
        _validate_keys(self.single, symbols, "single emissions")
        for base, row in self.match.items():
            _validate_keys(row, symbols, f"match[{base}]")
            _validate_probabilities(list(row.values()), f"match[{base}]")
        _validate_probabilities(list(self.single.values()), "single emissions")


@dataclass(frozen=True)
class TransitionParameters:
    """Initial distribution and affine gap probabilities.

    ``init_distrib`` holds the match state followed by (insert X, insert Y)
    for every insert pair; ``gap_open`` and ``gap_extend`` hold two entries
    per insert pair.
    """

    init_distrib: Tuple[float, ...]
    gap_open: Tuple[float, ...]
    gap_extend: Tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "init_distrib", tuple(self.init_distrib))
        object.__setattr__(self, "gap_open", tuple(self.gap_open))
        object.__setattr__(self, "gap_extend", tuple(self.gap_extend))

        if len(self.gap_open) == 0 or len(self.gap_open) % 2:
            raise ValueError("gap_open must hold two entries per insert pair.")
        if len(self.gap_extend) != len(self.gap_open):
            raise ValueError("gap_extend and gap_open must have the same length.")
        if len(self.init_distrib) != len(self.gap_open) + 1:
            raise ValueError(
                "init_distrib must hold one match entry plus one entry per insert state."
            )
        _validate_probabilities(self.init_distrib, "init_distrib")
        _validate_probabilities(self.gap_open, "gap_open")
        _validate_probabilities(self.gap_extend, "gap_extend")
        if sum(self.gap_open) >= 1.0:
            raise ValueError("gap_open probabilities must sum to less than 1.")

    @property
    def num_insert_pairs(self) -> int:
        """Number of (insert X, insert Y) state pairs."""
        return len(self.gap_open) // 2


@dataclass(frozen=True)
class ModelParameters:
    """Aggregate container for pair-HMM transition and emission parameters."""

    transitions: TransitionParameters
    emissions: EmissionParameters

    def with_init_state(self, index: int, value: float) -> "ModelParameters":
        """Return a copy with one initial-distribution entry replaced."""
        init = list(self.transitions.init_distrib)
        init[index] = value
        return replace(
            self, transitions=replace(self.transitions, init_distrib=tuple(init))
        )


__all__ = [
    "EmissionParameters",
    "TransitionParameters",
    "ModelParameters",
]

"""Global alignment partition function posteriors.

Every global alignment of two sequences is weighted by ``exp(score / T)``,
where the score sums substitution-matrix entries over aligned pairs and
affine penalties over gaps. The posterior of residue ``i`` aligning to
residue ``j`` is the weight of all alignments through that pair divided by
the total weight ``Z``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from probmsa.algorithms.base import PairModel
from probmsa.algorithms.forward_backward import compute_posterior_matrix
from probmsa.constants import (
    DEFAULT_PF_GAP_EXTEND,
    DEFAULT_PF_GAP_OPEN,
    DEFAULT_PF_TEMPERATURE,
    PROTEIN_MATRIX,
)
from probmsa.types.sequence import SequenceType
from probmsa.utils.matrices import load_substitution_matrix, score_table

LOGGER = logging.getLogger(__name__)


class BoltzmannModel(PairModel):
    """Scoring scheme expressed as log weights over match and gap states."""

    def __init__(
        self,
        matrix_name: str,
        temperature: float,
        gap_open: float,
        gap_extend: float,
        aliases: Optional[Dict[str, str]] = None,
    ) -> None:
        if temperature <= 0:
            raise ValueError(f"temperature must be positive, got {temperature}")
        self.matrix = load_substitution_matrix(matrix_name)
        self.temperature = temperature
        self.aliases = aliases or {}

        opening = gap_open / temperature
        extending = gap_extend / temperature
        self.log_init = np.array([0.0, opening, opening])
        self.log_end = np.zeros(3)
        self.log_transitions = np.array(
            [
                [0.0, opening, opening],
                [0.0, extending, float("-inf")],
                [0.0, float("-inf"), extending],
            ]
        )

    def emission_tables(
        self, x_seq: SequenceType, y_seq: SequenceType
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        n, m = len(x_seq), len(y_seq)
        emit_match = np.zeros((n + 1, m + 1), dtype=float)
        if n and m:
            scores = score_table(
                self.matrix, x_seq.residues, y_seq.residues, self.aliases
            )
            emit_match[1:, 1:] = scores / self.temperature
        return emit_match, np.zeros(n + 1), np.zeros(m + 1)


@dataclass
class PartitionFunction:
    """Posterior generator over all global alignments of a pair."""

    matrix_name: str = PROTEIN_MATRIX
    temperature: float = DEFAULT_PF_TEMPERATURE
    gap_open: float = DEFAULT_PF_GAP_OPEN
    gap_extend: float = DEFAULT_PF_GAP_EXTEND
    aliases: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.gap_open > 0 or self.gap_extend > 0:
            raise ValueError("Gap penalties must be zero or negative scores.")
        self._model = BoltzmannModel(
            self.matrix_name,
            self.temperature,
            self.gap_open,
            self.gap_extend,
            self.aliases,
        )

    def compute_posterior(
        self,
        index_a: int,
        index_b: int,
        seq_a: SequenceType,
        seq_b: SequenceType,
    ) -> np.ndarray:
        """Return the (len_a + 1, len_b + 1) posterior for one pair."""
        LOGGER.debug(
            "Partition function for pair (%d, %d): %d x %d",
            index_a,
            index_b,
            len(seq_a),
            len(seq_b),
        )
        return compute_posterior_matrix(self._model, seq_a, seq_b)


__all__ = ["BoltzmannModel", "PartitionFunction"]

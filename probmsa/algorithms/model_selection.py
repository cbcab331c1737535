"""Divergence-level selection from Viterbi reference alignments."""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass
from enum import IntEnum
from itertools import combinations
from typing import List, Sequence, Tuple

from probmsa.algorithms.hmm import PairHMM
from probmsa.algorithms.viterbi import compute_viterbi_alignment
from probmsa.constants import (
    ADJUSTED_INIT_STATE,
    DIVERGENT_MAX_IDENTITY,
    INIT_STATE_ADJUSTMENTS,
    MEDIUM_MAX_IDENTITY,
    PATH_BOTH,
    PATH_X,
    PATH_Y,
    SIMILAR_MAX_IDENTITY,
)
from probmsa.types.parameters import ModelParameters
from probmsa.types.sequence import SequenceType

LOGGER = logging.getLogger(__name__)


class DivergenceLevel(IntEnum):
    """Family-wide similarity bucket driving model choice."""

    DIVERGENT = 0
    MEDIUM = 1
    SIMILAR = 2
    HIGHLY_SIMILAR = 3


def classify_identity(identity: float) -> DivergenceLevel:
    """Map an average pairwise identity to its divergence level."""
    if identity <= DIVERGENT_MAX_IDENTITY:
        return DivergenceLevel.DIVERGENT
    if identity <= MEDIUM_MAX_IDENTITY:
        return DivergenceLevel.MEDIUM
    if identity <= SIMILAR_MAX_IDENTITY:
        return DivergenceLevel.SIMILAR
    return DivergenceLevel.HIGHLY_SIMILAR


def adjust_parameters(params: ModelParameters, identity: float) -> ModelParameters:
    """Tune the adjustable initial-state entry for the family's identity.

    Identities above the last bucket leave the parameters unchanged.
    """
    for upper, value in INIT_STATE_ADJUSTMENTS:
        if identity <= upper:
            return params.with_init_state(ADJUSTED_INIT_STATE, value)
    return params


def pair_identity(
    path: Sequence[str], seq_a: SequenceType, seq_b: SequenceType
) -> Tuple[float, bool]:
    """Fraction of path steps aligning two identical residues.

    Returns:
        ``(identity, consistent)`` where ``consistent`` is False when the path
        does not consume exactly the residues of both sequences.
    """
    i = j = 0
    matches = 0
    residues_a, residues_b = seq_a.residues, seq_b.residues
    for step in path:
        if step == PATH_BOTH:
            if i < len(residues_a) and j < len(residues_b):
                matches += residues_a[i] == residues_b[j]
            i += 1
            j += 1
        elif step == PATH_X:
            i += 1
        elif step == PATH_Y:
            j += 1
    consistent = i == len(residues_a) and j == len(residues_b)
    identity = matches / len(path) if path else 0.0
    return identity, consistent


@dataclass(frozen=True)
class ModelSelection:
    """Outcome of model selection for one sequence family."""

    level: DivergenceLevel
    identity: float
    deviation: float
    pair_identities: Tuple[float, ...]
    parameters: ModelParameters


class ModelSelector:
    """Estimate family identity and choose a divergence level."""

    def __init__(self, params: ModelParameters) -> None:
        self.params = params
        self.hmm = PairHMM(params, double_affine=True)

    def select(self, sequences: Sequence[SequenceType]) -> ModelSelection:
        """Run a Viterbi alignment for every pair and classify the family.

        Raises:
            ValueError: If fewer than two sequences are given.
        """
        if len(sequences) < 2:
            raise ValueError("Model selection needs at least two sequences.")

        identities: List[float] = []
        for a, b in combinations(range(len(sequences)), 2):
            seq_a, seq_b = sequences[a], sequences[b]
            path, _ = compute_viterbi_alignment(self.hmm, seq_a, seq_b)
            identity, consistent = pair_identity(path, seq_a, seq_b)
            if not consistent:
                LOGGER.error(
                    "Percent identity error: path for %s vs %s does not cover both sequences",
                    seq_a.identifier,
                    seq_b.identifier,
                )
            identities.append(identity)

        mean_identity = statistics.fmean(identities)
        deviation = statistics.pstdev(identities, mu=mean_identity)
        level = classify_identity(mean_identity)
        LOGGER.info(
            "Average identity %.4f (std %.4f), divergence level %d (%s)",
            mean_identity,
            deviation,
            level,
            level.name,
        )
        return ModelSelection(
            level=level,
            identity=mean_identity,
            deviation=deviation,
            pair_identities=tuple(identities),
            parameters=adjust_parameters(self.params, mean_identity),
        )


__all__ = [
    "DivergenceLevel",
    "classify_identity",
    "adjust_parameters",
    "pair_identity",
    "ModelSelection",
    "ModelSelector",
]

"""Substitution matrices and the default pair-HMM parameters derived from them."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Literal, Optional, Sequence

import numpy as np
from skbio.sequence import SubstitutionMatrix

from probmsa.constants import (
    DEFAULT_GAP_EXTEND,
    DEFAULT_GAP_OPEN,
    DEFAULT_INIT_DISTRIB,
    NUCLEOTIDE_ALPHABET,
    NUCLEOTIDE_MATRIX,
    PROTEIN_ALPHABET,
    PROTEIN_BACKGROUND,
    PROTEIN_MATRIX,
    SCORE_SCALE,
)
from probmsa.types.parameters import (
    EmissionParameters,
    ModelParameters,
    TransitionParameters,
)

SequenceKind = Literal["protein", "nucleotide"]

# Residues substituted before a nucleotide substitution-matrix lookup.
NUCLEOTIDE_ALIASES = {"U": "T"}


@lru_cache(maxsize=None)
def load_substitution_matrix(name: str) -> SubstitutionMatrix:
    """Load a named substitution matrix shipped with scikit-bio."""
    try:
        return SubstitutionMatrix.by_name(name)
    except ValueError as err:
        raise ValueError(f"Unknown substitution matrix: {name}") from err


def default_matrix_name(kind: SequenceKind) -> str:
    """Name of the substitution matrix used for a sequence kind."""
    return NUCLEOTIDE_MATRIX if kind == "nucleotide" else PROTEIN_MATRIX


def score_table(
    matrix: SubstitutionMatrix,
    residues_a: Sequence[str],
    residues_b: Sequence[str],
    aliases: Optional[Dict[str, str]] = None,
) -> np.ndarray:
    """Return the (len_a, len_b) substitution scores for two residue strings.

    Residues missing from the matrix alphabet (after ``aliases``) score as its
    wildcard ('X' for protein matrices, 'N' for nucleotide matrices), or as
    the matrix minimum when it has none.
    """
    alphabet = list(matrix.alphabet)
    index = {symbol: i for i, symbol in enumerate(alphabet)}
    aliases = aliases or {}
    scores = np.asarray(matrix.scores, dtype=float)
    unknown = len(alphabet)

    padded = np.full((unknown + 1, unknown + 1), scores.min())
    padded[:unknown, :unknown] = scores
    wildcard = next((w for w in ("X", "N") if w in index), None)
    if wildcard is not None:
        padded[unknown, :unknown] = scores[index[wildcard]]
        padded[:unknown, unknown] = scores[:, index[wildcard]]
        padded[unknown, unknown] = scores[index[wildcard], index[wildcard]]

    def _indices(residues: Sequence[str]) -> np.ndarray:
        return np.array(
            [index.get(aliases.get(r, r), unknown) for r in residues], dtype=int
        )

    return padded[np.ix_(_indices(residues_a), _indices(residues_b))]


def _emissions_from_matrix(
    matrix: SubstitutionMatrix, alphabet: str, background: Dict[str, float]
) -> EmissionParameters:
    """Joint emissions p(a, b) proportional to q(a) q(b) 2^(scale * s(a, b))."""
    scores = score_table(matrix, list(alphabet), list(alphabet))
    freqs = np.array([background[symbol] for symbol in alphabet], dtype=float)
    freqs /= freqs.sum()
    joint = np.outer(freqs, freqs) * np.power(2.0, SCORE_SCALE * scores)
    joint /= joint.sum()

    match = {
        a: {b: float(joint[i, j]) for j, b in enumerate(alphabet)}
        for i, a in enumerate(alphabet)
    }
    single = {a: float(freqs[i]) for i, a in enumerate(alphabet)}
    return EmissionParameters(alphabet=alphabet, match=match, single=single)


def default_parameters(kind: SequenceKind = "protein") -> ModelParameters:
    """Double-affine pair-HMM parameters with matrix-derived emissions."""
    if kind == "nucleotide":
        alphabet = NUCLEOTIDE_ALPHABET
        background = {symbol: 1.0 / len(alphabet) for symbol in alphabet}
    else:
        alphabet = PROTEIN_ALPHABET
        background = PROTEIN_BACKGROUND

    emissions = _emissions_from_matrix(
        load_substitution_matrix(default_matrix_name(kind)), alphabet, background
    )
    transitions = TransitionParameters(
        init_distrib=DEFAULT_INIT_DISTRIB,
        gap_open=DEFAULT_GAP_OPEN,
        gap_extend=DEFAULT_GAP_EXTEND,
    )
    return ModelParameters(transitions=transitions, emissions=emissions)


__all__ = [
    "SequenceKind",
    "load_substitution_matrix",
    "default_matrix_name",
    "score_table",
    "default_parameters",
]

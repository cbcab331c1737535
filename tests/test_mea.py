"""Unit tests for MEA decoding and profile-profile posteriors."""

from __future__ import annotations

import math

import numpy as np
import pytest

from probmsa.algorithms.mea import build_posterior, compute_alignment
from probmsa.algorithms.sparse import PosteriorMatrices, SparsePosteriorMatrix
from probmsa.types import MultiSequence, ProteinSequence


def _seq(text: str, label: int, aligned: bool = False) -> ProteinSequence:
    return ProteinSequence(
        identifier=f"s{label}",
        residues=list(text),
        label=label,
        sort_label=label,
        aligned=aligned,
    )


def _padded(core: list) -> np.ndarray:
    """Wrap a residue-by-residue matrix with zero sentinel row and column."""
    core = np.asarray(core, dtype=float)
    dense = np.zeros((core.shape[0] + 1, core.shape[1] + 1))
    dense[1:, 1:] = core
    return dense


def test_identity_posterior_gives_gap_free_path():
    path, score = compute_alignment(3, 3, _padded(np.eye(3)))
    assert path == ["B", "B", "B"]
    assert math.isclose(score, 3.0)


def test_shifted_posterior_introduces_gaps():
    """x2 aligns with y1; x1 is left unmatched."""
    path, score = compute_alignment(2, 1, _padded([[0.1], [0.9]]))
    assert path == ["X", "B"]
    assert math.isclose(score, 0.9)


def test_ties_prefer_match_then_left():
    """An all-zero posterior aligns residues diagonally, then gaps the longer side."""
    path, score = compute_alignment(1, 1, _padded([[0.0]]))
    assert path == ["B"]
    assert score == 0.0

    path, _ = compute_alignment(1, 2, _padded([[0.0, 0.0]]))
    assert path.count("B") == 1
    assert path.count("Y") == 1


def test_empty_sides():
    assert compute_alignment(0, 2, np.zeros((1, 3))) == (["Y", "Y"], 0.0)
    assert compute_alignment(2, 0, np.zeros((3, 1))) == (["X", "X"], 0.0)
    assert compute_alignment(0, 0, np.zeros((1, 1))) == ([], 0.0)


def test_score_equals_sum_of_matched_cells():
    rng = np.random.default_rng(7)
    posterior = _padded(rng.random((6, 5)) * 0.5)
    path, score = compute_alignment(6, 5, posterior)

    i = j = 0
    total = 0.0
    for step in path:
        if step == "B":
            i, j = i + 1, j + 1
            total += posterior[i, j]
        elif step == "X":
            i += 1
        else:
            j += 1
    assert (i, j) == (6, 5)
    assert math.isclose(score, total)


def test_compute_alignment_rejects_wrong_shape():
    with pytest.raises(ValueError):
        compute_alignment(2, 2, np.zeros((2, 2)))


def _two_sequence_store(values: list) -> PosteriorMatrices:
    return PosteriorMatrices(
        2, {(0, 1): SparsePosteriorMatrix.from_dense(_padded(values))}
    )


def test_build_posterior_single_sequences_matches_store():
    values = [[0.8, 0.1], [0.05, 0.9]]
    store = _two_sequence_store(values)
    one = MultiSequence([_seq("AC", 0)])
    two = MultiSequence([_seq("AD", 1)])

    posterior = build_posterior(one, two, store, cutoff=0.0)
    np.testing.assert_allclose(posterior, _padded(values))


def test_build_posterior_reads_transposed_orientation():
    store = _two_sequence_store([[0.8, 0.1], [0.02, 0.9]])
    one = MultiSequence([_seq("AD", 1)])
    two = MultiSequence([_seq("AC", 0)])

    posterior = build_posterior(one, two, store, cutoff=0.0)
    np.testing.assert_allclose(posterior, _padded([[0.8, 0.02], [0.1, 0.9]]))


def test_build_posterior_applies_cutoff():
    store = _two_sequence_store([[0.8, 0.1], [0.05, 0.9]])
    one = MultiSequence([_seq("AC", 0)])
    two = MultiSequence([_seq("AD", 1)])

    posterior = build_posterior(one, two, store, cutoff=0.5)
    np.testing.assert_allclose(posterior, _padded([[0.8, 0.0], [0.0, 0.9]]))


def test_build_posterior_maps_residues_to_columns():
    """Gapped members place their residue posteriors at column coordinates."""
    store = _two_sequence_store([[0.8, 0.1], [0.05, 0.9]])
    one = MultiSequence([_seq("A-C", 0, aligned=True)])
    two = MultiSequence([_seq("AD", 1, aligned=True)])

    posterior = build_posterior(one, two, store, cutoff=0.0)
    assert posterior.shape == (4, 3)
    assert math.isclose(posterior[1, 1], 0.8)
    assert math.isclose(posterior[3, 2], 0.9)
    assert not posterior[2].any()


def test_build_posterior_weighted_normalizes_by_pair_weights():
    store = _two_sequence_store([[0.8, 0.1], [0.05, 0.9]])
    one = MultiSequence([_seq("AC", 0)])
    two = MultiSequence([_seq("AD", 1)])

    posterior = build_posterior(one, two, store, 0.0, weights={0: 2.0, 1: 1.5})
    np.testing.assert_allclose(posterior, _padded([[0.8, 0.1], [0.05, 0.9]]))

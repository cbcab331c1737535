"""Unit tests for Viterbi decoding."""

from __future__ import annotations

import math

from probmsa.algorithms.forward_backward import compute_forward
from probmsa.algorithms.viterbi import compute_viterbi_alignment
from probmsa.constants import PATH_BOTH, PATH_X, PATH_Y

from .test_forward_backward import _seq, _toy_hmm


def test_path_consumes_every_residue():
    hmm = _toy_hmm()
    x, y = _seq("ACGTA"), _seq("AGTC")
    path, _ = compute_viterbi_alignment(hmm, x, y)

    assert path.count(PATH_BOTH) + path.count(PATH_X) == len(x)
    assert path.count(PATH_BOTH) + path.count(PATH_Y) == len(y)


def test_single_pair_score_matches_forward():
    hmm = _toy_hmm()
    x, y = _seq("A"), _seq("C")
    path, score = compute_viterbi_alignment(hmm, x, y)
    _, log_z = compute_forward(hmm, x, y)

    assert path == [PATH_BOTH]
    assert math.isclose(score, log_z, rel_tol=1e-9)


def test_best_path_never_exceeds_total_probability():
    hmm = _toy_hmm(double_affine=False)
    x, y = _seq("ACGGT"), _seq("ACT")
    _, score = compute_viterbi_alignment(hmm, x, y)
    _, log_z = compute_forward(hmm, x, y)

    assert score <= log_z + 1e-9


def test_empty_sequence_gives_gap_path():
    path, score = compute_viterbi_alignment(_toy_hmm(), _seq("ACG"), _seq(""))
    assert path == [PATH_X] * 3
    assert score == 0.0

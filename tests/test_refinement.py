"""Unit tests for iterative refinement and its pass policy."""

from __future__ import annotations

import math
from itertools import cycle

import numpy as np
import pytest

from probmsa.algorithms.guide_tree import GuideTree
from probmsa.algorithms.model_selection import DivergenceLevel
from probmsa.algorithms.progressive import ProgressiveAligner
from probmsa.algorithms.refinement import (
    RefinementEngine,
    RefinementOutcome,
    RefinementPolicy,
    TreeNodeRefinement,
    accuracy_before,
)
from probmsa.algorithms.sparse import PosteriorMatrices, SparsePosteriorMatrix
from probmsa.types import MultiSequence, ProteinSequence


class _FixedRandom:
    """Replays a fixed sequence of draws."""

    def __init__(self, values):
        self._values = cycle(values)

    def random(self) -> float:
        return next(self._values)


def _aligned(text: str, label: int) -> ProteinSequence:
    return ProteinSequence(
        identifier=f"s{label}",
        residues=list(text),
        label=label,
        sort_label=label,
        aligned=True,
    )


def _identity(length: int) -> SparsePosteriorMatrix:
    dense = np.zeros((length + 1, length + 1))
    dense[1:, 1:] = np.eye(length)
    return SparsePosteriorMatrix.from_dense(dense)


def _misaligned():
    """Three identical sequences where the last one is shifted by a gap pair."""
    alignment = MultiSequence(
        [_aligned("ACDE-", 0), _aligned("ACDE-", 1), _aligned("-ACDE", 2)]
    )
    store = PosteriorMatrices(
        3, {(0, 1): _identity(4), (0, 2): _identity(4), (1, 2): _identity(4)}
    )
    return alignment, store


def test_policy_budget_defaults_to_reps():
    policy = RefinementPolicy(num_sequences=10, level=DivergenceLevel.DIVERGENT, reps=100)
    assert policy.budget == 100
    assert not policy.adaptive


def test_policy_budget_reduced_for_similar_or_large_families():
    assert RefinementPolicy(10, DivergenceLevel.HIGHLY_SIMILAR, 100).budget == 10
    assert RefinementPolicy(150, DivergenceLevel.DIVERGENT, 100).budget == 10


def test_policy_adaptive_range():
    assert RefinementPolicy(26, DivergenceLevel.MEDIUM, 100).adaptive
    assert RefinementPolicy(149, DivergenceLevel.SIMILAR, 100).adaptive
    assert not RefinementPolicy(25, DivergenceLevel.MEDIUM, 100).adaptive
    assert not RefinementPolicy(30, DivergenceLevel.HIGHLY_SIMILAR, 100).adaptive


def test_policy_record_extends_budget_on_unsuccessful_passes():
    policy = RefinementPolicy(30, DivergenceLevel.DIVERGENT, 100)
    policy.record(RefinementOutcome.ACCEPTED)
    assert policy.budget == 100
    policy.record(RefinementOutcome.INEFFECTIVE)
    policy.record(RefinementOutcome.PARTITION_FAILED)
    assert policy.budget == 102
    assert policy.ineffective == 1
    assert policy.passes_run == 3


def test_policy_budget_capped_at_four_per_sequence():
    policy = RefinementPolicy(30, DivergenceLevel.DIVERGENT, 119)
    for _ in range(5):
        policy.record(RefinementOutcome.PARTITION_FAILED)
    assert policy.budget == 120


def test_policy_stops_at_budget():
    policy = RefinementPolicy(5, DivergenceLevel.DIVERGENT, 2)
    assert policy.should_continue()
    policy.record(RefinementOutcome.ACCEPTED)
    policy.record(RefinementOutcome.INEFFECTIVE)
    assert not policy.should_continue()


def test_policy_adaptive_early_stop():
    policy = RefinementPolicy(30, DivergenceLevel.DIVERGENT, 1000)
    policy.passes_run = 102
    policy.ineffective = 61
    assert not policy.should_continue()
    policy.ineffective = 60
    assert policy.should_continue()


def test_policy_rejects_negative_reps():
    with pytest.raises(ValueError):
        RefinementPolicy(5, DivergenceLevel.DIVERGENT, -1)


def test_failed_partition_returns_same_alignment():
    alignment, store = _misaligned()
    engine = RefinementEngine(store, rng=_FixedRandom([0.0]))
    refined, outcome = engine.refine_pass(alignment)
    assert outcome == RefinementOutcome.PARTITION_FAILED
    assert refined is alignment


def test_refine_pass_repairs_shifted_sequence():
    alignment, store = _misaligned()
    # Sequences 0 and 1 in group one, sequence 2 in group two.
    engine = RefinementEngine(store, rng=_FixedRandom([0.1, 0.2, 0.9]))
    refined, outcome = engine.refine_pass(alignment)

    assert outcome == RefinementOutcome.ACCEPTED
    assert [s.sequence for s in refined] == ["ACDE", "ACDE", "ACDE"]


def test_refine_pass_reports_ineffective_when_score_unchanged():
    alignment = MultiSequence([_aligned("ACDE", 0), _aligned("ACDE", 1)])
    store = PosteriorMatrices(2, {(0, 1): _identity(4)})
    engine = RefinementEngine(store, rng=_FixedRandom([0.1, 0.9]))
    refined, outcome = engine.refine_pass(alignment)

    assert outcome == RefinementOutcome.INEFFECTIVE
    assert [s.sequence for s in refined] == ["ACDE", "ACDE"]


def test_accuracy_before_sums_shared_columns():
    alignment, store = _misaligned()
    one, two = alignment.project([0, 1]), alignment.project([2])
    posterior = np.zeros((one.columns + 1, two.columns + 1))
    posterior[1:, 1:] = 1.0
    # Group one has residues in columns 1-4, group two in columns 2-5.
    assert math.isclose(accuracy_before(alignment, [0, 1], [2], posterior), 3.0)


def test_run_with_zero_reps_keeps_alignment():
    alignment, store = _misaligned()
    policy = RefinementPolicy(3, DivergenceLevel.DIVERGENT, 0)
    assert RefinementEngine(store).run(alignment, policy) is alignment


def test_run_counts_passes():
    alignment, store = _misaligned()
    policy = RefinementPolicy(3, DivergenceLevel.DIVERGENT, 5)
    engine = RefinementEngine(store, rng=np.random.default_rng(1))
    refined = engine.run(alignment, policy)
    assert policy.passes_run == 5
    assert sorted(s.ungapped().sequence for s in refined) == ["ACDE"] * 3


def test_tree_node_refinement():
    alignment, store = _misaligned()
    distances = np.array([[0.0, 0.0, 0.5], [0.0, 0.0, 0.5], [0.5, 0.5, 0.0]])
    tree = GuideTree.from_distances(distances)
    refiner = TreeNodeRefinement(ProgressiveAligner(store))

    # The root covers every sequence and is skipped.
    assert refiner.refine_node(alignment, [0, 1, 2]) is alignment

    refined = refiner.run(alignment, tree)
    assert [s.sequence for s in refined] == ["ACDE", "ACDE", "ACDE"]

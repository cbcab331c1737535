"""Unit tests for guide tree construction and sequence weights."""

from __future__ import annotations

import numpy as np
import pytest

from probmsa.algorithms.guide_tree import GuideTree
from probmsa.constants import INT_MULTIPLY


def _three_way() -> np.ndarray:
    """Sequences 0 and 1 are close; 2 is far from both."""
    return np.array(
        [
            [0.0, 0.1, 0.9],
            [0.1, 0.0, 0.9],
            [0.9, 0.9, 0.0],
        ]
    )


def test_close_pair_merges_first():
    tree = GuideTree.from_distances(_three_way())
    first, root = tree.internal_nodes()

    assert sorted(first.leaves()) == [0, 1]
    assert root is tree.root
    assert sorted(root.leaves()) == [0, 1, 2]
    assert first.height == pytest.approx(0.05)
    assert root.height == pytest.approx(0.45)


def test_alignment_orders_cover_every_merge():
    tree = GuideTree.from_distances(_three_way())
    orders = tree.alignment_orders()
    assert len(orders) == 2
    left, right = orders[0]
    assert sorted(left + right) == [0, 1]
    left, right = orders[-1]
    assert sorted(left + right) == [0, 1, 2]


def test_sequence_weights_favour_outlier():
    weights = GuideTree.from_distances(_three_way()).sequence_weights()

    assert weights.dtype.kind == "i"
    assert weights[0] == weights[1]
    assert weights[2] > weights[0]
    # 0.25, 0.25, 0.45 scaled to mean one
    np.testing.assert_array_equal(weights, [789, 789, 1421])


def test_zero_distances_give_uniform_weights():
    weights = GuideTree.from_distances(np.zeros((4, 4))).sequence_weights()
    np.testing.assert_array_equal(weights, [INT_MULTIPLY] * 4)


def test_single_sequence_tree_is_a_leaf():
    tree = GuideTree.from_distances(np.zeros((1, 1)))
    assert tree.root.is_leaf
    assert tree.internal_nodes() == []
    np.testing.assert_array_equal(tree.sequence_weights(), [INT_MULTIPLY])


def test_invalid_distance_matrices():
    with pytest.raises(ValueError):
        GuideTree.from_distances(np.zeros((2, 3)))
    with pytest.raises(ValueError):
        GuideTree.from_distances(np.zeros((0, 0)))


def test_repr_is_newick_like():
    text = repr(GuideTree.from_distances(_three_way()))
    assert text.startswith("GuideTree(")
    for label in "012":
        assert label in text

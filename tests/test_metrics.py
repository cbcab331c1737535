"""Unit tests for alignment accuracy metrics and their aggregation."""

from __future__ import annotations

import math

import pytest

from probmsa.evaluation import (
    evaluate_all_metrics,
    evaluate_multiple,
    pair_precision,
    sum_of_pairs,
    total_column,
)
from probmsa.evaluation.metrics import extract_aligned_pairs
from probmsa.types import MultiSequence, ProteinSequence


def _alignment(rows, name: str | None = None) -> MultiSequence:
    return MultiSequence(
        [
            ProteinSequence(
                identifier=identifier,
                residues=list(text),
                label=index,
                sort_label=index,
                aligned=True,
            )
            for index, (identifier, text) in enumerate(rows)
        ],
        name=name,
    )


REFERENCE = _alignment([("a", "ACD-"), ("b", "A-DE"), ("c", "ACDE")], name="ref")


def test_extract_aligned_pairs():
    pairs = extract_aligned_pairs(_alignment([("a", "AC"), ("b", "-C")]))
    assert pairs == {(("a", 1), ("b", 0))}


def test_identical_alignment_scores_one():
    assert sum_of_pairs(REFERENCE, REFERENCE) == 1.0
    assert pair_precision(REFERENCE, REFERENCE) == 1.0
    assert total_column(REFERENCE, REFERENCE) == 1.0


def test_partial_agreement():
    # b's D shifted away from the D column
    test = _alignment([("a", "ACD--"), ("b", "A--DE"), ("c", "ACD-E")])
    # Reference pairs: col1 3, col2 1, col3 3, col4 1 -> 8; test keeps 3 + 1 + 1 + 1.
    assert math.isclose(sum_of_pairs(test, REFERENCE), 6 / 8)
    assert math.isclose(pair_precision(test, REFERENCE), 1.0)
    # Reference columns with 2+ residues: 4; test reproduces columns 1, 2 and 4.
    assert math.isclose(total_column(test, REFERENCE), 3 / 4)


def test_row_order_does_not_matter():
    shuffled = _alignment([("c", "ACDE"), ("a", "ACD-"), ("b", "A-DE")])
    assert sum_of_pairs(shuffled, REFERENCE) == 1.0


def test_mismatched_sequences_rejected():
    other = _alignment([("a", "ACD-"), ("b", "A-DE"), ("d", "ACDE")])
    with pytest.raises(ValueError):
        sum_of_pairs(other, REFERENCE)
    different = _alignment([("a", "ACD-"), ("b", "A-DE"), ("c", "ACDF")])
    with pytest.raises(ValueError):
        total_column(different, REFERENCE)


def test_evaluate_multiple_aggregates():
    test = _alignment([("a", "ACD--"), ("b", "A--DE"), ("c", "ACD-E")], name="t")
    result = evaluate_multiple([REFERENCE, test], [REFERENCE, REFERENCE], sum_of_pairs)

    assert result.metric == "sum_of_pairs"
    assert result.count == 2
    assert math.isclose(result.mean, (1.0 + 0.75) / 2)
    assert math.isclose(result.std, 0.125)
    assert result.minimum == 0.75
    assert result.maximum == 1.0
    assert result.per_alignment[1].alignment_name == "t"
    assert result.per_alignment[0].num_sequences == 3


def test_evaluate_multiple_length_mismatch():
    with pytest.raises(ValueError):
        evaluate_multiple([REFERENCE], [], sum_of_pairs)


def test_evaluate_all_metrics_default_suite():
    results = evaluate_all_metrics([REFERENCE], [REFERENCE])
    assert set(results) == {"sum_of_pairs", "pair_precision", "total_column"}
    assert results["total_column"].std is None

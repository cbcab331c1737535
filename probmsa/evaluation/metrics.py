"""Multiple alignment accuracy metrics against a reference alignment."""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, List, Set, Tuple

from probmsa.constants import GAP_CHARACTERS
from probmsa.types import MultiSequence, SequenceType

MetricFunction = Callable[[MultiSequence, MultiSequence], float]

# (sequence identifier, 0-based residue index)
Residue = Tuple[str, int]


def _safe_divide(numerator: float, denominator: float) -> float:
    """Divide with zero-denominator protection."""
    return numerator / denominator if denominator else 0.0


def _ungapped(seq: SequenceType) -> str:
    return "".join(r for r in seq.residues if r not in GAP_CHARACTERS)


def _check_comparable(test: MultiSequence, reference: MultiSequence) -> None:
    """Both alignments must hold the same sequences, matched by identifier."""
    test_seqs = {s.identifier: _ungapped(s) for s in test}
    ref_seqs = {s.identifier: _ungapped(s) for s in reference}
    if len(test_seqs) != len(test) or len(ref_seqs) != len(reference):
        raise ValueError("Alignments must not repeat sequence identifiers.")
    if set(test_seqs) != set(ref_seqs):
        raise ValueError(
            "Test and reference alignments reference different sequences: "
            f"{sorted(test_seqs)} vs {sorted(ref_seqs)}"
        )
    for identifier, residues in ref_seqs.items():
        if test_seqs[identifier] != residues:
            raise ValueError(
                f"Sequence {identifier!r} differs between test and reference."
            )


def extract_columns(alignment: MultiSequence) -> List[FrozenSet[Residue]]:
    """Return every column as the set of residues it aligns (gaps dropped)."""
    positions = {s.identifier: 0 for s in alignment}
    columns: List[FrozenSet[Residue]] = []
    for col in range(alignment.columns):
        members = []
        for seq in alignment:
            if seq.residues[col] not in GAP_CHARACTERS:
                members.append((seq.identifier, positions[seq.identifier]))
                positions[seq.identifier] += 1
        columns.append(frozenset(members))
    return columns


def extract_aligned_pairs(alignment: MultiSequence) -> Set[Tuple[Residue, Residue]]:
    """Return every pair of residues placed in the same column.

    Pairs are ordered so that the first residue's identifier sorts first.
    """
    pairs: Set[Tuple[Residue, Residue]] = set()
    for column in extract_columns(alignment):
        members = sorted(column)
        for a in range(len(members)):
            for b in range(a + 1, len(members)):
                pairs.add((members[a], members[b]))
    return pairs


def sum_of_pairs(test: MultiSequence, reference: MultiSequence) -> float:
    """Fraction of reference residue pairs reproduced by the test alignment."""
    _check_comparable(test, reference)
    ref_pairs = extract_aligned_pairs(reference)
    if not ref_pairs:
        return 1.0
    return len(ref_pairs & extract_aligned_pairs(test)) / len(ref_pairs)


def pair_precision(test: MultiSequence, reference: MultiSequence) -> float:
    """Fraction of test residue pairs that the reference also aligns."""
    _check_comparable(test, reference)
    test_pairs = extract_aligned_pairs(test)
    return _safe_divide(
        len(test_pairs & extract_aligned_pairs(reference)), len(test_pairs)
    )


def total_column(test: MultiSequence, reference: MultiSequence) -> float:
    """Fraction of reference columns reproduced exactly by the test alignment.

    Only reference columns aligning at least two residues are counted.
    """
    _check_comparable(test, reference)
    ref_columns = [c for c in extract_columns(reference) if len(c) > 1]
    if not ref_columns:
        return 1.0
    test_columns = set(extract_columns(test))
    return sum(c in test_columns for c in ref_columns) / len(ref_columns)


DEFAULT_METRICS: Dict[str, MetricFunction] = {
    "sum_of_pairs": sum_of_pairs,
    "pair_precision": pair_precision,
    "total_column": total_column,
}


__all__ = [
    "MetricFunction",
    "DEFAULT_METRICS",
    "extract_columns",
    "extract_aligned_pairs",
    "sum_of_pairs",
    "pair_precision",
    "total_column",
]

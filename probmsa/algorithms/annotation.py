"""Per-column confidence scores from the posterior store."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple, Union

from probmsa.algorithms.sparse import PosteriorMatrices
from probmsa.constants import GAP_CHARACTERS
from probmsa.types.alignment import MultiSequence


class AnnotationScorer:
    """Score every alignment column in [0, 200] by mean pairwise posterior."""

    def __init__(self, matrices: PosteriorMatrices) -> None:
        self.matrices = matrices

    def column_score(self, active: Sequence[Tuple[int, int]]) -> int:
        """Score one column from its ``(label, residue position)`` entries.

        Entries must be sorted by label. Fewer than two entries score 0.
        """
        n = len(active)
        if n < 2:
            return 0
        total = 0.0
        for a in range(n):
            label_a, pos_a = active[a]
            for b in range(a + 1, n):
                label_b, pos_b = active[b]
                total += self.matrices.value(label_a, label_b, pos_a, pos_b)
        return int(round(200.0 * total / (n * (n - 1))))

    def score(self, alignment: MultiSequence) -> List[int]:
        """Return one score per column."""
        members = sorted(alignment, key=lambda s: (s.sort_label, s.label))
        positions = [0] * len(members)
        scores: List[int] = []
        for col in range(alignment.columns):
            active: List[Tuple[int, int]] = []
            for index, seq in enumerate(members):
                if seq.residues[col] not in GAP_CHARACTERS:
                    positions[index] += 1
                    active.append((seq.label, positions[index]))
            scores.append(self.column_score(active))
        return scores

    def write(self, alignment: MultiSequence, path: Union[str, Path]) -> List[int]:
        """Write the scores one per line, right-aligned in four characters."""
        scores = self.score(alignment)
        with Path(path).open("w", encoding="utf-8") as handle:
            for value in scores:
                handle.write(f"{value:>4}\n")
        return scores


__all__ = ["AnnotationScorer"]

"""Sparse posterior matrices and the triangular per-pair store.

A posterior matrix between sequences of lengths ``L1`` and ``L2`` has shape
(L1 + 1, L2 + 1): residue coordinates are 1-based and row 0 / column 0 are
the gap sentinels, which are never stored. Only the pairs ``i < j`` are kept
in :class:`PosteriorMatrices`; the ``(j, i)`` orientation is produced on
demand by transposition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Mapping, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from probmsa.constants import POSTERIOR_CUTOFF


class SparsePosteriorMatrix:
    """CSR encoding of the cells of a dense posterior kept after pruning."""

    __slots__ = ("_matrix", "_cells")

    def __init__(self, matrix: csr_matrix) -> None:
        self._matrix = csr_matrix(matrix)
        self._cells = None

    @classmethod
    def from_dense(
        cls, dense: np.ndarray, cutoff: float = POSTERIOR_CUTOFF
    ) -> "SparsePosteriorMatrix":
        """Keep every cell with ``value >= cutoff``, sentinels excluded."""
        kept = np.array(dense, dtype=float)
        kept[0, :] = 0.0
        kept[:, 0] = 0.0
        kept[kept < cutoff] = 0.0
        return cls(csr_matrix(kept))

    @property
    def shape(self) -> Tuple[int, int]:
        """Dense shape including the sentinel row and column."""
        return self._matrix.shape

    @property
    def seq1_length(self) -> int:
        return self._matrix.shape[0] - 1

    @property
    def seq2_length(self) -> int:
        return self._matrix.shape[1] - 1

    @property
    def csr(self) -> csr_matrix:
        """Underlying scipy matrix; treat as read-only."""
        return self._matrix

    @property
    def num_cells(self) -> int:
        """Number of stored cells."""
        return int(self._matrix.nnz)

    def row(self, x: int) -> Tuple[np.ndarray, np.ndarray]:
        """Return the (columns, values) stored in row ``x``."""
        start, end = self._matrix.indptr[x], self._matrix.indptr[x + 1]
        return self._matrix.indices[start:end], self._matrix.data[start:end]

    def value(self, x: int, y: int) -> float:
        """Posterior at ``(x, y)``, or 0 when the cell is not stored."""
        columns, values = self.row(x)
        hits = np.flatnonzero(columns == y)
        return float(values[hits[0]]) if hits.size else 0.0

    def cells(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return parallel (rows, columns, values) arrays of every stored cell."""
        if self._cells is None:
            coo = self._matrix.tocoo()
            self._cells = (coo.row, coo.col, coo.data)
        return self._cells

    def support(self) -> np.ndarray:
        """Boolean dense mask of the stored cells."""
        mask = np.zeros(self.shape, dtype=bool)
        rows, columns, _ = self.cells()
        mask[rows, columns] = True
        return mask

    def transpose(self) -> "SparsePosteriorMatrix":
        """Return the (seq2, seq1) orientation as a new matrix."""
        return SparsePosteriorMatrix(self._matrix.transpose().tocsr())

    def to_dense(self) -> np.ndarray:
        return self._matrix.toarray()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparsePosteriorMatrix):
            return NotImplemented
        return (
            self.shape == other.shape
            and (self._matrix != other._matrix).nnz == 0
        )

    def __repr__(self) -> str:
        return (
            f"SparsePosteriorMatrix({self.seq1_length}x{self.seq2_length}, "
            f"cells={self.num_cells})"
        )


class Orientation(Enum):
    """How a stored matrix is read: as stored, or transposed."""

    FORWARD = "forward"
    TRANSPOSED = "transposed"


@dataclass(frozen=True)
class OrientedMatrix:
    """A stored sparse matrix tagged with the orientation it is read in."""

    matrix: SparsePosteriorMatrix
    orientation: Orientation

    @property
    def csr(self):
        """scipy view in the requested orientation (a transpose is not copied)."""
        if self.orientation is Orientation.TRANSPOSED:
            return self.matrix.csr.transpose()
        return self.matrix.csr

    def cells(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Stored cells as (rows, columns, values) in the requested orientation."""
        rows, columns, values = self.matrix.cells()
        if self.orientation is Orientation.TRANSPOSED:
            return columns, rows, values
        return rows, columns, values

    def resolve(self) -> SparsePosteriorMatrix:
        """Materialize the matrix in the requested orientation."""
        if self.orientation is Orientation.TRANSPOSED:
            return self.matrix.transpose()
        return self.matrix


class PosteriorMatrices:
    """Triangular store of sparse posteriors keyed by sequence label pairs.

    Only ``(i, j)`` with ``i < j`` is stored. :meth:`oriented` and :meth:`get`
    give symmetric access: asking for ``(j, i)`` reads the stored ``(i, j)``
    matrix transposed.
    """

    def __init__(
        self,
        num_sequences: int,
        matrices: Mapping[Tuple[int, int], SparsePosteriorMatrix],
    ) -> None:
        for i, j in matrices:
            if not 0 <= i < j < num_sequences:
                raise ValueError(
                    f"Posterior store keys must satisfy 0 <= i < j < {num_sequences}, got {(i, j)}"
                )
        self._num_sequences = num_sequences
        self._matrices: Dict[Tuple[int, int], SparsePosteriorMatrix] = dict(matrices)

    @property
    def num_sequences(self) -> int:
        return self._num_sequences

    def __len__(self) -> int:
        return len(self._matrices)

    def __contains__(self, key: Tuple[int, int]) -> bool:
        return key in self._matrices

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(sorted(self._matrices))

    def items(self):
        """Stored ``((i, j), matrix)`` pairs in key order."""
        return [(key, self._matrices[key]) for key in sorted(self._matrices)]

    def stored(self, i: int, j: int) -> SparsePosteriorMatrix:
        """Return the stored matrix for ``i < j``."""
        if i >= j:
            raise KeyError(f"Only pairs with i < j are stored, got {(i, j)}")
        return self._matrices[(i, j)]

    def oriented(self, i: int, j: int) -> OrientedMatrix:
        """Orientation-tagged matrix relating sequence ``i`` to sequence ``j``."""
        if i == j:
            raise KeyError(f"No posterior matrix relates a sequence to itself: {i}")
        if i < j:
            return OrientedMatrix(self._matrices[(i, j)], Orientation.FORWARD)
        return OrientedMatrix(self._matrices[(j, i)], Orientation.TRANSPOSED)

    def get(self, i: int, j: int) -> SparsePosteriorMatrix:
        """Sparse matrix with rows indexing sequence ``i`` and columns ``j``."""
        return self.oriented(i, j).resolve()

    def value(self, i: int, j: int, x: int, y: int) -> float:
        """Posterior of residue ``x`` of ``i`` aligning to residue ``y`` of ``j``."""
        if i < j:
            return self._matrices[(i, j)].value(x, y)
        return self._matrices[(j, i)].value(y, x)

    def total_cells(self) -> int:
        return sum(matrix.num_cells for matrix in self._matrices.values())


__all__ = [
    "SparsePosteriorMatrix",
    "Orientation",
    "OrientedMatrix",
    "PosteriorMatrices",
]

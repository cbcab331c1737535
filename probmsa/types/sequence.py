"""Sequence types."""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence
from abc import ABC, abstractmethod

import numpy as np

from probmsa.constants import GAP, GAP_CHARACTERS, PATH_BOTH


@dataclass(frozen=True)
class SequenceType(ABC):
    """Biological sequence with an identifier, input label and sort key.

    ``label`` is the index of the sequence in the input set and addresses the
    pairwise posterior store; ``sort_label`` orders sequences for output.
    """

    identifier: str
    residues: List[str]
    description: Optional[str] = None
    label: int = 0
    sort_label: int = 0
    aligned: bool = False

    def __post_init__(self) -> None:
        uppercased: List[str] = [r.upper() for r in self.residues]
        object.__setattr__(self, "residues", uppercased)
        self._validate()

    def __len__(self) -> int:
        return len(self.residues)

    def __str__(self) -> str:
        class_name = self.__class__.__name__
        joined_residues = "".join(self.residues)
        return (
            f"{class_name} (\n"
            f"   id: {self.identifier} ({'aligned' if self.aligned else 'unaligned'})\n"
            f"   label: {self.label}\n"
            f"   residues: {joined_residues}\n"
            f")"
        )

    @property
    def sequence(self) -> str:
        """Residues joined into a string."""
        return "".join(self.residues)

    def ungapped(self) -> "SequenceType":
        """Return the sequence with every gap character removed."""
        return replace(
            self,
            residues=[r for r in self.residues if r not in GAP_CHARACTERS],
            aligned=False,
        )

    def add_gaps(self, path: Sequence[str], marker: str) -> "SequenceType":
        """Insert gaps following an alignment path.

        A residue (or existing column) is consumed on every ``B`` step and on
        every step equal to ``marker``; any other step yields a gap.
        """
        source = iter(self.residues)
        gapped: List[str] = []
        for step in path:
            if step == PATH_BOTH or step == marker:
                gapped.append(next(source))
            else:
                gapped.append(GAP)
        return replace(self, residues=gapped, aligned=True)

    def residue_mapping(self) -> np.ndarray:
        """Return the 1-based column of every residue, with a leading 0 sentinel."""
        is_residue = np.array(
            [r not in GAP_CHARACTERS for r in self.residues], dtype=bool
        )
        return np.concatenate(([0], np.flatnonzero(is_residue) + 1))

    def residue_count(self) -> int:
        """Number of non-gap characters."""
        return sum(r not in GAP_CHARACTERS for r in self.residues)

    @property
    @abstractmethod
    def allowed(self) -> frozenset:
        """Characters accepted in unaligned residues."""
        raise NotImplementedError

    def _validate(self) -> None:
        allowed = set(self.allowed)
        if self.aligned:
            allowed |= GAP_CHARACTERS
        invalid = {ch for ch in self.residues if ch not in allowed}
        if invalid:
            raise ValueError(
                f"Invalid residues in {self.identifier!r}: {sorted(invalid)}"
            )


@dataclass(frozen=True)
class ProteinSequence(SequenceType):
    """Amino-acid sequence; accepts the 20 standard residues and IUPAC extras."""

    @property
    def allowed(self) -> frozenset:
        return frozenset("ABCDEFGHIKLMNPQRSTVWXYZUO*")


@dataclass(frozen=True)
class NucleotideSequence(SequenceType):
    """DNA or RNA sequence with IUPAC ambiguity codes."""

    @property
    def allowed(self) -> frozenset:
        return frozenset("ACGTUNRYSWKMBDHV")


__all__ = ["SequenceType", "ProteinSequence", "NucleotideSequence"]

"""Alignment types."""

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Sequence

from probmsa.constants import GAP_CHARACTERS

from .sequence import SequenceType


@dataclass(frozen=True)
class MultiSequence:
    """Ordered collection of sequences, gapped to a common length once aligned.

    Every alignment stage builds a new collection; instances are never
    modified in place.
    """

    sequences: List[SequenceType]
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "sequences", list(self.sequences))

        if any(s.aligned for s in self.sequences):
            # Validate that all aligned sequences have the same length
            if any(not s.aligned for s in self.sequences):
                raise ValueError("Cannot mix aligned and unaligned sequences.")
            if any(len(s) != self.columns for s in self.sequences):
                raise ValueError("All aligned sequences must have the same length.")

        labels = [s.label for s in self.sequences]
        if len(set(labels)) != len(labels):
            raise ValueError(f"Duplicate sequence labels: {labels}")

    def __len__(self) -> int:
        return len(self.sequences)

    def __iter__(self) -> Iterator[SequenceType]:
        return iter(self.sequences)

    def __getitem__(self, index: int) -> SequenceType:
        return self.sequences[index]

    @property
    def num_sequences(self) -> int:
        """Number of sequences in the collection."""
        return len(self.sequences)

    @property
    def columns(self) -> int:
        """Number of columns (length of the first sequence)."""
        if not self.sequences:
            return 0
        return len(self.sequences[0])

    @property
    def labels(self) -> List[int]:
        """Input labels in collection order."""
        return [s.label for s in self.sequences]

    def project(self, indices: Iterable[int]) -> "MultiSequence":
        """Return the members at the given positions, in increasing position order.

        For aligned members, columns that are gaps in every selected member
        are dropped.
        """
        chosen = [self.sequences[i] for i in sorted(set(indices))]
        if chosen and chosen[0].aligned:
            keep = [
                col
                for col in range(len(chosen[0]))
                if any(s.residues[col] not in GAP_CHARACTERS for s in chosen)
            ]
            chosen = [
                replace(s, residues=[s.residues[col] for col in keep])
                for s in chosen
            ]
        return MultiSequence(chosen, name=self.name)

    def add_gaps(self, path: Sequence[str], marker: str) -> "MultiSequence":
        """Apply an alignment path to every member."""
        return MultiSequence(
            [s.add_gaps(path, marker) for s in self.sequences], name=self.name
        )

    def sorted_by_label(self) -> "MultiSequence":
        """Return the members ordered by sort label (stable)."""
        return MultiSequence(
            sorted(self.sequences, key=lambda s: s.sort_label), name=self.name
        )

    def reordered(self, labels: Sequence[int]) -> "MultiSequence":
        """Return the members in the order given by their input labels."""
        by_label = {s.label: s for s in self.sequences}
        if set(by_label) != set(labels):
            raise ValueError("Reordering labels do not match the collection.")
        return MultiSequence([by_label[label] for label in labels], name=self.name)

    def merged_with(self, other: "MultiSequence") -> "MultiSequence":
        """Concatenate two collections."""
        return MultiSequence(self.sequences + other.sequences, name=self.name)

    def gap_columns(self) -> List[int]:
        """0-based columns that contain at least one gap."""
        return [
            col
            for col in range(self.columns)
            if any(s.residues[col] in GAP_CHARACTERS for s in self.sequences)
        ]

    def __str__(self) -> str:
        class_name = self.__class__.__name__
        rows = "\n".join(
            f"      {s.identifier}: {s.sequence}" for s in self.sequences
        )
        return (
            f"{class_name} (\n"
            f"   name: {self.name}\n"
            f"   sequences (columns: {self.columns}):\n{rows}\n"
            f")"
        )


__all__ = ["MultiSequence"]

"""Functions for working with FASTA files."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Iterable, List, Sequence, Union

import skbio
import skbio.io

from probmsa.constants import FASTA_LINE_WIDTH, GAP, GAP_CHARACTERS
from probmsa.types import (
    MultiSequence,
    NucleotideSequence,
    ProteinSequence,
    SequenceType,
)
from probmsa.utils.matrices import SequenceKind

PathOrHandle = Union[str, Path, IO[str]]


def sequence_from_skbio(
    record: skbio.Sequence,
    label: int,
    kind: SequenceKind = "protein",
    aligned: bool = False,
) -> SequenceType:
    """Convert a scikit-bio record to a SequenceType.

    Unaligned records lose every gap character; aligned records keep them,
    normalized to ``-``.
    """
    metadata = getattr(record, "metadata", {}) or {}
    identifier = metadata.get("id") or f"seq{label}"
    description = metadata.get("description") or None
    text = str(record)
    if aligned:
        residues = [GAP if ch in GAP_CHARACTERS else ch for ch in text]
    else:
        residues = [ch for ch in text if ch not in GAP_CHARACTERS]

    seq_cls = NucleotideSequence if kind == "nucleotide" else ProteinSequence
    return seq_cls(
        identifier=identifier,
        residues=residues,
        description=description,
        label=label,
        sort_label=label,
        aligned=aligned,
    )


def read_fasta(
    paths: Union[PathOrHandle, Sequence[PathOrHandle]],
    kind: SequenceKind = "protein",
    aligned: bool = False,
) -> MultiSequence:
    """Read one or more FASTA files into a MultiSequence.

    Labels follow input order across all files.

    Raises:
        ValueError: If no sequence is found.
    """
    if isinstance(paths, (str, Path)) or hasattr(paths, "read"):
        paths = [paths]

    sequences: List[SequenceType] = []
    for path in paths:
        source = str(path) if isinstance(path, Path) else path
        for record in skbio.io.read(source, format="fasta"):
            sequences.append(
                sequence_from_skbio(record, len(sequences), kind, aligned)
            )
    if not sequences:
        raise ValueError("No sequences found in the input.")
    return MultiSequence(sequences)


def _to_skbio(sequences: Iterable[SequenceType]):
    for seq in sequences:
        metadata = {"id": seq.identifier}
        if seq.description:
            metadata["description"] = seq.description
        yield skbio.Sequence(seq.sequence, metadata=metadata)


def write_fasta(alignment: MultiSequence, into: PathOrHandle) -> None:
    """Write sequences as FASTA wrapped at 60 columns."""
    skbio.io.write(
        _to_skbio(alignment),
        format="fasta",
        into=str(into) if isinstance(into, Path) else into,
        max_width=FASTA_LINE_WIDTH,
    )


__all__ = ["sequence_from_skbio", "read_fasta", "write_fasta"]

"""ClustalW-style block output with a conservation line."""

from __future__ import annotations

from pathlib import Path
from typing import IO, List, Union

from probmsa.constants import (
    CLUSTAL_BLOCK_WIDTH,
    CLUSTAL_STRONG_GROUPS,
    CLUSTAL_WEAK_GROUPS,
    GAP_CHARACTERS,
)
from probmsa.types.alignment import MultiSequence

CLUSTAL_HEADER = "CLUSTAL W (probmsa) multiple sequence alignment"


def conservation_symbol(column: str) -> str:
    """``*`` identical, ``:`` strong group, ``.`` weak group, else a space.

    Columns containing a gap are never marked.
    """
    if not column or any(ch in GAP_CHARACTERS for ch in column):
        return " "
    residues = set(column.upper())
    if len(residues) == 1:
        return "*"
    if any(residues <= set(group) for group in CLUSTAL_STRONG_GROUPS):
        return ":"
    if any(residues <= set(group) for group in CLUSTAL_WEAK_GROUPS):
        return "."
    return " "


def conservation_line(alignment: MultiSequence) -> str:
    rows = [seq.sequence for seq in alignment]
    return "".join(
        conservation_symbol("".join(row[col] for row in rows))
        for col in range(alignment.columns)
    )


def format_clustal(alignment: MultiSequence, width: int = CLUSTAL_BLOCK_WIDTH) -> str:
    """Render the alignment in blocks of ``width`` columns."""
    names = [seq.identifier for seq in alignment]
    pad = max((len(name) for name in names), default=0) + 4
    rows = [seq.sequence for seq in alignment]
    conservation = conservation_line(alignment)

    lines: List[str] = [CLUSTAL_HEADER, "", ""]
    for start in range(0, alignment.columns, width):
        end = start + width
        for name, row in zip(names, rows):
            lines.append(f"{name:<{pad}}{row[start:end]}")
        lines.append(" " * pad + conservation[start:end])
        lines.append("")
    return "\n".join(lines) + "\n"


def write_clustal(alignment: MultiSequence, into: Union[str, Path, IO[str]]) -> None:
    """Write the ClustalW rendering to a path or an open text handle."""
    text = format_clustal(alignment)
    if hasattr(into, "write"):
        into.write(text)
        return
    with Path(into).open("w", encoding="utf-8") as handle:
        handle.write(text)


__all__ = ["conservation_symbol", "format_clustal", "write_clustal"]

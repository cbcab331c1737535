#!/usr/bin/env python3
"""Align one family with annotation enabled and plot per-column confidence."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from statistics import fmean
from typing import List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .constants import (
    ANNOTATION_COLOR,
    ANNOTATION_FOLDER,
    ANNOTATION_MEAN_COLOR,
    PLOT_DPI,
    PLOT_GRID_ALPHA,
    RANDOM_SEED,
)

# Ensure repository modules are importable when invoked as a script
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from probmsa.algorithms.msa import MultipleAligner
from probmsa.config import AlignmentConfig
from probmsa.utils import read_fasta


def read_annotation(path: Path) -> List[int]:
    """Read one integer score per line."""
    with path.open("r", encoding="utf-8") as handle:
        return [int(line) for line in handle if line.strip()]


def plot_scores(scores: List[int], title: str, output_path: Path) -> None:
    """Bar plot of column scores with their mean."""
    columns = list(range(1, len(scores) + 1))
    _, ax = plt.subplots(figsize=(max(8, len(scores) / 10), 4))
    ax.bar(columns, scores, width=1.0, color=ANNOTATION_COLOR, linewidth=0)
    if scores:
        ax.axhline(
            y=fmean(scores),
            color=ANNOTATION_MEAN_COLOR,
            linestyle="--",
            linewidth=1.5,
            label=f"mean {fmean(scores):.1f}",
        )
        ax.legend(loc="lower right", framealpha=0.9)
    ax.set_xlim(0.5, len(scores) + 0.5)
    ax.set_ylim(0, 200)
    ax.set_xlabel("Alignment column", fontsize=12)
    ax.set_ylabel("Confidence (0-200)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.grid(True, axis="y", alpha=PLOT_GRID_ALPHA)
    plt.tight_layout()
    plt.savefig(output_path, dpi=PLOT_DPI)
    plt.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Plot per-column confidence scores for one family."
    )
    parser.add_argument("fasta", type=Path, help="Unaligned FASTA file.")
    parser.add_argument(
        "--nucleotide", action="store_true", help="Family is DNA/RNA."
    )
    args = parser.parse_args()

    if not args.fasta.exists():
        raise FileNotFoundError(f"FASTA file not found: {args.fasta}")
    ANNOTATION_FOLDER.mkdir(parents=True, exist_ok=True)

    name = args.fasta.stem
    annotation_path = ANNOTATION_FOLDER / f"{name}.annot"
    config = AlignmentConfig(
        annotation_path=str(annotation_path),
        sequence_type="nucleotide" if args.nucleotide else "protein",
        random_seed=RANDOM_SEED,
    )
    sequences = read_fasta(args.fasta, kind=config.sequence_type)
    print(f"Aligning {sequences.num_sequences} sequences from {args.fasta}")
    MultipleAligner(config).align(sequences)

    figure_path = ANNOTATION_FOLDER / f"{name}.png"
    plot_scores(read_annotation(annotation_path), f"Column confidence: {name}", figure_path)
    print(f"Wrote {annotation_path} and {figure_path}")


if __name__ == "__main__":
    main()

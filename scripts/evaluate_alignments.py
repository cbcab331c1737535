#!/usr/bin/env python3
"""Align every benchmark family and score it against its reference alignment."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd

from .constants import (
    ALIGNMENTS_OUTPUT_FOLDER,
    CONFIGURATIONS,
    EVALUATION_METRICS_FOLDER,
    FASTA_FOLDER,
    FASTA_SUFFIXES,
    RANDOM_SEED,
    REFERENCE_FOLDER,
)

# Ensure repository modules are importable when invoked as a script
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from probmsa.algorithms.msa import MultipleAligner
from probmsa.config import AlignmentConfig
from probmsa.evaluation import evaluate_all_metrics
from probmsa.types import EvaluationResult, MultiSequence
from probmsa.utils import read_fasta, write_fasta


def _collect_families(kind: str) -> List[Tuple[MultiSequence, MultiSequence]]:
    """Pair every unaligned family with its reference alignment."""
    families: List[Tuple[MultiSequence, MultiSequence]] = []
    for path in sorted(FASTA_FOLDER.iterdir()):
        if path.suffix not in FASTA_SUFFIXES:
            continue
        reference_path = REFERENCE_FOLDER / path.name
        if not reference_path.exists():
            print(f"Skipping {path.name}: no reference alignment")
            continue
        unaligned = read_fasta(path, kind=kind)
        reference = read_fasta(reference_path, kind=kind, aligned=True)
        families.append(
            (
                MultiSequence(unaligned.sequences, name=path.stem),
                MultiSequence(reference.sequences, name=path.stem),
            )
        )
    return families


def _results_frame(results: Dict[str, EvaluationResult], label: str) -> pd.DataFrame:
    rows = [
        {
            "Configuration": label,
            "Metric": metric_name,
            "Mean": evaluation.mean,
            "Std": evaluation.std if evaluation.std is not None else float("nan"),
            "Min": evaluation.minimum,
            "Max": evaluation.maximum,
            "Count": evaluation.count,
        }
        for metric_name, evaluation in results.items()
    ]
    return pd.DataFrame(rows)


def _per_alignment_frame(
    results: Dict[str, EvaluationResult], label: str
) -> pd.DataFrame:
    rows = [
        {
            "Configuration": label,
            "Metric": metric_name,
            "Alignment": result.alignment_name,
            "Sequences": result.num_sequences,
            "Value": result.value,
        }
        for metric_name, evaluation in results.items()
        for result in evaluation.per_alignment
    ]
    return pd.DataFrame(rows)


def evaluate_configuration(
    label: str,
    overrides: Dict[str, object],
    families: List[Tuple[MultiSequence, MultiSequence]],
    kind: str,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Align all families with one configuration and score them."""
    config = AlignmentConfig(sequence_type=kind, random_seed=RANDOM_SEED, **overrides)
    output_folder = ALIGNMENTS_OUTPUT_FOLDER / label
    output_folder.mkdir(parents=True, exist_ok=True)

    predictions: List[MultiSequence] = []
    for unaligned, _ in families:
        print(f"  aligning {unaligned.name} ({unaligned.num_sequences} sequences)")
        alignment = MultipleAligner(config).align(unaligned).alignment
        alignment = MultiSequence(alignment.sequences, name=unaligned.name)
        write_fasta(alignment, output_folder / f"{unaligned.name}.fasta")
        predictions.append(alignment)

    references = [reference for _, reference in families]
    results = evaluate_all_metrics(predictions, references)
    return _results_frame(results, label), _per_alignment_frame(results, label)


def main() -> None:
    """Evaluate every configuration and write aggregate and per-family CSVs."""
    parser = argparse.ArgumentParser(
        description="Score probmsa alignments against reference alignments."
    )
    parser.add_argument(
        "--nucleotide", action="store_true", help="Families are DNA/RNA."
    )
    parser.add_argument(
        "--config",
        choices=sorted(CONFIGURATIONS),
        action="append",
        help="Configuration(s) to evaluate (default: all).",
    )
    args = parser.parse_args()
    kind = "nucleotide" if args.nucleotide else "protein"

    if not FASTA_FOLDER.exists():
        raise FileNotFoundError(f"FASTA directory not found: {FASTA_FOLDER}")
    if not REFERENCE_FOLDER.exists():
        raise FileNotFoundError(f"Reference directory not found: {REFERENCE_FOLDER}")
    EVALUATION_METRICS_FOLDER.mkdir(parents=True, exist_ok=True)

    families = _collect_families(kind)
    if not families:
        raise ValueError(f"No families with references found in {FASTA_FOLDER}")
    print(f"Found {len(families)} families.")

    aggregate_frames: List[pd.DataFrame] = []
    per_alignment_frames: List[pd.DataFrame] = []
    for label in args.config or sorted(CONFIGURATIONS):
        print(f"\n=== Configuration: {label} ===")
        aggregate, per_alignment = evaluate_configuration(
            label, CONFIGURATIONS[label], families, kind
        )
        aggregate_frames.append(aggregate)
        per_alignment_frames.append(per_alignment)

    aggregate_df = (
        pd.concat(aggregate_frames, ignore_index=True)
        .sort_values(["Metric", "Configuration"])
        .reset_index(drop=True)
    )
    print("\nAggregate metrics:")
    print(aggregate_df.to_string(index=False, float_format=lambda x: f"{x:.4f}"))

    aggregate_path = EVALUATION_METRICS_FOLDER / "aggregate.csv"
    per_alignment_path = EVALUATION_METRICS_FOLDER / "per_alignment.csv"
    aggregate_df.to_csv(aggregate_path, index=False)
    pd.concat(per_alignment_frames, ignore_index=True).to_csv(
        per_alignment_path, index=False
    )
    print(f"\nWrote metrics to {aggregate_path} and {per_alignment_path}")


if __name__ == "__main__":
    main()

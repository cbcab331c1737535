#!/usr/bin/env python3
"""Run the complete analysis workflow."""

import argparse
import subprocess
import sys

from .constants import FASTA_FOLDER, FASTA_SUFFIXES

STEPS = [
    ("Evaluating alignments", "scripts.evaluate_alignments"),
    ("Plotting metrics", "scripts.plot_metrics"),
]


def run(module: str, args: list[str] | None = None) -> None:
    """Run a script."""
    cmd = [sys.executable, "-m", module] + (args or [])
    subprocess.run(cmd, check=True)


def main() -> None:
    """Run the complete analysis workflow."""
    parser = argparse.ArgumentParser(description="Run the complete analysis workflow.")
    parser.add_argument(
        "--nucleotide", action="store_true", help="Families are DNA/RNA."
    )
    parser.add_argument(
        "--annotate",
        action="store_true",
        help="Also plot column confidence for every family (default: skip)",
    )
    opts = parser.parse_args()
    kind_args = ["--nucleotide"] if opts.nucleotide else []

    for name, module in STEPS:
        print(f"\n=== {name} ===")
        args = kind_args if module == "scripts.evaluate_alignments" else None
        run(module, args)

    if opts.annotate:
        for path in sorted(FASTA_FOLDER.iterdir()):
            if path.suffix.lower() not in FASTA_SUFFIXES:
                continue
            print(f"\n=== Annotating {path.name} ===")
            run("scripts.plot_annotation", [str(path)] + kind_args)

    print("\n=== Workflow complete ===")


if __name__ == "__main__":
    main()

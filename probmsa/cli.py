"""Command line entry point: align FASTA input and write the alignment."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from probmsa import __version__
from probmsa.algorithms.msa import MultipleAligner
from probmsa.config import AlignmentConfig
from probmsa.constants import (
    DEFAULT_CONSISTENCY_REPS,
    DEFAULT_ITERATIVE_REFINEMENT_REPS,
    DEFAULT_PF_GAP_EXTEND,
    DEFAULT_PF_GAP_OPEN,
    DEFAULT_PF_TEMPERATURE,
)
from probmsa.utils import (
    load_parameters,
    read_fasta,
    save_parameters,
    write_clustal,
    write_fasta,
)

LOGGER = logging.getLogger("probmsa")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="probmsa",
        description="Probabilistic consistency-based multiple sequence alignment.",
    )
    parser.add_argument("inputs", nargs="+", help="Unaligned FASTA file(s).")
    parser.add_argument(
        "-o",
        "--outfile",
        help="Write the alignment here instead of standard output.",
    )
    parser.add_argument(
        "-c",
        "--consistency",
        type=int,
        default=DEFAULT_CONSISTENCY_REPS,
        help="Passes of consistency transformation, 0 to 5 (default: %(default)s).",
    )
    parser.add_argument(
        "-ir",
        "--iterative-refinement",
        type=int,
        default=DEFAULT_ITERATIVE_REFINEMENT_REPS,
        help="Passes of iterative refinement, 0 to 1000 (default: %(default)s).",
    )
    parser.add_argument(
        "-co",
        "--cutoff",
        type=float,
        default=0.0,
        help="Ignore posterior cells below this value, 0 to 1 (default: %(default)s).",
    )
    parser.add_argument(
        "-annot",
        "--annotation",
        metavar="FILE",
        help="Write per-column confidence scores to FILE.",
    )
    parser.add_argument(
        "-clustalw",
        "--clustalw",
        action="store_true",
        help="Write ClustalW output instead of FASTA.",
    )
    parser.add_argument(
        "-a",
        "--alignment-order",
        action="store_true",
        help="Print sequences in alignment order rather than input order.",
    )
    parser.add_argument(
        "-p",
        "--num-threads",
        type=int,
        default=0,
        help="Worker threads for pairwise stages (default: one per CPU).",
    )
    parser.add_argument("--paramfile", help="YAML file with pair-HMM parameters.")
    parser.add_argument(
        "--write-params",
        metavar="FILE",
        help="Write the pair-HMM parameters actually used to FILE (YAML).",
    )
    parser.add_argument(
        "--nucleotide",
        action="store_true",
        help="Treat input as DNA/RNA instead of protein.",
    )
    parser.add_argument("--seed", type=int, help="Seed for iterative refinement.")
    parser.add_argument(
        "--weighted-consistency",
        action="store_true",
        help="Weight the consistency transformation by guide-tree sequence weights.",
    )
    parser.add_argument(
        "--tree-refinement",
        action="store_true",
        help="Refine by guide-tree node partitions instead of random ones.",
    )
    parser.add_argument(
        "--matrix",
        help="Substitution matrix for the partition function (default by sequence type).",
    )
    parser.add_argument(
        "--pf-temperature", type=float, default=DEFAULT_PF_TEMPERATURE
    )
    parser.add_argument("--pf-gap-open", type=float, default=DEFAULT_PF_GAP_OPEN)
    parser.add_argument(
        "--pf-gap-extend", type=float, default=DEFAULT_PF_GAP_EXTEND
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Report progress to stderr."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> AlignmentConfig:
    """Translate parsed arguments into a validated AlignmentConfig."""
    return AlignmentConfig(
        consistency_reps=args.consistency,
        iterative_refinement_reps=args.iterative_refinement,
        cutoff=args.cutoff,
        alignment_order=args.alignment_order,
        annotation_path=args.annotation,
        output_format="clustalw" if args.clustalw else "fasta",
        num_threads=args.num_threads,
        weighted_consistency=args.weighted_consistency,
        refinement_strategy="tree" if args.tree_refinement else "random",
        random_seed=args.seed,
        sequence_type="nucleotide" if args.nucleotide else "protein",
        substitution_matrix=args.matrix,
        pf_temperature=args.pf_temperature,
        pf_gap_open=args.pf_gap_open,
        pf_gap_extend=args.pf_gap_extend,
    )


def run(args: argparse.Namespace) -> None:
    config = config_from_args(args)
    params = load_parameters(args.paramfile) if args.paramfile else None
    sequences = read_fasta(args.inputs, kind=config.sequence_type)
    LOGGER.info("Loaded %d sequences", sequences.num_sequences)

    result = MultipleAligner(config, params).align(sequences)

    if args.write_params:
        save_parameters(result.parameters, args.write_params)

    writer = write_clustal if config.output_format == "clustalw" else write_fasta
    writer(result.alignment, args.outfile or sys.stdout)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        run(args)
    except (ValueError, OSError) as err:
        LOGGER.error("%s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

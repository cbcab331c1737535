"""Run configuration threaded through every alignment stage."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional

from probmsa.constants import (
    DEFAULT_CONSISTENCY_REPS,
    DEFAULT_ITERATIVE_REFINEMENT_REPS,
    DEFAULT_PF_GAP_EXTEND,
    DEFAULT_PF_GAP_OPEN,
    DEFAULT_PF_TEMPERATURE,
    MAX_CONSISTENCY_REPS,
    MAX_ITERATIVE_REFINEMENT_REPS,
    MIN_CONSISTENCY_REPS,
    MIN_ITERATIVE_REFINEMENT_REPS,
)
from probmsa.utils.matrices import SequenceKind, default_matrix_name

RefinementStrategy = Literal["random", "tree"]
OutputFormat = Literal["fasta", "clustalw"]


@dataclass(frozen=True)
class AlignmentConfig:
    """Configuration for one alignment run.

    Attributes:
        consistency_reps: Rounds of the consistency transformation (0 to 5).
        iterative_refinement_reps: Refinement pass budget (0 to 1000).
        cutoff: Posterior cells below this value are ignored when building
            profile-profile posteriors; must lie in [0, 1].
        alignment_order: Keep guide-tree order instead of input order.
        annotation_path: Where to write per-column confidence scores.
        output_format: ``fasta`` or ``clustalw``.
        num_threads: Worker threads for pairwise stages (0 = one per CPU).
        weighted_consistency: Weight the consistency transformation by
            guide-tree sequence weights.
        refinement_strategy: ``random`` partitions or guide-tree ``tree``
            node partitions.
        random_seed: Seed of the refinement random generator.
        sequence_type: ``protein`` or ``nucleotide``.
        substitution_matrix: Matrix for the partition function; defaults to
            the sequence type's matrix.
        pf_temperature: Partition-function temperature.
        pf_gap_open: Partition-function gap-open score (<= 0).
        pf_gap_extend: Partition-function gap-extension score (<= 0).
    """

    consistency_reps: int = DEFAULT_CONSISTENCY_REPS
    iterative_refinement_reps: int = DEFAULT_ITERATIVE_REFINEMENT_REPS
    cutoff: float = 0.0
    alignment_order: bool = False
    annotation_path: Optional[str] = None
    output_format: OutputFormat = "fasta"
    num_threads: int = 0
    weighted_consistency: bool = False
    refinement_strategy: RefinementStrategy = "random"
    random_seed: Optional[int] = None
    sequence_type: SequenceKind = "protein"
    substitution_matrix: Optional[str] = None
    pf_temperature: float = DEFAULT_PF_TEMPERATURE
    pf_gap_open: float = DEFAULT_PF_GAP_OPEN
    pf_gap_extend: float = DEFAULT_PF_GAP_EXTEND

    def __post_init__(self) -> None:
        if not MIN_CONSISTENCY_REPS <= self.consistency_reps <= MAX_CONSISTENCY_REPS:
            raise ValueError(
                "Bad value for number of consistency reps: "
                f"{self.consistency_reps} (expected "
                f"{MIN_CONSISTENCY_REPS} to {MAX_CONSISTENCY_REPS})"
            )
        if not (
            MIN_ITERATIVE_REFINEMENT_REPS
            <= self.iterative_refinement_reps
            <= MAX_ITERATIVE_REFINEMENT_REPS
        ):
            raise ValueError(
                "Bad value for number of iterative refinement reps: "
                f"{self.iterative_refinement_reps} (expected "
                f"{MIN_ITERATIVE_REFINEMENT_REPS} to {MAX_ITERATIVE_REFINEMENT_REPS})"
            )
        if not 0.0 <= self.cutoff <= 1.0:
            raise ValueError(f"Bad value for cutoff: {self.cutoff} (expected 0 to 1)")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must be >= 0, got {self.num_threads}")
        if self.output_format not in ("fasta", "clustalw"):
            raise ValueError(f"Unknown output format: {self.output_format}")
        if self.refinement_strategy not in ("random", "tree"):
            raise ValueError(
                f"Unknown refinement strategy: {self.refinement_strategy}"
            )
        if self.sequence_type not in ("protein", "nucleotide"):
            raise ValueError(f"Unknown sequence type: {self.sequence_type}")
        if self.pf_temperature <= 0:
            raise ValueError(
                f"pf_temperature must be positive, got {self.pf_temperature}"
            )

    @property
    def matrix_name(self) -> str:
        """Substitution matrix used by the partition function."""
        return self.substitution_matrix or default_matrix_name(self.sequence_type)

    @property
    def workers(self) -> int:
        """Resolved number of worker threads."""
        return self.num_threads or os.cpu_count() or 1


__all__ = ["AlignmentConfig", "RefinementStrategy", "OutputFormat"]

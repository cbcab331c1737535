"""Unit tests for run configuration validation."""

from __future__ import annotations

import pytest

from probmsa.config import AlignmentConfig
from probmsa.constants import NUCLEOTIDE_MATRIX, PROTEIN_MATRIX


def test_defaults():
    config = AlignmentConfig()
    assert config.consistency_reps == 2
    assert config.iterative_refinement_reps == 100
    assert config.cutoff == 0.0
    assert config.output_format == "fasta"
    assert config.matrix_name == PROTEIN_MATRIX
    assert config.workers >= 1


def test_matrix_name_follows_sequence_type():
    assert AlignmentConfig(sequence_type="nucleotide").matrix_name == NUCLEOTIDE_MATRIX
    assert AlignmentConfig(substitution_matrix="PAM250").matrix_name == "PAM250"


def test_explicit_thread_count():
    assert AlignmentConfig(num_threads=3).workers == 3


@pytest.mark.parametrize(
    "kwargs",
    [
        {"consistency_reps": 6},
        {"consistency_reps": -1},
        {"iterative_refinement_reps": 1001},
        {"cutoff": 1.5},
        {"cutoff": -0.1},
        {"num_threads": -2},
        {"output_format": "stockholm"},
        {"refinement_strategy": "greedy"},
        {"sequence_type": "rna"},
        {"pf_temperature": 0.0},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        AlignmentConfig(**kwargs)


def test_error_message_names_the_value():
    with pytest.raises(ValueError, match="consistency reps: 9"):
        AlignmentConfig(consistency_reps=9)

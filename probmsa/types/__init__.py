"""Types for the project."""

from .sequence import SequenceType, ProteinSequence, NucleotideSequence
from .alignment import MultiSequence
from .evaluation import MetricResult, EvaluationResult


__all__ = [
    "SequenceType",
    "ProteinSequence",
    "NucleotideSequence",
    "MultiSequence",
    "MetricResult",
    "EvaluationResult",
    "parameters",
]

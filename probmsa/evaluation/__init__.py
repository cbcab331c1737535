"""Evaluation module for the project."""

from .evaluation import evaluate_all_metrics, evaluate_multiple, evaluate_single
from .metrics import pair_precision, sum_of_pairs, total_column

__all__ = [
    "evaluate_all_metrics",
    "evaluate_multiple",
    "evaluate_single",
    "sum_of_pairs",
    "pair_precision",
    "total_column",
    "metrics",
]

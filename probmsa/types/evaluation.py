"""Evaluation result data structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class MetricResult:
    """Metric outcome for one test alignment against its reference."""

    metric: str
    value: float
    alignment_name: Optional[str]
    num_sequences: int


@dataclass(frozen=True)
class EvaluationResult:
    """Aggregate evaluation results for a given metric."""

    metric: str
    per_alignment: List[MetricResult]
    mean: float
    std: Optional[float]
    minimum: float
    maximum: float
    count: int


__all__ = ["MetricResult", "EvaluationResult"]

"""Framework for evaluating predicted alignments against references."""

from __future__ import annotations

import math
from statistics import fmean, pstdev
from typing import Dict, List

from probmsa.evaluation.metrics import DEFAULT_METRICS, MetricFunction
from probmsa.types import MultiSequence
from probmsa.types.evaluation import EvaluationResult, MetricResult


def _resolve_metric_name(metric_fn: MetricFunction, metric_name: str | None) -> str:
    """Return a human-friendly metric name."""
    if metric_name:
        return metric_name
    func_name = getattr(metric_fn, "__name__", None)
    return func_name if func_name else "metric"


def evaluate_single(
    predicted: MultiSequence,
    reference: MultiSequence,
    metric_fn: MetricFunction,
    metric_name: str | None = None,
) -> MetricResult:
    """Evaluate one alignment with the provided metric function."""
    return MetricResult(
        metric=_resolve_metric_name(metric_fn, metric_name),
        value=metric_fn(predicted, reference),
        alignment_name=predicted.name or reference.name,
        num_sequences=predicted.num_sequences,
    )


def evaluate_multiple(
    predicted_alignments: List[MultiSequence],
    reference_alignments: List[MultiSequence],
    metric_fn: MetricFunction,
    metric_name: str | None = None,
) -> EvaluationResult:
    """Evaluate several alignments and aggregate the metric over them."""
    if len(predicted_alignments) != len(reference_alignments):
        raise ValueError(
            "Predicted and reference alignment lists must have the same length: "
            f"{len(predicted_alignments)} vs {len(reference_alignments)}"
        )

    resolved_name = _resolve_metric_name(metric_fn, metric_name)
    per_alignment = [
        evaluate_single(predicted, reference, metric_fn, resolved_name)
        for predicted, reference in zip(predicted_alignments, reference_alignments)
    ]

    values = [result.value for result in per_alignment]
    count = len(values)
    if count == 0:
        mean = minimum = maximum = math.nan
        std = None
    else:
        mean = fmean(values)
        std = pstdev(values) if count > 1 else None
        minimum = min(values)
        maximum = max(values)

    return EvaluationResult(
        metric=resolved_name,
        per_alignment=per_alignment,
        mean=mean,
        std=std,
        minimum=minimum,
        maximum=maximum,
        count=count,
    )


def evaluate_all_metrics(
    predicted_alignments: List[MultiSequence],
    reference_alignments: List[MultiSequence],
    metric_fns: Dict[str, MetricFunction] | None = None,
) -> Dict[str, EvaluationResult]:
    """Evaluate a suite of metrics and return results keyed by metric name."""
    metric_fns = metric_fns or DEFAULT_METRICS
    return {
        name: evaluate_multiple(
            predicted_alignments, reference_alignments, metric_fn, name
        )
        for name, metric_fn in metric_fns.items()
    }


__all__ = ["evaluate_single", "evaluate_multiple", "evaluate_all_metrics"]

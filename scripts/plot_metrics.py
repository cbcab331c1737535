#!/usr/bin/env python3
"""Generate plots from the metric CSV files comparing alignment configurations."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .constants import (
    CONFIGURATION_COLORS,
    EVALUATION_METRICS_FOLDER,
    METRICS_FIGURES_FOLDER,
    PLOT_DPI,
    PLOT_GRID_ALPHA,
)


def load_metrics(metrics_dir: Path, name: str) -> pd.DataFrame:
    """Load one of the CSV files written by evaluate_alignments.py."""
    csv_path = metrics_dir / name
    if not csv_path.exists():
        raise FileNotFoundError(f"Metric file not found: {csv_path}")
    return pd.read_csv(csv_path)


def plot_mean_by_configuration(df: pd.DataFrame, output_dir: Path):
    """Grouped bars of mean score per metric, one bar per configuration."""
    metrics = sorted(df["Metric"].unique())
    configurations = sorted(df["Configuration"].unique())
    width = 0.8 / max(len(configurations), 1)
    positions = np.arange(len(metrics))

    _, ax = plt.subplots(figsize=(12, 6))
    for idx, label in enumerate(configurations):
        rows = df[df["Configuration"] == label].set_index("Metric").reindex(metrics)
        ax.bar(
            positions + idx * width,
            rows["Mean"],
            width,
            yerr=rows["Std"].fillna(0.0),
            capsize=3,
            label=label,
            color=CONFIGURATION_COLORS.get(label, "#666666"),
            edgecolor="black",
            linewidth=0.5,
        )

    ax.set_xticks(positions + width * (len(configurations) - 1) / 2)
    ax.set_xticklabels(metrics)
    ax.set_ylabel("Mean score", fontsize=12)
    ax.set_ylim(0, 1.05)
    ax.set_title("Accuracy by Configuration", fontsize=14, fontweight="bold")
    ax.legend(loc="lower right", framealpha=0.9)
    ax.grid(True, axis="y", alpha=PLOT_GRID_ALPHA)

    plt.tight_layout()
    output_path = output_dir / "mean_by_configuration.png"
    plt.savefig(output_path, dpi=PLOT_DPI, bbox_inches="tight")
    print(f"Saved: {output_path}")
    plt.close()


def plot_score_vs_family_size(df: pd.DataFrame, output_dir: Path):
    """Scatter per-family scores against family size, one panel per metric."""
    metrics = sorted(df["Metric"].unique())
    fig, axes = plt.subplots(1, len(metrics), figsize=(6 * len(metrics), 5))
    axes = np.atleast_1d(axes)

    for ax, metric in zip(axes, metrics):
        metric_data = df[df["Metric"] == metric]
        for label, rows in metric_data.groupby("Configuration"):
            ax.scatter(
                rows["Sequences"],
                rows["Value"],
                label=label,
                color=CONFIGURATION_COLORS.get(label, "#666666"),
                alpha=0.7,
                s=25,
            )
        ax.set_xlabel("Sequences in family", fontsize=11)
        ax.set_ylabel("Score", fontsize=11)
        ax.set_title(metric, fontsize=12, fontweight="bold")
        ax.grid(True, alpha=PLOT_GRID_ALPHA)
    axes[0].legend(loc="best", framealpha=0.9, fontsize=9)

    fig.suptitle("Per-Family Scores", fontsize=14, fontweight="bold", y=1.02)
    plt.tight_layout()
    output_path = output_dir / "score_vs_family_size.png"
    plt.savefig(output_path, dpi=PLOT_DPI, bbox_inches="tight")
    print(f"Saved: {output_path}")
    plt.close()


def main():
    """Main function to plot metrics."""
    METRICS_FIGURES_FOLDER.mkdir(parents=True, exist_ok=True)

    print("Loading metrics from CSV files...")
    aggregate = load_metrics(EVALUATION_METRICS_FOLDER, "aggregate.csv")
    per_alignment = load_metrics(EVALUATION_METRICS_FOLDER, "per_alignment.csv")
    print(
        f"Loaded {aggregate['Configuration'].nunique()} configurations "
        f"x {aggregate['Metric'].nunique()} metrics"
    )

    print("\nGenerating plots...")
    plot_mean_by_configuration(aggregate, METRICS_FIGURES_FOLDER)
    plot_score_vs_family_size(per_alignment, METRICS_FIGURES_FOLDER)

    print("\nDone! All plots saved to:", METRICS_FIGURES_FOLDER)


if __name__ == "__main__":
    main()

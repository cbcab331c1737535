"""Constants for the analysis scripts."""

from pathlib import Path
from typing import Dict

PROJECT_ROOT = Path(__file__).parent.parent

# ============================================================================
# Data directories
# ============================================================================
DATA_FOLDER = PROJECT_ROOT / "data"
# Unaligned input families, one FASTA file per family
FASTA_FOLDER = DATA_FOLDER / "fasta"
# Reference alignments, named like their unaligned family
REFERENCE_FOLDER = DATA_FOLDER / "reference"

# ============================================================================
# Results directories
# ============================================================================
RESULTS_FOLDER = PROJECT_ROOT / "results"

# Alignments written by evaluate_alignments.py
ALIGNMENTS_OUTPUT_FOLDER = RESULTS_FOLDER / "alignments"

# Metric CSV files (from evaluate_alignments.py)
EVALUATION_METRICS_FOLDER = RESULTS_FOLDER / "metrics"

# Per-column annotation files and plots (from plot_annotation.py)
ANNOTATION_FOLDER = RESULTS_FOLDER / "annotation"

# Metric figures (from plot_metrics.py)
METRICS_FIGURES_FOLDER = RESULTS_FOLDER / "figures"

# ============================================================================
# Evaluated configurations
# ============================================================================
FASTA_SUFFIXES = (".fa", ".fasta", ".tfa")
CONFIGURATIONS: Dict[str, Dict[str, object]] = {
    "default": {},
    "weighted": {"weighted_consistency": True},
    "tree_refinement": {"refinement_strategy": "tree"},
    "no_consistency": {"consistency_reps": 0},
}
RANDOM_SEED = 0

# ============================================================================
# Plot styling
# ============================================================================
PLOT_DPI = 150
PLOT_GRID_ALPHA = 0.3
ANNOTATION_COLOR = "#2E86AB"
ANNOTATION_MEAN_COLOR = "#E94F37"
CONFIGURATION_COLORS = {
    "default": "#2E86AB",
    "weighted": "#A23B72",
    "tree_refinement": "#F18F01",
    "no_consistency": "#6C757D",
}

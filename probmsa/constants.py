"""Constants shared across the alignment pipeline."""

from typing import Tuple

GAP = "-"
GAP_CHARACTERS = {"-", "."}

# Alignment path symbols: both residues emitted, first only, second only.
PATH_BOTH = "B"
PATH_X = "X"
PATH_Y = "Y"

# Sparse posterior pruning threshold.
POSTERIOR_CUTOFF = 0.01

# Integer scale of guide-tree sequence weights.
INT_MULTIPLY = 1000

MIN_CONSISTENCY_REPS = 0
MAX_CONSISTENCY_REPS = 5
DEFAULT_CONSISTENCY_REPS = 2

MIN_ITERATIVE_REFINEMENT_REPS = 0
MAX_ITERATIVE_REFINEMENT_REPS = 1000
DEFAULT_ITERATIVE_REFINEMENT_REPS = 100

# Refinement schedule.
REDUCED_REFINEMENT_REPS = 10
LARGE_FAMILY_SIZE = 150
ADAPTIVE_MIN_FAMILY_SIZE = 25
ADAPTIVE_MIN_PASSES = 101

# Upper bounds (inclusive) of the divergence levels 0, 1 and 2.
DIVERGENT_MAX_IDENTITY = 0.25
MEDIUM_MAX_IDENTITY = 0.40
SIMILAR_MAX_IDENTITY = 0.70

# Entry of the initial distribution tuned by average identity, and the
# (upper identity bound, value) table used to tune it.
ADJUSTED_INIT_STATE = 2
INIT_STATE_ADJUSTMENTS: Tuple[Tuple[float, float], ...] = (
    (0.15, 0.143854),
    (0.20, 0.191948),
    (0.25, 0.170705),
    (0.30, 0.100675),
    (0.35, 0.090755),
    (0.40, 0.146188),
    (0.45, 0.167858),
    (0.50, 0.250769),
)

# Double-affine pair-HMM defaults: match, then (insert X, insert Y) per pair.
DEFAULT_INIT_DISTRIB: Tuple[float, ...] = (
    0.6814756989,
    8.615339902e-05,
    8.615339902e-05,
    0.1591759622,
    0.1591759622,
)
DEFAULT_GAP_OPEN: Tuple[float, ...] = (
    0.0119511066,
    0.0119511066,
    0.008008334786,
    0.008008334786,
)
DEFAULT_GAP_EXTEND: Tuple[float, ...] = (
    0.3965826333,
    0.3965826333,
    0.8988758326,
    0.8988758326,
)

# Emission probabilities used for residues outside the model alphabet.
UNKNOWN_PAIR_EMISSION = 1e-10
UNKNOWN_SINGLE_EMISSION = 1e-5

PROTEIN_ALPHABET = "ARNDCQEGHILKMFPSTWYV"
NUCLEOTIDE_ALPHABET = "ACGT"

# BLOSUM62 background frequencies (Henikoff & Henikoff, 1992).
PROTEIN_BACKGROUND = {
    "A": 0.074, "R": 0.052, "N": 0.045, "D": 0.054, "C": 0.025,
    "Q": 0.034, "E": 0.054, "G": 0.074, "H": 0.026, "I": 0.068,
    "L": 0.099, "K": 0.058, "M": 0.025, "F": 0.047, "P": 0.039,
    "S": 0.057, "T": 0.051, "W": 0.013, "Y": 0.032, "V": 0.073,
}

PROTEIN_MATRIX = "BLOSUM62"
NUCLEOTIDE_MATRIX = "NUC.4.4"

# Substitution scores are in half-bit units for both default matrices.
SCORE_SCALE = 0.5

# Global partition-function defaults.
DEFAULT_PF_TEMPERATURE = 2.0
DEFAULT_PF_GAP_OPEN = -11.0
DEFAULT_PF_GAP_EXTEND = -1.0

FASTA_LINE_WIDTH = 60
CLUSTAL_BLOCK_WIDTH = 60

# ClustalW conservation groups.
CLUSTAL_STRONG_GROUPS: Tuple[str, ...] = (
    "STA", "NEQK", "NHQK", "NDEQ", "QHRK", "MILV", "MILF", "HY", "FYW",
)
CLUSTAL_WEAK_GROUPS: Tuple[str, ...] = (
    "CSA", "ATV", "SAG", "STNK", "STPA", "SGND", "SNDEQK", "NDEQHK",
    "NEQHRK", "FVLIM", "HFY",
)

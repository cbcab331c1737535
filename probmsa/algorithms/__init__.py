"""Algorithms for the project."""

from .consistency import ConsistencyTransformer
from .guide_tree import GuideTree
from .hmm import PairHMM
from .model_selection import DivergenceLevel, ModelSelector
from .msa import AlignmentResult, MultipleAligner
from .pairwise import PairwisePosteriorEngine
from .partition_function import PartitionFunction
from .progressive import ProgressiveAligner
from .refinement import RefinementEngine, RefinementPolicy, TreeNodeRefinement
from .sparse import PosteriorMatrices, SparsePosteriorMatrix


__all__ = [
    "AlignmentResult",
    "ConsistencyTransformer",
    "DivergenceLevel",
    "GuideTree",
    "ModelSelector",
    "MultipleAligner",
    "PairHMM",
    "PairwisePosteriorEngine",
    "PartitionFunction",
    "PosteriorMatrices",
    "ProgressiveAligner",
    "RefinementEngine",
    "RefinementPolicy",
    "SparsePosteriorMatrix",
    "TreeNodeRefinement",
    "forward_backward",
    "mea",
    "viterbi",
]

"""Utility functions for the project."""

from .fasta import read_fasta, write_fasta
from .clustal import write_clustal
from .matrices import default_parameters, load_substitution_matrix
from .serialization import load_parameters, save_parameters, parameters_to_dict

__all__ = [
    "read_fasta",
    "write_fasta",
    "write_clustal",
    "default_parameters",
    "load_substitution_matrix",
    "load_parameters",
    "save_parameters",
    "parameters_to_dict",
]

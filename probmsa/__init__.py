"""Probabilistic consistency-based multiple sequence alignment."""

__version__ = "0.1.0"

"""Shared interface for the log-space pair models used by the DP routines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from probmsa.types.sequence import SequenceType


class PairModel(ABC):
    """A pair model the forward/backward routines can run on.

    State 0 consumes one residue from each sequence, odd states consume from
    the first sequence only and even states from the second only. Insert
    states are entered from state 0, may loop on themselves and return to
    state 0.

    Implementations provide three arrays: ``log_init`` and ``log_end`` (one
    log weight per state for entering from the start and leaving to the end)
    and ``log_transitions`` (num_states x num_states).
    """

    log_init: np.ndarray
    log_end: np.ndarray
    log_transitions: np.ndarray

    @abstractmethod
    def emission_tables(
        self, x_seq: SequenceType, y_seq: SequenceType
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Log emission weights indexed by 1-based residue positions."""
        raise NotImplementedError

    @property
    def num_states(self) -> int:
        return self.log_init.shape[0]

    @property
    def insert_x_states(self) -> np.ndarray:
        """Indices of the states that consume a residue of the first sequence."""
        return np.arange(1, self.num_states, 2)

    @property
    def insert_y_states(self) -> np.ndarray:
        """Indices of the states that consume a residue of the second sequence."""
        return np.arange(2, self.num_states, 2)


__all__ = ["PairModel"]

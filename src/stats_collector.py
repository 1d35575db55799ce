"""Bounded-history statistics for live plotting.

The collector keeps the most recent N per-tick samples. Aggregates are
recomputed from the retained window every time they are requested.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000


@dataclass(frozen=True)
class StatisticsSample:
    """Aggregate state of the world after one tick."""
    tick: int
    predator_count: int
    prey_count: int
    average_predator_energy: float
    average_prey_energy: float


@dataclass(frozen=True)
class Aggregates:
    """Summary over the retained window."""
    sample_count: int = 0
    peak_predators: int = 0
    peak_prey: int = 0
    min_predators: int = 0
    min_prey: int = 0
    average_predators: float = 0.0
    average_prey: float = 0.0
    average_predator_energy: float = 0.0
    average_prey_energy: float = 0.0


class StatisticsCollector:
    """Fixed-capacity FIFO of StatisticsSample records."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._samples: Deque[StatisticsSample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def __len__(self) -> int:
        return len(self._samples)

    def record(self, sample: StatisticsSample):
        """Append a sample, evicting the oldest one when full."""
        self._samples.append(sample)

    def clear(self):
        self._samples.clear()

    def resize(self, capacity: int):
        """Change the capacity in place, keeping the newest samples that fit."""
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._samples = deque(self._samples, maxlen=capacity)

    def snapshot(self) -> List[StatisticsSample]:
        """Retained samples, oldest first."""
        return list(self._samples)

    def latest(self) -> Optional[StatisticsSample]:
        return self._samples[-1] if self._samples else None

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Column arrays of the retained window, keyed by field name."""
        samples = self._samples
        return {
            'tick': np.array([s.tick for s in samples], dtype=np.int64),
            'predator_count': np.array([s.predator_count for s in samples], dtype=np.int64),
            'prey_count': np.array([s.prey_count for s in samples], dtype=np.int64),
            'average_predator_energy': np.array([s.average_predator_energy for s in samples], dtype=np.float64),
            'average_prey_energy': np.array([s.average_prey_energy for s in samples], dtype=np.float64),
        }

    def aggregates(self) -> Aggregates:
        """Peaks, minima and averages over the retained window."""
        if not self._samples:
            return Aggregates()

        columns = self.to_arrays()
        predators = columns['predator_count']
        prey = columns['prey_count']
        return Aggregates(
            sample_count=len(self._samples),
            peak_predators=int(predators.max()),
            peak_prey=int(prey.max()),
            min_predators=int(predators.min()),
            min_prey=int(prey.min()),
            average_predators=float(predators.mean()),
            average_prey=float(prey.mean()),
            average_predator_energy=float(columns['average_predator_energy'].mean()),
            average_prey_energy=float(columns['average_prey_energy'].mean()),
        )

    def save(self, filename='stats.npz'):
        """Save the retained window to a NumPy archive."""
        np.savez(filename, **self.to_arrays())
        logger.info("Statistics saved to %s (%d data points)", filename, len(self._samples))

"""Bounded sample history for the Home Energy simulator."""

import random
from collections import deque
from typing import Iterator, List, Optional, Tuple

from .simulator import HomeEnergySimulator
from .state import SimulationState

SERIES_CAPACITY = 360  # 6 hours at one sample per simulated minute
STEP_MS = 60_000
SEED_STEPS = 60


class SeriesBuffer:
    """FIFO window of the most recent samples, oldest first."""

    def __init__(self, capacity: int = SERIES_CAPACITY):
        if capacity <= 0:
            raise ValueError("Series capacity must be positive")
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def append(self, state: SimulationState) -> None:
        """Append a sample, evicting the oldest one when full.

        Args:
            state: Sample to append; must be newer than the latest sample

        Raises:
            ValueError: If the sample would break ascending time order
        """
        if self._samples and state.time <= self._samples[-1].time:
            raise ValueError(
                f"Sample time {state.time} is not after latest {self._samples[-1].time}"
            )
        self._samples.append(state)

    def latest(self) -> Optional[SimulationState]:
        """Return the newest sample, or None if empty."""
        return self._samples[-1] if self._samples else None

    def snapshot(self) -> Tuple[SimulationState, ...]:
        """Return an immutable copy of the samples, oldest to newest."""
        return tuple(self._samples)

    def clear(self) -> None:
        """Drop all samples."""
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[SimulationState]:
        return iter(self.snapshot())


def seed_series(
    simulator: HomeEnergySimulator,
    now_ms: int,
    rng: random.Random,
    steps: int = SEED_STEPS,
    step_ms: int = STEP_MS,
) -> List[SimulationState]:
    """Synthesize a short history ending at ``now_ms``.

    A bootstrap sample one step before the first returned sample starts
    the run and is not part of the result.

    Args:
        simulator: Generator used for every step
        now_ms: Timestamp of the last returned sample
        rng: Random source
        steps: Number of samples to return
        step_ms: Spacing between samples in milliseconds

    Returns:
        Samples in ascending time order
    """
    start_ms = now_ms - steps * step_ms
    state = simulator.step(None, start_ms, rng)
    samples = []
    for index in range(1, steps + 1):
        state = simulator.step(state, start_ms + index * step_ms, rng)
        samples.append(state)
    return samples

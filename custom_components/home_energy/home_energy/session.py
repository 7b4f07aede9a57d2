"""Simulation session owning the clock, history and data mode."""

import logging
import random
import time
from typing import Any, Dict, List, Optional, Tuple

from .energy_flow import FlowEdge, attribute_flows
from .self_test import CheckResult, run_self_tests
from .series import STEP_MS, SeriesBuffer, seed_series
from .simulator import HomeEnergySimulator
from .state import SimulationState

_LOGGER = logging.getLogger(__name__)

MODE_SIMULATED = "simulated"
MODE_LIVE = "live"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SimulationSession:
    """One simulation run with its own buffer and clock.

    The session is always in exactly one mode: ``simulated`` samples come
    from the generator on each tick, ``live`` samples are ingested from an
    external producer. A new sample is appended to the buffer before it is
    published as the current sample.
    """

    def __init__(
        self,
        simulator: Optional[HomeEnergySimulator] = None,
        rng: Optional[random.Random] = None,
        buffer: Optional[SeriesBuffer] = None,
        step_ms: int = STEP_MS,
        use_simulation: bool = True,
    ):
        """Initialize the session.

        Args:
            simulator: Generator (a default one is created if None)
            rng: Random source for the generator (unseeded if None)
            buffer: Series buffer (an empty 360-sample buffer if None)
            step_ms: Simulated clock advance per tick in milliseconds
            use_simulation: Start in simulated mode if True, live otherwise
        """
        if step_ms <= 0:
            raise ValueError("Step must be positive")
        self.simulator = simulator or HomeEnergySimulator()
        self.rng = rng or random.Random()
        self.buffer = buffer if buffer is not None else SeriesBuffer()
        self.step_ms = step_ms
        self._mode = MODE_SIMULATED if use_simulation else MODE_LIVE
        self._current: Optional[SimulationState] = None
        self._running = False

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def running(self) -> bool:
        return self._running

    @property
    def current(self) -> Optional[SimulationState]:
        """Latest published sample, kept even after it leaves the buffer."""
        return self._current

    def start(self, now_ms: Optional[int] = None) -> None:
        """Start the session, seeding one hour of history if empty.

        Args:
            now_ms: Timestamp of the last seeded sample (wall clock if None)
        """
        if self._running:
            return
        if self._mode == MODE_SIMULATED and self._current is None:
            self._seed(now_ms)
        self._running = True

    def stop(self) -> None:
        """Stop the session; no further ticks advance the clock."""
        self._running = False

    def tick(self) -> Optional[SimulationState]:
        """Advance the simulated clock by one step.

        Returns:
            The new sample, or None when stopped or in live mode
        """
        if not self._running or self._mode != MODE_SIMULATED:
            return None
        prev = self._current
        time_ms = prev.time + self.step_ms if prev else _now_ms()
        state = self.simulator.step(prev, time_ms, self.rng)
        self._publish(state)
        return state

    def use_simulation(self, enabled: bool, now_ms: Optional[int] = None) -> None:
        """Switch between simulated and live mode.

        Each mode keeps its own clock, so the history is dropped on a switch.
        A running session switching to simulated mode is reseeded.

        Args:
            enabled: True for simulated data, False for the live feed
            now_ms: Timestamp of the last reseeded sample (wall clock if None)
        """
        mode = MODE_SIMULATED if enabled else MODE_LIVE
        if mode == self._mode:
            return
        _LOGGER.debug("Session mode %s -> %s", self._mode, mode)
        self._mode = mode
        self.buffer.clear()
        self._current = None
        if mode == MODE_SIMULATED and self._running:
            self._seed(now_ms)

    def ingest(self, state: SimulationState) -> bool:
        """Accept an externally produced sample in live mode.

        Args:
            state: Sample to publish

        Returns:
            True if the sample was published
        """
        if self._mode != MODE_LIVE:
            return False
        latest = self.buffer.latest()
        if latest is not None and state.time <= latest.time:
            _LOGGER.debug("Dropping live sample at %d, not after %d", state.time, latest.time)
            return False
        self._publish(state)
        return True

    def series(self) -> Tuple[SimulationState, ...]:
        """Return the current history, oldest first."""
        return self.buffer.snapshot()

    def flows(self) -> List[FlowEdge]:
        """Return displayable flow edges of the current sample."""
        return attribute_flows(self._current) if self._current else []

    def self_test(self) -> List[CheckResult]:
        """Run the self-test checks against the current state."""
        return run_self_tests(self.series(), self._current)

    def snapshot(self) -> Dict[str, Any]:
        """Return a consistent view of the session for display."""
        return {
            "mode": self._mode,
            "running": self._running,
            "point": self._current.as_record() if self._current else None,
            "series": [state.as_record() for state in self.series()],
            "flows": [edge._asdict() for edge in self.flows()],
            "self_test": [result.as_dict() for result in self.self_test()],
        }

    def _seed(self, now_ms: Optional[int]) -> None:
        if now_ms is None:
            now_ms = _now_ms()
        for state in seed_series(self.simulator, now_ms, self.rng, step_ms=self.step_ms):
            self._publish(state)
        _LOGGER.debug("Seeded %d samples ending at %d", len(self.buffer), now_ms)

    def _publish(self, state: SimulationState) -> None:
        self.buffer.append(state)
        self._current = state

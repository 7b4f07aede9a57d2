"""DataUpdateCoordinator for Home Energy integration."""

from __future__ import annotations

import logging
import random
from datetime import timedelta
from typing import Any, Dict, List, Optional

from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .const import (
    CONF_LIVE_FEED_URL,
    CONF_USE_SIMULATION,
    DEFAULT_LIVE_FEED_URL,
    DEFAULT_USE_SIMULATION,
    DOMAIN,
    SIMULATED_STEP_SECONDS,
    TICK_INTERVAL_SECONDS,
)
from .home_energy import (
    MODE_LIVE,
    HomeEnergySimulator,
    SimulationSession,
    SimulationState,
)
from .home_energy.self_test import all_passed
from .live_feed import LiveFeedClient

_LOGGER = logging.getLogger(__name__)


class HomeEnergyCoordinator(DataUpdateCoordinator):
    """Coordinator driving the simulation session.

    Each refresh is one tick of the simulated clock. Refreshes are
    serialized by the coordinator, so two steps never overlap.
    """

    def __init__(self, hass: HomeAssistant, config: Dict[str, Any]) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=timedelta(seconds=TICK_INTERVAL_SECONDS),
        )

        self.config = dict(config)
        self.use_simulation: bool = self.config.get(
            CONF_USE_SIMULATION, DEFAULT_USE_SIMULATION
        )
        self.live_feed_url: str = self.config.get(
            CONF_LIVE_FEED_URL, DEFAULT_LIVE_FEED_URL
        )

        self.session = SimulationSession(
            simulator=HomeEnergySimulator(tz=dt_util.get_default_time_zone()),
            rng=random.Random(),
            step_ms=SIMULATED_STEP_SECONDS * 1000,
            use_simulation=self.use_simulation,
        )
        self.live_feed: Optional[LiveFeedClient] = None

        # Self-test transition tracking
        self._last_self_test_ok: Optional[bool] = None
        self._tick_count = 0

    @property
    def live_connected(self) -> bool:
        """Return True while the live feed socket is open."""
        return self.live_feed is not None and self.live_feed.connected

    async def async_start(self) -> None:
        """Seed the session and start the configured data source."""
        self.session.start(int(dt_util.utcnow().timestamp() * 1000))
        if not self.use_simulation:
            self._start_live_feed()
        _LOGGER.info(
            "Home Energy started in %s mode with %d seeded samples",
            self.session.mode,
            len(self.session.buffer),
        )

    async def async_stop(self) -> None:
        """Stop the session and close the live feed."""
        self.session.stop()
        await self._stop_live_feed()

    async def async_set_use_simulation(self, enabled: bool, url: Optional[str] = None) -> None:
        """Switch between simulated data and the live feed."""
        if url is not None:
            self.live_feed_url = url
        self.use_simulation = enabled
        await self._stop_live_feed()
        self.session.use_simulation(enabled)
        if not enabled:
            self._start_live_feed()
        _LOGGER.info("Home Energy switched to %s mode", self.session.mode)
        self.async_set_updated_data(self._build_data())

    def _start_live_feed(self) -> None:
        self.live_feed = LiveFeedClient(
            self.hass,
            self.live_feed_url,
            on_state=self._handle_live_state,
            on_disconnect=self._handle_live_disconnect,
            get_previous=lambda: self.session.current,
        )
        self.live_feed.start()

    async def _stop_live_feed(self) -> None:
        if self.live_feed is not None:
            await self.live_feed.async_stop()
            self.live_feed = None

    @callback
    def _handle_live_state(self, state: SimulationState) -> None:
        """Publish a state received from the live feed."""
        if self.session.ingest(state):
            self.async_set_updated_data(self._build_data())

    @callback
    def _handle_live_disconnect(self, error: Optional[Exception]) -> None:
        """Fall back to simulated data when the live feed ends."""
        if self.session.mode != MODE_LIVE:
            return
        _LOGGER.warning(
            "Live feed %s unavailable (%s), falling back to simulated data",
            self.live_feed_url,
            error or "closed",
        )
        self.session.use_simulation(True)
        self.async_set_updated_data(self._build_data())

    async def _async_update_data(self) -> Dict[str, Any]:
        """Advance the simulation by one step and collect outputs."""
        try:
            state = self.session.tick()
            if state is not None:
                self._tick_count += 1
                _LOGGER.debug(
                    "Tick %d: t=%d pv=%.2f grid=%.2f battery=%.1f%%",
                    self._tick_count,
                    state.time,
                    state.pv,
                    state.grid,
                    state.batterySoc,
                )
            return self._build_data()
        except Exception as err:
            _LOGGER.error("Error updating Home Energy data: %s", err)
            raise UpdateFailed(f"Error updating data: {err}") from err

    def _build_data(self) -> Dict[str, Any]:
        """Collect the current sample, flows and self-test results."""
        current = self.session.current
        results = self.session.self_test()
        self._track_self_test(results)
        return {
            "state": current,
            "point": current.as_record() if current else None,
            "grid_direction": current.grid_direction if current else None,
            "flows": [edge._asdict() for edge in self.session.flows()],
            "self_test": [result.as_dict() for result in results],
            "self_test_ok": all_passed(results),
            "mode": self.session.mode,
            "live_connected": self.live_connected,
            "discarded_messages": (
                self.live_feed.discarded_messages if self.live_feed else 0
            ),
            "series_length": len(self.session.buffer),
            "last_update": dt_util.now(),
        }

    def _track_self_test(self, results: List[Any]) -> None:
        ok = all_passed(results)
        if ok != self._last_self_test_ok and not ok:
            _LOGGER.warning(
                "Self-test failed: %s",
                ", ".join(f"{r.name} ({r.message})" for r in results if not r.passed),
            )
        self._last_self_test_ok = ok


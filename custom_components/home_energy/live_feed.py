"""WebSocket consumer for the external live energy feed."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

import aiohttp
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import LIVE_FEED_HEARTBEAT_SECONDS
from .home_energy import SimulationState, parse_live_payload

_LOGGER = logging.getLogger(__name__)


class LiveFeedClient:
    """Reads state records from a live feed; never sends anything."""

    def __init__(
        self,
        hass: HomeAssistant,
        url: str,
        on_state: Callable[[SimulationState], None],
        on_disconnect: Callable[[Optional[Exception]], None],
        get_previous: Callable[[], Optional[SimulationState]],
    ) -> None:
        """Initialize the client.

        Args:
            hass: Home Assistant instance
            url: Feed endpoint
            on_state: Called with each accepted state
            on_disconnect: Called once when the connection ends
            get_previous: Returns the last published state
        """
        self.hass = hass
        self.url = url
        self._on_state = on_state
        self._on_disconnect = on_disconnect
        self._get_previous = get_previous
        self._task: Optional[asyncio.Task] = None
        self._connected = False
        self.discarded_messages = 0

    @property
    def connected(self) -> bool:
        """Return True while the socket is open."""
        return self._connected

    def start(self) -> None:
        """Start consuming the feed in a background task."""
        if self._task is None or self._task.done():
            self._task = self.hass.async_create_background_task(
                self._run(), name=f"home_energy live feed {self.url}"
            )

    async def async_stop(self) -> None:
        """Close the feed and wait for the consumer task to end."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self._connected = False

    async def _run(self) -> None:
        session = async_get_clientsession(self.hass)
        error: Optional[Exception] = None
        try:
            async with session.ws_connect(
                self.url, heartbeat=LIVE_FEED_HEARTBEAT_SECONDS
            ) as socket:
                self._connected = True
                _LOGGER.info("Connected to live feed %s", self.url)
                async for message in socket:
                    if message.type == aiohttp.WSMsgType.TEXT:
                        self._handle_text(message.data)
                    elif message.type == aiohttp.WSMsgType.ERROR:
                        error = socket.exception()
                        break
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as err:
            error = err
        except Exception as err:
            _LOGGER.exception("Unexpected error reading live feed %s", self.url)
            error = err
        finally:
            self._connected = False

        if error is not None:
            _LOGGER.warning("Live feed %s failed: %s", self.url, error)
        else:
            _LOGGER.info("Live feed %s closed", self.url)
        self._on_disconnect(error)

    def _handle_text(self, text: str) -> None:
        state = parse_live_payload(text, self._get_previous(), int(time.time() * 1000))
        if state is None:
            self.discarded_messages += 1
            return
        self._on_state(state)

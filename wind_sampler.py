"""Periodic conversion of accumulated pulses into stored wind speeds."""
import asyncio
import logging
import time

from wind_config import MAX_SPEED, SAMPLE_PERIOD
from wind_errors import PersistenceError
from wind_measurement import speed_from_pulses

logger = logging.getLogger(__name__)

# Direction vane is not wired yet
UNMEASURED_DIRECTION = 0


class RateSampler:
    def __init__(self, accumulator, store, period=SAMPLE_PERIOD, max_speed=MAX_SPEED,
                 clock=time.monotonic):
        self.accumulator = accumulator
        self.store = store
        self.period = period
        self.max_speed = max_speed
        self.clock = clock
        self._last_tick = None

    def tick(self):
        """Drain the accumulator and store the resulting speed.

        Returns the stored speed in m/s, or None when nothing was stored.
        The first call only drains: pulses may have piled up before the
        pipeline was wired.
        """
        now = self.clock()
        count = self.accumulator.take_and_reset()
        if self._last_tick is None:
            self._last_tick = now
            logger.debug("Warm-up tick, dropped %d pulses", count)
            return None

        elapsed = now - self._last_tick
        self._last_tick = now
        if elapsed <= 0:
            logger.warning("Clock did not advance between ticks, dropped %d pulses", count)
            return None

        vel = speed_from_pulses(count, elapsed)
        logger.debug("Number of edges: %d in %.3fs", count, elapsed)
        if vel > self.max_speed:
            logger.warning("Discarding %.2fm/s, above the %.1fm/s ceiling", vel, self.max_speed)
            return None

        try:
            self.store.insert(vel, UNMEASURED_DIRECTION)
        except PersistenceError as e:
            logger.error("Failed to write measurement: %s", e)
            return None
        logger.info("Read vel: %.3fm/s", vel)
        return vel

    async def run(self):
        """Tick every period until cancelled, anchored to the loop clock. Each tick runs in a worker thread."""
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            await asyncio.to_thread(self.tick)
            deadline += self.period
            await asyncio.sleep(max(0.0, deadline - loop.time()))

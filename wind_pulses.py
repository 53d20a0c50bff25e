"""
Pulse counting for the anemometer reed switch.

Edges arrive on pigpio's callback thread at an unpredictable rate while the
sampler drains the count once per period from the asyncio loop. The two
sides only ever meet inside PulseAccumulator.
"""
import logging
import os
import threading
import time

import pigpio

from wind_config import DEBOUNCE_WINDOW
from wind_errors import HardwareSetupError

logger = logging.getLogger(__name__)

EXIT_HARDWARE_FAILURE = 1


class PulseAccumulator:
    """Debounced pulse counter with an atomic take-and-reset."""

    def __init__(self, debounce=DEBOUNCE_WINDOW):
        self.debounce = debounce
        self._count = 0
        self._count_lock = threading.Lock()
        self._last_edge = None
        self._edge_lock = threading.Lock()

    def register_edge(self, now):
        """Count one raw edge seen at monotonic time `now`, unless it is contact bounce.

        Returns True when the edge was counted.
        """
        with self._edge_lock:
            if self._last_edge is not None and now - self._last_edge < self.debounce:
                return False
            self._last_edge = now
        with self._count_lock:
            self._count += 1
        return True

    def take_and_reset(self):
        """Return the pulses counted since the previous call and start again from 0"""
        with self._count_lock:
            count, self._count = self._count, 0
        return count


class PigpioEdgeSource:
    """Feeds falling edges from a GPIO pin into a PulseAccumulator."""

    def __init__(self, accumulator, pin, host="localhost", port=8888, pi=None):
        self.accumulator = accumulator
        self.pin = pin
        self.host = host
        self.port = port
        self.pi = pi
        self._cb = None
        self._last_tick = None
        self._seconds = 0.0

    def start(self):
        if self.pi is None:
            self.pi = pigpio.pi(self.host, self.port)
        if not self.pi.connected:
            raise HardwareSetupError(f"Cannot connect to pigpio daemon on {self.host}:{self.port}")

        try:
            self.pi.set_mode(self.pin, pigpio.INPUT)
            self.pi.set_pull_up_down(self.pin, pigpio.PUD_UP)
            self._cb = self.pi.callback(self.pin, pigpio.FALLING_EDGE, self._on_edge)
        except pigpio.error as e:
            raise HardwareSetupError(f"Cannot configure pin {self.pin} for edge callbacks: {e}") from e
        logger.info("Counting falling edges on GPIO %d", self.pin)

    def _on_edge(self, gpio, level, tick):
        # Watchdog timeouts report level TIMEOUT; there was no edge.
        if level == pigpio.TIMEOUT:
            return
        # Edge time comes from the pigpio tick: microseconds, wraps at 2**32.
        if self._last_tick is not None:
            self._seconds += pigpio.tickDiff(self._last_tick, tick) / 1e6
        self._last_tick = tick
        self.accumulator.register_edge(self._seconds)

    def stop(self):
        if self._cb is not None:
            self._cb.cancel()
            self._cb = None
        if self.pi is not None:
            self.pi.stop()


class SimulatedEdgeSource:
    """Produces edges at a changing pace so the service can run without a sensor."""

    def __init__(self, accumulator, period):
        self.accumulator = accumulator
        self.period = period
        self._stop = threading.Event()
        self._thread = None

    def start(self):
        self._thread = threading.Thread(target=self._run, name="simulated-edges", daemon=True)
        self._thread.start()
        logger.info("Simulating anemometer pulses")

    def _run(self):
        # Slow for two periods, fast for the third, then start over.
        sleep_time = self.period / 10
        started = time.monotonic()
        while not self._stop.is_set():
            self.accumulator.register_edge(time.monotonic())
            self._stop.wait(sleep_time)
            running = time.monotonic() - started
            if running > 3 * self.period:
                sleep_time = self.period / 10
                started = time.monotonic()
            elif running > 2 * self.period:
                sleep_time = self.period / 100

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=1)


def abort_process(error):
    """Log a fatal hardware error and end the process.

    Only used while wiring the sensor at startup: without edges the
    service has nothing to measure.
    """
    logger.critical("Anemometer setup failed, stopping: %s", error)
    logging.shutdown()
    os._exit(EXIT_HARDWARE_FAILURE)


def start_edge_source(source):
    try:
        source.start()
    except HardwareSetupError as e:
        abort_process(e)
    return source

"""Print live pulse counts and wind speed straight from the sensor, without storing anything."""
import argparse
import logging
import time

from wind_config import WindConfig, add_arguments
from wind_measurement import mps_to_mph, speed_from_pulses
from wind_pulses import PigpioEdgeSource, PulseAccumulator, SimulatedEdgeSource, start_edge_source


def format_row(count, elapsed):
    vel = speed_from_pulses(count, elapsed)
    return f"{count:>6} | {elapsed:>8.3f} | {vel:>6.2f} | {mps_to_mph(vel):>6.2f}"


def main(argv=None):
    parser = argparse.ArgumentParser(prog="monitor.py", description="Show raw anemometer readings.")
    add_arguments(parser)
    try:
        config = WindConfig.from_args(parser.parse_args(argv))
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(level=logging.DEBUG if config.verbose else logging.INFO,
                        format="[WIND_MONITOR at %(asctime)s] %(levelname)s: %(message)s",
                        datefmt="%Y-%m-%d %H:%M:%S")

    accumulator = PulseAccumulator(config.debounce)
    if config.simulate:
        source = SimulatedEdgeSource(accumulator, config.period)
    else:
        source = PigpioEdgeSource(accumulator, config.pin, config.pigpio_host, config.pigpio_port)
    start_edge_source(source)

    print("Counting pulses with pigpio. Press Ctrl+C to stop.\n")
    print(f"{'Pulses':>6} | {'Elapsed':>8} | {'m/s':>6} | {'mph':>6}")
    print("-" * 36)

    try:
        accumulator.take_and_reset()
        last = time.monotonic()
        while True:
            time.sleep(config.period)
            now = time.monotonic()
            print(format_row(accumulator.take_and_reset(), now - last))
            last = now
    except KeyboardInterrupt:
        print("Stopped by user.")
    finally:
        source.stop()


if __name__ == "__main__":
    main()

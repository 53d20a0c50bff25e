import argparse
import asyncio
import logging

from wind_config import PRUNE_EVERY, WindConfig, add_arguments
from wind_errors import PersistenceError
from wind_pulses import PigpioEdgeSource, PulseAccumulator, SimulatedEdgeSource, start_edge_source
from wind_sampler import RateSampler
from wind_store import MeasurementStore

logger = logging.getLogger("wind_logger")

LOG_FORMAT = "[WIND_LOGGER at %(asctime)s] %(levelname)s: %(message)s"


def setup_logging(verbose=False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def prune_loop(store, retention, every=PRUNE_EVERY):
    """Drop measurements older than the retention window, once every `every` seconds"""
    while True:
        try:
            await asyncio.to_thread(store.prune, retention)
        except PersistenceError as e:
            logger.error("Failed to prune old measurements: %s", e)
        await asyncio.sleep(every)


async def run_service(sampler, store, config):
    await asyncio.gather(
        sampler.run(),
        prune_loop(store, config.retention, config.prune_every),
    )


def build_edge_source(config, accumulator):
    if config.simulate:
        return SimulatedEdgeSource(accumulator, config.period)
    return PigpioEdgeSource(accumulator, config.pin, config.pigpio_host, config.pigpio_port)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="wind_logger.py", description="Sample the anemometer and store wind speed.")
    add_arguments(parser)
    args = parser.parse_args(argv)
    try:
        config = WindConfig.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config.verbose)

    store = MeasurementStore(config.db_file)
    accumulator = PulseAccumulator(config.debounce)
    source = start_edge_source(build_edge_source(config, accumulator))
    sampler = RateSampler(accumulator, store, config.period, config.max_speed)

    logger.info("Starting wind monitoring...")
    logger.info("Period: %ss, debounce: %sms, ceiling: %sm/s", config.period, config.debounce * 1000, config.max_speed)
    logger.info("Logging to: %s", config.db_file)

    try:
        asyncio.run(run_service(sampler, store, config))
    except KeyboardInterrupt:
        logger.info("Stopping wind monitor...")
    finally:
        source.stop()
        store.close()


if __name__ == "__main__":
    main()

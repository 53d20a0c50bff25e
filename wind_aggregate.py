"""
Averaging of raw measurements into fixed-width time buckets.

Buckets are walked from `now` backwards. A point that falls below the
current window closes the bucket and moves the window down by exactly one
interval, however long the gap before that point was. Points separated by
a gap wider than one interval can therefore end up in neighbouring buckets
whose edges lag behind the real time grid.
"""
import logging
import math

from wind_errors import NoDataAvailable
from wind_measurement import Measurement, now_epoch

logger = logging.getLogger(__name__)


def _average(points):
    n = len(points)
    return Measurement(
        ts=points[0].ts,
        vel=sum(p.vel for p in points) / n,
        direction=sum(p.direction for p in points) // n,
    )


def bucket(measurements, interval, now=None):
    """Average `measurements` into buckets `interval` seconds wide.

    Input may be oldest-first or newest-first. Each bucket keeps the
    timestamp of its newest point. The result is oldest-first.
    """
    if not math.isfinite(interval) or interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    if not measurements:
        raise NoDataAvailable("No data returned")
    if now is None:
        now = now_epoch()

    points = list(measurements)
    if points[0].ts < points[-1].ts:
        points.reverse()

    buckets = []
    current = []
    upper = now
    for m in points:
        if m.ts > upper - interval:
            current.append(m)
        else:
            if current:
                buckets.append(current)
            upper -= interval
            current = [m]
    buckets.append(current)

    return [_average(b) for b in reversed(buckets)]


def aggregated_range(store, duration, interval, now=None):
    """Bucketed measurements from the last `duration` seconds, oldest first"""
    if not math.isfinite(duration) or duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")
    if now is None:
        now = now_epoch()
    raw = store.range_since(duration, now=now)
    logger.debug("Aggregating %d measurements into %ss buckets", len(raw), interval)
    return bucket(raw, interval, now=now)

import datetime
import time
from dataclasses import asdict, dataclass

# Davis anemometer calibration: mph = pulses per second * 2.25
ROTOR_CONSTANT = 2.25
MPH_TO_MS = 0.44704
MS_TO_KMH = 3.6


@dataclass(frozen=True)
class Measurement:
    ts: float
    vel: float
    direction: int = 0

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        return cls(ts=float(data["ts"]), vel=float(data["vel"]),
                   direction=int(data.get("direction", 0)))

    def pretty_str(self):
        when = datetime.datetime.fromtimestamp(self.ts, tz=datetime.timezone.utc)
        return f"Measurement(ts: {when.isoformat()}, vel: {self.vel}m/s)"


def now_epoch():
    """Seconds since the Unix epoch, with the fractional part."""
    return time.time()


def speed_from_pulses(count, elapsed_seconds):
    """Convert a pulse count over elapsed_seconds into wind speed in m/s"""
    if elapsed_seconds <= 0:
        raise ValueError(f"elapsed time must be positive, got {elapsed_seconds}")
    wind_mph = count * (ROTOR_CONSTANT / elapsed_seconds)
    return wind_mph * MPH_TO_MS


def mps_to_mph(speed):
    return speed / MPH_TO_MS


def mps_to_kmh(speed):
    return speed * MS_TO_KMH

"""
Tunable constants for the wind monitor and the command-line flags that
override them.

The sampling period and the debounce window have both changed across
hardware revisions (2.25s/5s/30s/60s periods, 2ms/18ms debounce), so they
are flags rather than fixed values.
"""
import math
import os
from dataclasses import dataclass

WIND_PIN = 5  # BCM numbering, reed switch pulls the line low
PIGPIO_HOST = "localhost"
PIGPIO_PORT = 8888

SAMPLE_PERIOD = 2.25    # seconds
DEBOUNCE_WINDOW = 0.018  # seconds
MAX_SPEED = 30.0        # m/s, anything above is sensor noise

DB_FILE = os.path.expanduser("~/WindMonitor/wind.sqlite")

# Keep up to 3 days of data (259200 seconds)
RETENTION_SECONDS = 259200
PRUNE_EVERY = 3600

CURRENT_MAX_AGE = 60

HTTP_HOST = "0.0.0.0"
HTTP_PORT = 8080


@dataclass
class WindConfig:
    db_file: str = DB_FILE
    pin: int = WIND_PIN
    pigpio_host: str = PIGPIO_HOST
    pigpio_port: int = PIGPIO_PORT
    period: float = SAMPLE_PERIOD
    debounce: float = DEBOUNCE_WINDOW
    max_speed: float = MAX_SPEED
    retention: float = RETENTION_SECONDS
    prune_every: float = PRUNE_EVERY
    simulate: bool = False
    verbose: bool = False

    def validate(self):
        for name in ("period", "debounce", "max_speed", "retention"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value}")
        if self.period <= 0:
            raise ValueError(f"Sampling period must be positive, got {self.period}")
        if self.debounce < 0:
            raise ValueError(f"Debounce window cannot be negative, got {self.debounce}")
        if self.max_speed <= 0:
            raise ValueError(f"Speed ceiling must be positive, got {self.max_speed}")
        if self.retention <= 0:
            raise ValueError(f"Retention must be positive, got {self.retention}")
        return self

    @classmethod
    def from_args(cls, args):
        return cls(
            db_file=args.db,
            pin=args.pin,
            pigpio_host=args.hostname,
            pigpio_port=args.port,
            period=args.period,
            debounce=args.debounce_ms / 1000.0,
            max_speed=args.max_speed,
            retention=args.retention_days * 86400,
            simulate=args.simulate,
            verbose=args.verbose,
        ).validate()


def add_arguments(parser):
    """Register the sensor and sampling flags on an argparse parser."""
    parser.add_argument('--db', type=str, default=DB_FILE, help=f"SQLite database file (default: {DB_FILE}).")
    parser.add_argument('--pin', type=int, default=WIND_PIN, help=f"BCM pin of the anemometer (default: {WIND_PIN}).")
    parser.add_argument('-n', '--hostname', type=str, default=PIGPIO_HOST, help="Hostname for the Raspberry running the pigpio daemon.")
    parser.add_argument('-p', '--port', type=int, default=PIGPIO_PORT, help="Port number of the pigpio daemon.")
    parser.add_argument('--period', type=float, default=SAMPLE_PERIOD, help=f"Sampling period in seconds (default: {SAMPLE_PERIOD}).")
    parser.add_argument('--debounce-ms', type=float, default=DEBOUNCE_WINDOW * 1000, help=f"Debounce window in milliseconds (default: {DEBOUNCE_WINDOW * 1000:g}).")
    parser.add_argument('--max-speed', type=float, default=MAX_SPEED, help=f"Discard samples above this speed in m/s (default: {MAX_SPEED}).")
    parser.add_argument('--retention-days', type=float, default=RETENTION_SECONDS / 86400, help="Days of measurements to keep (default: 3).")
    parser.add_argument('--simulate', action='store_true', help="Generate fake pulses instead of reading the sensor.")
    parser.add_argument('-v', '--verbose', action='store_true', help="Log every sample.")
    return parser

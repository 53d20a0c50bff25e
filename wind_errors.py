"""Exceptions raised by the wind monitor modules."""


class WindError(Exception):
    """Base class for wind monitor errors."""


class NoDataAvailable(WindError):
    """Nothing stored yet, or nothing in the requested window."""


class PersistenceError(WindError):
    """The measurement store failed to read or write."""


class HardwareSetupError(WindError):
    """The anemometer pin could not be wired for edge notifications."""

"""
Exceptions and warnings raised by PyRFMap.

Configuration problems and failed design checks are fatal and raised
before any simulation work happens. Data problems found while
aggregating are reported as warnings.
"""

from typing import Any


class PRFMapError(Exception):
    """Base class for all PyRFMap errors."""


class ConfigurationError(PRFMapError, ValueError):
    """Invalid experiment parameters or inconsistent inputs."""


class DesignIntegrityError(PRFMapError, RuntimeError):
    """
    A generated trial design failed its post-generation verification.

    Parameters
    ----------
    check : str
        Name of the failed check ('trial_count', 'trial_width',
        'unique_targets', 'location_range', 'repetitions')
    expected, actual
        Expected and observed values for the failed check
    """

    def __init__(self, check: str, expected: Any, actual: Any, message: str = ""):
        self.check = check
        self.expected = expected
        self.actual = actual
        if not message:
            message = f"Design check '{check}' failed. Expected: {expected}, Found: {actual}"
        super().__init__(message)


class DataIntegrityWarning(UserWarning):
    """Non-fatal problem with the data being aggregated."""

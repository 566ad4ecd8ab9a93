"""
Scheduling Errors
Exception types raised by the recommendation engine.
"""

from typing import List, Optional


class SchedulingError(Exception):
    """Base class for all recommendation engine errors."""


class ConfigurationError(SchedulingError):
    """
    Product configuration is unusable.

    Fatal: raised before any order is scored, so no partial result exists.
    """

    def __init__(self, errors: List[str]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__('; '.join(self.errors) or 'Invalid product configuration')


class DataError(SchedulingError):
    """
    A single order snapshot is unusable.

    Raised per order; the engine skips that order and keeps going.
    """

    def __init__(self, reason: str, wo_id: Optional[str] = None):
        self.reason = reason
        self.wo_id = wo_id
        label = wo_id if wo_id else 'UNKNOWN'
        super().__init__(f"Order {label}: {reason}")

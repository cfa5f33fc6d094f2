"""
Error taxonomy for the catalog monitor.

Every failure a cycle can hit maps to one of these classes so the scheduler
can catch them at the cycle boundary and log them without crashing.
"""

from typing import Optional


class CatalogMonitorError(Exception):
    """Base class for all catalog monitor errors."""


class FetchError(CatalogMonitorError):
    """Network, transport or parse failure while retrieving the catalog."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class PersistenceReadError(CatalogMonitorError):
    """A persisted file exists but could not be read or decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path


class PersistenceWriteError(CatalogMonitorError):
    """A persisted file could not be written."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not write {path}: {reason}")
        self.path = path


class DeliveryError(CatalogMonitorError):
    """The notification endpoint rejected the message or was unreachable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

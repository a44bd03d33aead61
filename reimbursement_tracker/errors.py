from typing import Any, Dict, List, Optional


class TrackerError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TrackerError):
    pass


class DuplicateError(TrackerError):
    """A reference catalog entry with the same (type, value) already exists."""


class DuplicateDetected(TrackerError):
    """The candidate claim looks like one that is already tracked."""

    def __init__(self, duplicates: List[Dict[str, Any]], message: str = "Duplicate claim detected"):
        self.duplicates = duplicates
        super().__init__(message)


class NotFound(TrackerError):
    pass


class NotInitialized(TrackerError):
    def __init__(self, table: str, message: Optional[str] = None):
        self.table = table
        super().__init__(message or f"{table} sheet not found")


class ConfigurationMissing(TrackerError):
    pass

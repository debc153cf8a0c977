"""Error taxonomy for the engagement analytics engine."""


class EngagementEngineError(Exception):
    """Base class for engine errors"""


class TransientStoreError(EngagementEngineError):
    """Durable store failure (network, auth, timeout); recovered by fallback"""

    def __init__(self, store: str, operation: str, cause: Exception = None):
        self.store = store
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{store} {operation} failed{detail}")


class EventValidationError(EngagementEngineError):
    """Malformed engagement event; dropped at ingestion"""


class InvalidWindowError(EngagementEngineError, ValueError):
    """Requested window starts after it ends"""

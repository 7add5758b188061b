"""
Domain errors raised by the service and repository layers.

Routes translate these to HTTP status codes:
- `ValidationFailure` -> 400
- `NotFound` -> 404
- `StorageFailure` -> 500
"""


class EventsError(Exception):
    """Base class for every error the events core raises on purpose."""


class ValidationFailure(EventsError, ValueError):
    """Malformed or out-of-range input. Nothing was mutated."""


class NotFound(EventsError, LookupError):
    """The operation targeted an event id that does not exist."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class StorageFailure(EventsError):
    """The underlying persistence layer is unavailable or rejected the write."""

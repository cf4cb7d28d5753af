"""
Domain errors raised by the availability and booking services.

Each error carries a stable ``kind`` that is returned to API callers, so the
client can decide whether to re-fetch availability, retry with backoff, or
surface the problem to the user.
"""

class BookingError(Exception):
    kind: str = "BookingError"
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class SlotUnavailable(BookingError):
    """The requested start time is not generated by the doctor's schedule."""
    kind = "SlotUnavailable"
    status_code = 409


class SlotConflict(BookingError):
    """Another active booking already holds the slot."""
    kind = "SlotConflict"
    status_code = 409


class InvalidTransition(BookingError):
    kind = "InvalidTransition"
    status_code = 409

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change booking status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class StoreUnavailable(BookingError):
    """Storage timed out or is unreachable. Safe to retry with backoff."""
    kind = "StoreUnavailable"
    status_code = 503

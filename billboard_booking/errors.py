class BookingError(Exception):
    """Base exception for booking engine errors."""


class SystemUnavailableError(BookingError):
    """The backing store failed its health probe; scheduling cannot start."""


class ValidationError(BookingError):
    """Input rejected locally, before anything reaches the store."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        self.message = message
        super().__init__(message)


class AvailabilityConflict(BookingError):
    """A selected hour was booked by someone else before our create call landed."""


class PersistenceError(BookingError):
    """Transport or backend failure while talking to the store."""


class InvalidTransition(BookingError):
    """The selection state machine does not allow this operation in its current stage."""

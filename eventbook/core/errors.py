"""Error taxonomy shared by the booking ledger and the services around it.

The API layer maps these to HTTP responses (see ``eventbook.main``); the
services never build HTTP responses themselves.
"""


class LedgerError(Exception):
    code = "LEDGER_ERROR"


class NotFoundError(LedgerError):
    code = "NOT_FOUND"


class ForbiddenError(LedgerError):
    code = "FORBIDDEN"


class CapacityExceededError(LedgerError):
    code = "CAPACITY_EXCEEDED"


class DuplicateBookingError(LedgerError):
    code = "DUPLICATE_BOOKING"


class DuplicateAccountError(LedgerError):
    code = "DUPLICATE_ACCOUNT"


class InvalidCredentialsError(LedgerError):
    code = "INVALID_CREDENTIALS"


class StoreUnavailableError(LedgerError):
    code = "STORE_UNAVAILABLE"


class ConsistencyError(LedgerError):
    """The cached seat counter disagrees with the bookings actually stored."""

    code = "CONSISTENCY_ERROR"

    def __init__(self, event_id: int, cached: int, actual: int):
        self.event_id = event_id
        self.cached = cached
        self.actual = actual
        super().__init__(
            f"Event {event_id} seats_filled drifted: cached={cached} actual={actual}"
        )

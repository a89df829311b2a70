"""Exception hierarchy for the seating service.

- SeatingError: base class, carries a message and optional details
- NotFoundError: unknown exam, room or student reference
- PreconditionFailedError: nothing to allocate, or nowhere to put it
- ValidationError: malformed input such as non-positive room dimensions
- ConflictError: another allocation for the same exam is in progress
- PersistenceError: the store rejected the write; the unit of work was rolled back
"""


class SeatingError(Exception):
    """Base exception for all seating errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
        status_code: HTTP status the API answers with.
    """

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class NotFoundError(SeatingError):
    status_code = 404


class PreconditionFailedError(SeatingError):
    status_code = 412


class ValidationError(SeatingError):
    status_code = 422


class ConflictError(SeatingError):
    status_code = 409


class PersistenceError(SeatingError):
    status_code = 500

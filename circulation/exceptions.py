class CirculationError(Exception):
    """Base exception for circulation errors."""

    status_code = 400


class NotFound(CirculationError):
    """Requested borrow, copy, member, book, librarian or payment does not exist."""

    status_code = 404


class OverdueLockout(CirculationError):
    """Member has an open overdue borrow and cannot borrow more."""

    status_code = 409


class CopyUnavailable(CirculationError):
    """Book copy is currently on loan."""

    status_code = 409


class AlreadyReturned(CirculationError):
    """Borrow already has an actual return date."""

    status_code = 409


class DuplicatePayment(CirculationError):
    """A payment already exists for this borrow."""

    status_code = 500


class StorageConflict(CirculationError):
    """Concurrent write contention; retry the whole operation."""

    status_code = 409

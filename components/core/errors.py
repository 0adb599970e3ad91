"""Business and storage errors raised by the rental core."""


class ToolRentError(Exception):
    """Base class for every error the core raises on purpose."""
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ToolRentError):
    """Malformed or missing required input."""
    kind = "validation_error"


class NotFoundError(ToolRentError):
    """A referenced entity does not exist."""
    kind = "not_found"


class NoAvailabilityError(ToolRentError):
    """No AVAILABLE unit left in the requested tool group."""
    kind = "no_availability"


class InvalidTransitionError(ToolRentError):
    """Illegal tool unit status change."""
    kind = "invalid_transition"


class InvalidStateError(ToolRentError):
    """Operation not allowed in the entity's current lifecycle state."""
    kind = "invalid_state"


class StorageError(ToolRentError):
    """Backing store failure. The whole operation was rolled back and may be retried."""
    kind = "storage_error"

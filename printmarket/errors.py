"""Typed failures raised by the design validation core.

The API layer maps each class to an HTTP status; see
``printmarket.blueprints.register_error_handlers``.
"""


class PrintmarketError(Exception):
    code = "error"

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        body = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class NotFound(PrintmarketError):
    code = "not_found"


class InvalidState(PrintmarketError):
    """Operation attempted outside the state that permits it."""

    code = "invalid_state"


class LockedState(PrintmarketError):
    """Preference edit attempted after the design decision."""

    code = "locked_state"


class ConstraintViolation(PrintmarketError):
    """A uniqueness race that could not be resolved by re-reading."""

    code = "constraint_violation"


class ExternalServiceError(PrintmarketError):
    code = "external_service_error"
    retryable = True


class StorageFailure(ExternalServiceError):
    code = "storage_failure"


class CatalogFailure(ExternalServiceError):
    code = "catalog_failure"

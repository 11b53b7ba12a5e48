"""
Application-wide exception hierarchy.

Services raise these types; ``create_app`` registers one error handler per
type so every blueprint answers with the same HTTP status and JSON shape.

Usage:
    from lencondb.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=project_id)
    raise ValidationError("Hours must be between 0 and 24", details={"hours_worked": "..."})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Document").
        resource_id: The PK that was looked up. Included in logs, not in HTTP response.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails business-rule validation in the service layer.

    Distinct from HTTP 400 (malformed input, caught in blueprint) — this
    signals well-formed data that violates a business rule, e.g. an
    expiration date before the contract date.

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown keyed by field name.
        status: Optional HTTP status override (400 for date-window rules).
    """

    def __init__(
        self, message: str, details: dict | None = None, status: int | None = None,
    ) -> None:
        self.details = details or {}
        self.status = status
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation collides with existing data.

    Covers duplicate unique values and deletions blocked by dependent rows.

    Maps to HTTP 409.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
        message: Optional full message replacing the generated one.
    """

    def __init__(
        self,
        resource: str,
        field: str | None = None,
        value: str | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = message or f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class PermissionDeniedError(Exception):
    """Raised when the caller's role or ownership does not allow the action.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class AuthenticationError(Exception):
    """Raised for bad credentials or unusable tokens. Maps to HTTP 401."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)

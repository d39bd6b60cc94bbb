"""
Platform-wide exception hierarchy.

Services raise these types; blueprints register handlers against them once
and get consistent HTTP status codes everywhere.

Usage:
    from crowdtest.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="User", resource_id="user-tester-ava")
    raise ValidationError("userId is required", required=True)
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable model/entity name (e.g. "User", "TestCycle").
        resource_id: The key that was looked up. Included in logs, not in HTTP response.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is missing or malformed.

    Raised before any query is issued, so a caller never sees a partial
    result for bad input. Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
                 Keys are field names; values are error descriptions.
        required: True when a mandatory value was absent rather than malformed.
    """

    def __init__(
        self, message: str, details: dict | None = None, required: bool = False,
    ) -> None:
        self.details = details or {}
        self.required = required
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when the caller's role does not allow the action. Maps to HTTP 403."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class AuthenticationError(Exception):
    """Raised on bad credentials. Maps to HTTP 401.

    The message never reveals whether the email or the password was wrong.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)

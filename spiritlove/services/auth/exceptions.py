"""Errors raised by the authentication flows.

Each carries the HTTP status it maps to; messages are safe to return to
clients. Authentication failures use one generic message per flow and never
say which field was wrong or whether the account exists.
"""


class AuthFlowError(Exception):
    """Base exception for authentication flow failures."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AuthFlowError):
    """Malformed input. Field-level details are safe to return."""

    status_code = 400

    def __init__(self, message: str = "Invalid request", errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)


class AuthenticationError(AuthFlowError):
    """Wrong or missing credentials or session."""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class ConflictError(AuthFlowError):
    """Duplicate unique field or state already configured."""

    status_code = 400


class NotFoundError(AuthFlowError):
    """Unknown user id or name."""

    status_code = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class InternalError(AuthFlowError):
    """Store, session or hashing failure. No detail leaves the server."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)

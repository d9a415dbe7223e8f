"""
auth/errors.py -- Failure taxonomy for the authentication core.

Every error carries its HTTP-equivalent status and the message surfaced to
clients. api/main.py turns any AuthError into the fixed envelope

    {"statusCode": <int>, "code": "error", "message": <str>}

None of these are transient -- they describe bad caller input or missing
state -- so nothing in the stack retries them.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 400
    code: str = "error"
    message: str = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_envelope(self) -> dict:
        return {"statusCode": self.status_code, "code": self.code, "message": self.message}


class InvalidCredentials(AuthError):
    """Username unknown or password mismatch. The two cases are never distinguished."""

    status_code = 401
    message = "Invalid username or password."


class UserNotFound(AuthError):
    """The principal behind a login or session no longer resolves to a stored identity."""

    status_code = 401
    message = "The user doesn't exist"


class Unauthenticated(AuthError):
    """Session token unknown, never issued, or expired."""

    status_code = 403
    message = "Please go to login and provide Login/Password"


class ValidationError(AuthError):
    """Malformed signup input."""

    status_code = 422
    message = "Invalid input."


class UsernameTaken(AuthError):
    status_code = 409
    message = "A user with that username already exists."


class BearerAuthError(AuthError):
    """Raised by the bearer-token guard in front of GET /whoAmI."""

    status_code = 401
    message = "Authorization header missing or invalid"

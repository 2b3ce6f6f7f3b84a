"""
auth/errors.py -- Error taxonomy for the auth core.

Every failure the service reports is one of these kinds. The HTTP layer maps
them to status codes (see api/main.py); the core never knows about HTTP.

InvalidCredentialError is deliberately used for unknown email, wrong
password, and every kind of bad token, so callers cannot tell which factor
failed.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all auth core failures."""

    code = "auth_error"
    message = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class EmailExistsError(AuthError):
    code = "email_exists"
    message = "Email already registered."


class InvalidCredentialError(AuthError):
    code = "invalid_credentials"
    message = "Invalid email or password."


class NotFoundError(AuthError):
    code = "not_found"
    message = "User not found."


class StorageFailureError(AuthError):
    """Any credential store failure not otherwise classified."""

    code = "storage_failure"
    message = "Credential store failure."


class DuplicateEmailError(StorageFailureError):
    """Raised by the store when the email uniqueness constraint rejects an insert."""

    code = "duplicate_email"
    message = "A user with that email already exists."


class PasswordTooLongError(AuthError):
    """The password is longer than bcrypt's 72-byte input limit (measured in UTF-8)."""

    code = "password_too_long"
    message = "Password must be at most 72 bytes when UTF-8 encoded."

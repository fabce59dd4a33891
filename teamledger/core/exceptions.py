"""Error taxonomy for account and session operations.

Every error carries an ErrorKind so the HTTP layer can map it to a status
code without inspecting messages. All of these are client-caused conditions;
infrastructure failures (database unavailable, etc.) are never wrapped.
"""

from enum import Enum


class ErrorKind(str, Enum):
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    LOGIN_FAILED = "LOGIN_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"


class TeamLedgerError(Exception):
    """Base class for errors raised by services and surfaced to API clients."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT
    default_message = "Invalid request."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UserAlreadyExists(TeamLedgerError):
    kind = ErrorKind.USER_ALREADY_EXISTS
    default_message = "A user with this email already exists."


class UserNotFound(TeamLedgerError):
    kind = ErrorKind.USER_NOT_FOUND
    default_message = "User not found."


class LoginFailed(TeamLedgerError):
    kind = ErrorKind.LOGIN_FAILED
    default_message = "Invalid email or password."


class Unauthorized(TeamLedgerError):
    """Caller is not allowed to act on the target resource."""

    kind = ErrorKind.UNAUTHORIZED
    default_message = "You are not allowed to perform this action."


class NotAuthenticated(Unauthorized):
    """No usable authentication was supplied with the request."""

    kind = ErrorKind.NOT_AUTHENTICATED
    default_message = "Not authenticated"


class InvalidToken(TeamLedgerError):
    """Session token failed validation (signature, expiry, structure, type)."""

    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid token"


class InvalidArgument(TeamLedgerError):
    kind = ErrorKind.INVALID_ARGUMENT

"""Application error taxonomy and database error classification."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from sqlalchemy.exc import DBAPIError


class ErrorKind(str, enum.Enum):
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    AUTHORIZATION = "AUTHORIZATION"
    AUTHENTICATION = "AUTHENTICATION"
    INTERNAL = "INTERNAL"


# Every ErrorKind must have an entry here.
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.INTERNAL: 500,
}


@dataclass
class ErrorSource:
    path: str
    message: str


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, sources: list[ErrorSource] | None = None, path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.sources = sources if sources is not None else [ErrorSource(path=path, message=message)]

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class AuthorizationError(AppError):
    kind = ErrorKind.AUTHORIZATION


class AuthenticationError(AppError):
    kind = ErrorKind.AUTHENTICATION


class InternalError(AppError):
    kind = ErrorKind.INTERNAL


ERROR_CLASS_BY_KIND: dict[ErrorKind, type[AppError]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.AUTHORIZATION: AuthorizationError,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.INTERNAL: InternalError,
}

# SQLSTATE -> (kind, public message, error source path)
_SQLSTATE_RULES: dict[str, tuple[ErrorKind, str, str]] = {
    "23505": (ErrorKind.CONFLICT, "Duplicate entry", "field"),
    "23503": (ErrorKind.VALIDATION, "Foreign key constraint error", "field"),
    "23502": (ErrorKind.VALIDATION, "Required value missing", "field"),
    "23514": (ErrorKind.VALIDATION, "Check constraint violated", "field"),
    "22P02": (ErrorKind.VALIDATION, "Invalid data format", "field"),
    "40001": (ErrorKind.CONFLICT, "Concurrent update, please retry", "transaction"),
    "40P01": (ErrorKind.CONFLICT, "Concurrent update, please retry", "transaction"),
    "57014": (ErrorKind.CONFLICT, "Database operation timed out", "transaction"),
}

# SQLite has no SQLSTATE; match on the driver message instead.
_SQLITE_MESSAGE_RULES: list[tuple[str, str]] = [
    ("UNIQUE constraint failed", "23505"),
    ("FOREIGN KEY constraint failed", "23503"),
    ("NOT NULL constraint failed", "23502"),
    ("CHECK constraint failed", "23514"),
    ("database is locked", "40001"),
]


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return str(code)
    text = str(orig)
    for needle, mapped in _SQLITE_MESSAGE_RULES:
        if needle in text:
            return mapped
    return None


def _constraint_field(exc: DBAPIError) -> str | None:
    diag = getattr(exc.orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return str(constraint)
    text = str(exc.orig)
    if "constraint failed:" in text:
        # e.g. "UNIQUE constraint failed: post_votes.user_id, post_votes.post_id"
        return text.split("constraint failed:", 1)[1].strip().split(",")[0].strip()
    return None


def classify_db_error(exc: DBAPIError) -> AppError:
    """Map a driver-level database error onto the application taxonomy."""
    code = _sqlstate(exc)
    rule = _SQLSTATE_RULES.get(code or "")
    if rule is None:
        return InternalError(
            "Database operation failed",
            [ErrorSource(path="database", message="Unknown database error")],
        )
    kind, message, default_path = rule
    path = _constraint_field(exc) or default_path
    return ERROR_CLASS_BY_KIND[kind](message, [ErrorSource(path=path, message=message)])

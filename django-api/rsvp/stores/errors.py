"""Storage error classification.

Each database backend reports unique-key violations differently. This module
maps them onto one question, "was this a uniqueness conflict?", so the
services never inspect driver error codes or messages.
"""

import sqlite3

from django.db import IntegrityError

POSTGRES_UNIQUE_VIOLATION = "23505"
SQLITE_CONSTRAINT_UNIQUE = getattr(sqlite3, "SQLITE_CONSTRAINT_UNIQUE", 2067)


def _postgres_is_unique_violation(cause: BaseException) -> bool:
    # psycopg 3 exposes sqlstate, psycopg2 exposes pgcode
    code = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    return code == POSTGRES_UNIQUE_VIOLATION


def _sqlite_is_unique_violation(cause: BaseException) -> bool:
    if not isinstance(cause, sqlite3.IntegrityError):
        return False
    code = getattr(cause, "sqlite_errorcode", None)
    if code is not None:
        return code == SQLITE_CONSTRAINT_UNIQUE
    return str(cause).startswith("UNIQUE constraint failed")


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True if an IntegrityError was raised by a unique constraint."""
    cause = exc.__cause__
    if cause is None:
        return False
    return _postgres_is_unique_violation(cause) or _sqlite_is_unique_violation(cause)


def violated_constraint(exc: IntegrityError) -> str | None:
    """Return the violated constraint name where the backend reports it."""
    diag = getattr(exc.__cause__, "diag", None)
    return getattr(diag, "constraint_name", None)

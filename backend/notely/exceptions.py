"""
Notely Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for startup and per-request failures.
Why:   Each exception maps to exactly one outcome: a fatal startup abort or a
       specific HTTP status with a structured JSON body.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch the
       per-request ones; main() catches the startup ones and exits.

Exception Hierarchy:
    NotelyError (base)
    ├── ConfigurationError       → fatal at startup (bad DATABASE_URL, unknown driver)
    ├── DatabaseConnectionError  → fatal at startup (unreachable server, failed ping)
    ├── ValidationError          → 400 Bad Request
    ├── AuthError                → 401 Unauthorized (missing | malformed | invalid)
    ├── StorageError             → 500 Internal Server Error (generic message)
    └── AssetError               → 500 Internal Server Error (landing page)
"""

from typing import Any, Dict, List, Optional


class NotelyError(Exception):
    """
    Base exception for all Notely application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where noted)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(NotelyError):
    """
    Raised when the environment cannot be turned into a working configuration.

    When:    DATABASE_URL is unparseable or names a driver we cannot load.
    Effect:  Startup aborts with exit status 1. Never raised while serving.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseConnectionError(NotelyError):
    """
    Raised when the configured database cannot be reached at startup.

    When:    Connection refused, authentication failure, failed liveness ping.
    Effect:  Startup aborts with exit status 1; the service never starts
             half-working.
    """

    def __init__(
        self,
        message: str = "Could not connect to the database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(NotelyError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "name is required",
            "details": {"field": "name"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthError(NotelyError):
    """
    Raised when a request to a protected route cannot be authenticated.

    HTTP:    401 Unauthorized, with `WWW-Authenticate: ApiKey`

    Kinds:
        missing:    no Authorization header at all
        malformed:  header present but not `ApiKey <key>`
        invalid:    well-formed key that matches no user
    """

    MISSING = "missing"
    MALFORMED = "malformed"
    INVALID = "invalid"

    _MESSAGES = {
        MISSING: "No authorization header included",
        MALFORMED: "Malformed authorization header",
        INVALID: "Invalid API key",
    }

    def __init__(
        self,
        kind: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        if kind not in self._MESSAGES:
            raise ValueError(f"Unknown auth error kind '{kind}'")
        ctx = context or {}
        ctx["kind"] = kind
        super().__init__(message=self._MESSAGES[kind], context=ctx)
        self.kind = kind


class StorageError(NotelyError):
    """
    Raised when a database operation fails while serving a request.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. The original
    exception type is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AssetError(NotelyError):
    """
    Raised when a packaged static asset cannot be read.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Could not load the requested page",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


JSON_INVALID_MESSAGE = "request body is not valid JSON"


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """
    One-line message for the first pydantic error of a rejected request body.

    Only named locations are kept, so the character offset pydantic reports
    for malformed JSON never leaks into the message.
    """
    if not errors:
        return "Invalid request body"

    first = errors[0]
    if first.get("type") == "json_invalid":
        return JSON_INVALID_MESSAGE

    location = ".".join(
        part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"
    )
    message = first.get("msg", "Invalid request body")
    return f"{location}: {message}" if location else message

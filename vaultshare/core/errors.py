"""
Error taxonomy for the data-access layer.

Every failure that crosses a repository or resolver boundary is classified
exactly once into an ErrorKind right after it is caught. Downstream code
switches on the kind instead of inspecting messages.
"""

import enum
from typing import Any, Optional

import httpx
from supabase import PostgrestAPIError, StorageException


class ErrorKind(str, enum.Enum):
    TRANSIENT = "transient"
    BACKEND = "backend"
    CONFIGURATION = "configuration"
    VALIDATION = "validation"


# Lower-cased fragments that identify transport failures surfaced as plain messages
TRANSIENT_MARKERS = (
    "fetch failed",
    "failed to fetch",
    "network error",
    "connection reset",
    "connection closed",
    "socket hang up",
    "econnreset",
)

NOT_FOUND_CODE = "PGRST116"
UNDEFINED_TABLE_CODE = "42P01"
CONFLICT_CODES = ("23505", "23503", "409")
PERMISSION_DENIED_CODE = "42501"


class VaultShareError(Exception):
    kind: ErrorKind = ErrorKind.BACKEND

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransientNetworkError(VaultShareError):
    kind = ErrorKind.TRANSIENT


class BackendError(VaultShareError):
    """Failure reported by the backend: constraint violation, not-found, permission."""

    kind = ErrorKind.BACKEND

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details
        self.hint = hint

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND_CODE

    @property
    def is_conflict(self) -> bool:
        return self.code in CONFLICT_CODES

    @property
    def is_permission_denied(self) -> bool:
        return self.code == PERMISSION_DENIED_CODE

    @property
    def is_missing_relation(self) -> bool:
        if self.code == UNDEFINED_TABLE_CODE:
            return True
        lowered = self.message.lower()
        return "relation" in lowered and "does not exist" in lowered

    def __repr__(self) -> str:
        return f"BackendError(code={self.code!r}, message={self.message!r})"


class ConfigurationError(VaultShareError):
    kind = ErrorKind.CONFIGURATION


class ValidationError(VaultShareError):
    kind = ErrorKind.VALIDATION


class RetryExhaustedError(VaultShareError):
    """Raised when every attempt of a retried operation failed with a transient error."""

    kind = ErrorKind.TRANSIENT

    def __init__(self, label: str, attempts: int, last_error: BaseException):
        super().__init__(f"{label} failed after {attempts} attempts: {last_error}")
        self.label = label
        self.attempts = attempts
        self.last_error = last_error


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any caught exception onto the closed taxonomy."""
    if isinstance(exc, VaultShareError):
        return exc.kind
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return ErrorKind.TRANSIENT
    if isinstance(exc, (PostgrestAPIError, StorageException)):
        return ErrorKind.BACKEND
    lowered = str(exc).lower()
    if any(marker in lowered for marker in TRANSIENT_MARKERS):
        return ErrorKind.TRANSIENT
    return ErrorKind.BACKEND


def is_backend_reported(exc: BaseException) -> bool:
    """True for failures the backend itself reported, as opposed to bugs or transport faults."""
    return isinstance(exc, (BackendError, PostgrestAPIError, StorageException))


def _storage_error_fields(exc: StorageException) -> dict:
    # storage3 packs the response payload dict into args[0]
    payload: Any = exc.args[0] if exc.args else None
    if isinstance(payload, dict):
        return {
            "message": str(payload.get("message") or payload.get("error") or exc),
            "code": str(payload["statusCode"]) if payload.get("statusCode") else None,
        }
    return {"message": str(exc), "code": None}


def to_backend_error(exc: BaseException) -> BackendError:
    """Convert a non-transient exception into a BackendError suitable for Result.error."""
    if isinstance(exc, BackendError):
        return exc
    if isinstance(exc, PostgrestAPIError):
        return BackendError(
            exc.message or str(exc),
            code=exc.code,
            details=exc.details,
            hint=exc.hint,
        )
    if isinstance(exc, StorageException):
        return BackendError(**_storage_error_fields(exc))
    return BackendError(str(exc))

"""Error taxonomy and structured results for clinic operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ClinicError(Exception):
    """Base exception for the clinic data layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ClinicError, ValueError):
    """Raised when a record fails a format or required-field check."""


class SchemaError(ValidationError):
    """Raised when a persisted row does not match its entity's field set."""


class ConflictError(ClinicError):
    """Raised for a double-booked slot or a duplicate login name."""


class StorageError(ClinicError, RuntimeError):
    """Raised when a value cannot be serialized or persisted."""


class AuthError(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    DUPLICATE_LOGIN = "duplicate_login"
    INVALID_USER = "invalid_user"


@dataclass(frozen=True)
class SubmitResult(Generic[T]):
    """Outcome of a repository write as seen by the caller."""

    success: bool
    record: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, record: T) -> "SubmitResult[T]":
        return cls(success=True, record=record)

    @classmethod
    def failed(cls, error: ClinicError) -> "SubmitResult[T]":
        return cls(success=False, message=error.message)


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    """Outcome of a login or registration attempt."""

    success: bool
    value: Optional[T] = None
    error: Optional[AuthError] = None
    message: Optional[str] = None

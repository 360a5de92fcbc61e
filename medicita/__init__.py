"""Medicita: clinic data layer for users, doctors, patients, appointments and history."""

from .clinic import Clinic
from .errors import (
    AuthError,
    AuthResult,
    ClinicError,
    ConflictError,
    SchemaError,
    StorageError,
    SubmitResult,
    ValidationError,
)
from .models import (
    Appointment,
    AppointmentStatus,
    Doctor,
    HistoryRecord,
    Patient,
    Role,
    SessionSnapshot,
    User,
)
from .store import JSONFileStore, KeyValueStore, MemoryStore

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AuthError",
    "AuthResult",
    "Clinic",
    "ClinicError",
    "ConflictError",
    "Doctor",
    "HistoryRecord",
    "JSONFileStore",
    "KeyValueStore",
    "MemoryStore",
    "Patient",
    "Role",
    "SchemaError",
    "SessionSnapshot",
    "StorageError",
    "SubmitResult",
    "User",
    "ValidationError",
]

__version__ = "0.1.0"

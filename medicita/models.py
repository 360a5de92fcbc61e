"""Entity records and their persisted row layout.

Attributes use English names in Python. Rows written to the store keep the
Spanish keys the clinic has always used, so existing data files stay
readable.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Tuple, Type, TypeVar

from .errors import SchemaError

E = TypeVar("E", bound="Entity")


class Role(str, Enum):
    ADMINISTRATOR = "Administrador"
    DOCTOR = "Doctor"
    RECEPTIONIST = "Recepcionista"


class AppointmentStatus(str, Enum):
    SCHEDULED = "Programada"
    CONFIRMED = "Confirmada"
    COMPLETED = "Completada"
    CANCELLED = "Cancelada"


def _coerce_enum(enum_type: Type[Enum], value: Any, label: str) -> Any:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError as exc:
        raise SchemaError(f"Invalid {label}: {value!r}") from exc


def _coerce_age(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise SchemaError(f"Invalid age: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Invalid age: {value!r}") from exc


class Entity:
    """Shared row mapping for all persisted records.

    ``ROW_FIELDS`` pairs each attribute with its persisted key, in the order
    the keys are written.
    """

    ROW_FIELDS: ClassVar[Tuple[Tuple[str, str], ...]] = ()
    ID_PREFIX: ClassVar[str] = ""
    # Attributes converted by _from_values; every other one must be text.
    CONVERTED: ClassVar[FrozenSet[str]] = frozenset()
    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"id"})

    id: Optional[str]

    @classmethod
    def from_row(cls: Type[E], row: Mapping[str, Any]) -> E:
        if not isinstance(row, Mapping):
            raise SchemaError(f"{cls.__name__} row must be an object")
        expected = {key for _, key in cls.ROW_FIELDS}
        missing = expected - set(row)
        unknown = set(row) - expected
        if missing:
            raise SchemaError(
                f"{cls.__name__} row is missing fields: {', '.join(sorted(missing))}"
            )
        if unknown:
            raise SchemaError(
                f"{cls.__name__} row has unknown fields: {', '.join(sorted(unknown))}"
            )
        values = {attr: row[key] for attr, key in cls.ROW_FIELDS}
        cls._check_text(values)
        return cls._from_values(values)

    @classmethod
    def _check_text(cls, values: Mapping[str, Any]) -> None:
        for attr, key in cls.ROW_FIELDS:
            value = values[attr]
            if attr in cls.CONVERTED or (value is None and attr in cls.NULLABLE):
                continue
            if not isinstance(value, str):
                raise SchemaError(
                    f"{cls.__name__} field '{key}' must be text, got {type(value).__name__}"
                )

    def check_types(self) -> None:
        """Raise :class:`SchemaError` when a text attribute holds another type."""

        self._check_text({attr: getattr(self, attr) for attr, _ in self.ROW_FIELDS})

    @classmethod
    def _from_values(cls: Type[E], values: Dict[str, Any]) -> E:
        return cls(**values)  # type: ignore[call-arg]

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {}
        for attr, key in self.ROW_FIELDS:
            value = getattr(self, attr)
            if isinstance(value, Enum):
                value = value.value
            row[key] = value
        return row

    def with_id(self: E, record_id: Optional[str]) -> E:
        return replace(self, id=record_id)  # type: ignore[type-var]


@dataclass(frozen=True)
class User(Entity):
    ROW_FIELDS = (
        ("id", "id"),
        ("name", "nombre"),
        ("login_name", "usuario"),
        ("password", "password"),
        ("role", "rol"),
    )
    ID_PREFIX = "usr"
    CONVERTED = frozenset({"role"})

    name: str
    login_name: str
    password: str
    role: Role
    id: Optional[str] = None

    @classmethod
    def _from_values(cls, values: Dict[str, Any]) -> "User":
        values["role"] = _coerce_enum(Role, values["role"], "role")
        return cls(**values)


@dataclass(frozen=True)
class Doctor(Entity):
    ROW_FIELDS = (
        ("id", "id"),
        ("name", "nombre"),
        ("specialty", "especialidad"),
        ("phone", "telefono"),
        ("email", "correo"),
        ("schedule", "horario"),
    )
    ID_PREFIX = "doc"

    name: str
    specialty: str
    phone: str
    email: str
    schedule: str
    id: Optional[str] = None


@dataclass(frozen=True)
class Patient(Entity):
    ROW_FIELDS = (
        ("id", "id"),
        ("name", "nombre"),
        ("age", "edad"),
        ("sex", "sexo"),
        ("phone", "telefono"),
        ("address", "direccion"),
        ("doctor_id", "medicoId"),
        ("doctor_name", "medicoNombre"),
    )
    ID_PREFIX = "pac"
    CONVERTED = frozenset({"age"})
    NULLABLE = frozenset({"id", "doctor_id", "doctor_name"})

    name: str
    age: Optional[int]
    sex: str
    phone: str
    address: str
    doctor_id: Optional[str] = None
    # Snapshot of the doctor's name when the patient was last saved.
    doctor_name: str = ""
    id: Optional[str] = None

    @classmethod
    def _from_values(cls, values: Dict[str, Any]) -> "Patient":
        values["age"] = _coerce_age(values["age"])
        values["doctor_id"] = values["doctor_id"] or None
        values["doctor_name"] = values["doctor_name"] or ""
        return cls(**values)

    def to_row(self) -> Dict[str, Any]:
        row = super().to_row()
        row["medicoId"] = self.doctor_id or ""
        return row


@dataclass(frozen=True)
class Appointment(Entity):
    ROW_FIELDS = (
        ("id", "id"),
        ("patient_id", "pacienteId"),
        ("patient_name", "pacienteNombre"),
        ("doctor_id", "doctorId"),
        ("doctor_name", "doctorNombre"),
        ("datetime", "fecha"),
        ("reason", "motivo"),
        ("status", "estado"),
    )
    ID_PREFIX = "cit"
    CONVERTED = frozenset({"status"})

    patient_id: str
    doctor_id: str
    # ISO local datetime such as "2024-05-10T09:30"; compared as text.
    datetime: str
    reason: str = ""
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient_name: str = ""
    doctor_name: str = ""
    id: Optional[str] = None

    @classmethod
    def _from_values(cls, values: Dict[str, Any]) -> "Appointment":
        values["status"] = _coerce_enum(AppointmentStatus, values["status"], "status")
        return cls(**values)

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED


@dataclass(frozen=True)
class HistoryRecord(Entity):
    ROW_FIELDS = (
        ("id", "id"),
        ("patient_id", "pacienteId"),
        ("patient_name", "pacienteNombre"),
        ("doctor_id", "doctorId"),
        ("doctor_name", "doctorNombre"),
        ("date", "fecha"),
        ("diagnosis", "diagnostico"),
        ("medications", "medicamentos"),
        ("observations", "observaciones"),
    )
    ID_PREFIX = "his"

    patient_id: str
    doctor_id: str
    date: str
    diagnosis: str = ""
    medications: str = ""
    observations: str = ""
    patient_name: str = ""
    doctor_name: str = ""
    id: Optional[str] = None


@dataclass(frozen=True)
class SessionSnapshot(Entity):
    """Identity of the logged-in user; never carries the password."""

    ROW_FIELDS = (
        ("id", "id"),
        ("login_name", "usuario"),
        ("name", "nombre"),
        ("role", "rol"),
    )
    CONVERTED = frozenset({"role"})
    NULLABLE = frozenset()

    id: str
    login_name: str
    name: str
    role: Role

    @classmethod
    def _from_values(cls, values: Dict[str, Any]) -> "SessionSnapshot":
        values["role"] = _coerce_enum(Role, values["role"], "role")
        return cls(**values)

    @classmethod
    def from_user(cls, user: User) -> "SessionSnapshot":
        if user.id is None:
            raise ValueError("Cannot open a session for an unsaved user")
        return cls(id=user.id, login_name=user.login_name, name=user.name, role=user.role)

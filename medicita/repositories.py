"""Repositories owning one clinic collection each.

Every repository reads its collection straight from the store on each call;
there is no cache. A write is a single read-modify-write of the collection
and either completes or leaves the stored rows untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from . import validators
from .errors import ConflictError, SchemaError, SubmitResult, ValidationError
from .identifiers import generate_id
from .linker import ReferentialLinker
from .models import (
    Appointment,
    AppointmentStatus,
    Doctor,
    Entity,
    HistoryRecord,
    Patient,
    Role,
    User,
)
from .scheduler import AppointmentScheduler
from .store import (
    APPOINTMENTS_KEY,
    DOCTORS_KEY,
    HISTORY_KEY,
    PATIENTS_KEY,
    USERS_KEY,
    KeyValueStore,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)
Row = Dict[str, Any]

DUPLICATE_LOGIN_MESSAGE = "El usuario ya existe"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class Repository(Generic[E]):
    """CRUD over a single collection stored as a JSON array of rows."""

    entity: ClassVar[Type[Entity]]
    key: ClassVar[str]
    search_fields: ClassVar[Tuple[str, ...]] = ("name",)

    def __init__(
        self,
        store: KeyValueStore,
        *,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self._store = store
        self._id_factory = id_factory

    # -- reads -----------------------------------------------------------

    def _rows(self) -> List[Row]:
        payload = self._store.get(self.key, [])
        if not isinstance(payload, list):
            logger.warning("Collection %s is not a list; treating it as empty", self.key)
            return []
        return payload

    def _parse(self, row: Mapping[str, Any]) -> Optional[E]:
        try:
            return self.entity.from_row(row)  # type: ignore[return-value]
        except SchemaError as exc:
            logger.warning("Skipping malformed %s row: %s", self.key, exc.message)
            return None

    def _records(self, rows: Optional[List[Row]] = None) -> List[E]:
        records: List[E] = []
        for row in self._rows() if rows is None else rows:
            record = self._parse(row)
            if record is not None:
                records.append(record)
        return records

    def _matches(self, record: E, needle: str) -> bool:
        for field_name in self.search_fields:
            value = getattr(record, field_name, None)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def list(self, query: Optional[str] = None) -> List[E]:
        """Return records in insertion order, optionally filtered by *query*.

        The filter is a case-insensitive substring match over the
        repository's search fields.
        """

        records = self._records()
        if not query:
            return records
        needle = query.lower()
        return [record for record in records if self._matches(record, needle)]

    def get(self, record_id: str) -> Optional[E]:
        if not record_id:
            return None
        for record in self._records():
            if record.id == record_id:
                return record
        return None

    # -- writes ----------------------------------------------------------

    @staticmethod
    def _index_of(rows: List[Row], record_id: Optional[str]) -> Optional[int]:
        if not record_id:
            return None
        for index, row in enumerate(rows):
            if isinstance(row, Mapping) and row.get("id") == record_id:
                return index
        return None

    def _prepare(self, record: E, rows: List[Row], *, is_update: bool) -> E:
        """Validate *record* against the current rows; return what to persist."""

        return record

    def upsert(self, record: E) -> E:
        """Update the record with a matching id, or create a new one.

        Raises :class:`ValidationError` or :class:`ConflictError` before
        anything is written.
        """

        if not isinstance(record, self.entity):
            raise TypeError(
                f"{type(self).__name__} stores {self.entity.__name__}, got {type(record).__name__}"
            )
        record.check_types()
        with self._store.lock(self.key):
            rows = self._rows()
            index = self._index_of(rows, record.id)
            is_update = index is not None
            prepared = self._prepare(record, rows, is_update=is_update)

            if index is not None:
                rows[index] = prepared.to_row()
                logger.info("Updated %s record %s", self.key, prepared.id)
            else:
                prepared = prepared.with_id(self._id_factory(self.entity.ID_PREFIX))
                rows.append(prepared.to_row())
                logger.info("Created %s record %s", self.key, prepared.id)
            self._store.set(self.key, rows)
        return prepared

    def submit(self, record: E) -> SubmitResult[E]:
        """Run :meth:`upsert` and report validation problems as a result."""

        try:
            return SubmitResult.ok(self.upsert(record))
        except (ValidationError, ConflictError) as exc:
            logger.warning("Rejected %s write: %s", self.key, exc.message)
            return SubmitResult.failed(exc)

    def remove(self, record_id: str) -> bool:
        """Delete the record with *record_id*; unknown ids are ignored."""

        with self._store.lock(self.key):
            rows = self._rows()
            index = self._index_of(rows, record_id)
            if index is None:
                return False
            del rows[index]
            self._store.set(self.key, rows)
        logger.info("Removed %s record %s", self.key, record_id)
        return True

    def is_empty(self) -> bool:
        return not self._rows()


class UserRepository(Repository[User]):
    entity = User
    key = USERS_KEY
    search_fields = ("name", "login_name")

    def find_by_login(self, login_name: str) -> Optional[User]:
        """Case-insensitive lookup used for uniqueness checks."""

        wanted = login_name.lower()
        for user in self.list():
            if user.login_name.lower() == wanted:
                return user
        return None

    def _prepare(self, record: User, rows: List[Row], *, is_update: bool) -> User:
        if _is_blank(record.name):
            raise ValidationError("Ingrese el nombre")
        if _is_blank(record.login_name):
            raise ValidationError("Ingrese el usuario")
        try:
            role = Role(record.role)
        except ValueError as exc:
            raise ValidationError(f"Rol inválido: {record.role}") from exc

        wanted = record.login_name.lower()
        for other in self._records(rows):
            if is_update and other.id == record.id:
                continue
            if other.login_name.lower() == wanted:
                raise ConflictError(DUPLICATE_LOGIN_MESSAGE)
        return replace(record, role=role)


class DoctorRepository(Repository[Doctor]):
    entity = Doctor
    key = DOCTORS_KEY
    search_fields = ("name", "specialty")

    def _prepare(self, record: Doctor, rows: List[Row], *, is_update: bool) -> Doctor:
        if not validators.is_phone_intl(record.phone):
            raise ValidationError(validators.PHONE_MESSAGE)
        if not validators.is_email(record.email):
            raise ValidationError(validators.EMAIL_MESSAGE)
        schedule = validators.validate_schedule(record.schedule)
        if not schedule.valid:
            raise ValidationError(schedule.message or validators.SCHEDULE_EMPTY_MESSAGE)
        return record

    def choices(self) -> List[Tuple[str, str]]:
        return [(doctor.id or "", f"{doctor.name} ({doctor.specialty})") for doctor in self.list()]


class PatientRepository(Repository[Patient]):
    entity = Patient
    key = PATIENTS_KEY
    search_fields = ("name", "id")

    def __init__(
        self,
        store: KeyValueStore,
        linker: ReferentialLinker,
        *,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        super().__init__(store, id_factory=id_factory)
        self._linker = linker

    def _prepare(self, record: Patient, rows: List[Row], *, is_update: bool) -> Patient:
        if not validators.is_phone_intl(record.phone):
            raise ValidationError(validators.PHONE_MESSAGE)
        age = record.age
        if age is not None and (isinstance(age, bool) or not isinstance(age, int) or age < 0):
            raise ValidationError("Edad inválida")
        return self._linker.link(record)

    def choices(self) -> List[Tuple[str, str]]:
        return [(patient.id or "", patient.name) for patient in self.list()]


def _require_parties(patient_id: str, doctor_id: str, when: str) -> None:
    if _is_blank(patient_id) or _is_blank(doctor_id):
        raise ValidationError(validators.PARTIES_MESSAGE)
    if _is_blank(when):
        raise ValidationError(validators.DATE_MESSAGE)


class AppointmentRepository(Repository[Appointment]):
    """Appointments are never deleted; removing one cancels it."""

    entity = Appointment
    key = APPOINTMENTS_KEY
    search_fields = ("patient_name", "doctor_name")

    def __init__(
        self,
        store: KeyValueStore,
        linker: ReferentialLinker,
        scheduler: AppointmentScheduler,
        *,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        super().__init__(store, id_factory=id_factory)
        self._linker = linker
        self._scheduler = scheduler

    def _prepare(self, record: Appointment, rows: List[Row], *, is_update: bool) -> Appointment:
        _require_parties(record.patient_id, record.doctor_id, record.datetime)
        try:
            status = AppointmentStatus(record.status)
        except ValueError as exc:
            raise ValidationError(f"Estado inválido: {record.status}") from exc
        record = replace(record, status=status)
        self._scheduler.check(record, self._records(rows), is_update=is_update)
        return self._linker.link(record)

    def cancel(self, record_id: str) -> Optional[Appointment]:
        """Mark the appointment as cancelled and return it."""

        with self._store.lock(self.key):
            rows = self._rows()
            index = self._index_of(rows, record_id)
            if index is None:
                return None
            current = self._parse(rows[index])
            if current is None:
                return None
            cancelled = replace(current, status=AppointmentStatus.CANCELLED)
            rows[index] = cancelled.to_row()
            self._store.set(self.key, rows)
        logger.info("Cancelled appointment %s", record_id)
        return cancelled

    def remove(self, record_id: str) -> bool:
        return self.cancel(record_id) is not None


class HistoryRepository(Repository[HistoryRecord]):
    entity = HistoryRecord
    key = HISTORY_KEY
    search_fields = ("patient_name", "doctor_name")

    def __init__(
        self,
        store: KeyValueStore,
        linker: ReferentialLinker,
        *,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        super().__init__(store, id_factory=id_factory)
        self._linker = linker

    def _prepare(self, record: HistoryRecord, rows: List[Row], *, is_update: bool) -> HistoryRecord:
        _require_parties(record.patient_id, record.doctor_id, record.date)
        return self._linker.link(record)

    def for_patient(self, patient_id: str) -> List[HistoryRecord]:
        return [record for record in self.list() if record.patient_id == patient_id]


__all__ = [
    "AppointmentRepository",
    "DoctorRepository",
    "HistoryRepository",
    "PatientRepository",
    "Repository",
    "UserRepository",
]

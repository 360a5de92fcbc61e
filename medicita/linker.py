"""Resolve patient and doctor ids into display-name snapshots."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Optional, TypeVar, Union

from .models import Appointment, HistoryRecord, Patient

if TYPE_CHECKING:  # pragma: no cover
    from .repositories import DoctorRepository, PatientRepository

logger = logging.getLogger(__name__)

Linked = TypeVar("Linked", Patient, Appointment, HistoryRecord)


class ReferentialLinker:
    """Copies referenced names onto records at write time.

    The copied names are a snapshot: renaming a doctor or patient later does
    not touch records that were saved before the rename.
    """

    def __init__(
        self,
        doctors: "DoctorRepository",
        patients: Optional["PatientRepository"] = None,
    ) -> None:
        self._doctors = doctors
        self._patients = patients

    def attach_patients(self, patients: "PatientRepository") -> None:
        self._patients = patients

    def doctor_name(self, doctor_id: Optional[str]) -> str:
        if not doctor_id:
            return ""
        doctor = self._doctors.get(doctor_id)
        if doctor is None:
            logger.debug("Doctor %s not found; leaving name empty", doctor_id)
            return ""
        return doctor.name

    def patient_name(self, patient_id: Optional[str]) -> str:
        if not patient_id:
            return ""
        if self._patients is None:
            raise RuntimeError("ReferentialLinker has no patient repository attached")
        patient = self._patients.get(patient_id)
        if patient is None:
            logger.debug("Patient %s not found; leaving name empty", patient_id)
            return ""
        return patient.name

    def link(self, record: Linked) -> Linked:
        """Return *record* with its denormalized name fields resolved."""

        resolved: Union[Patient, Appointment, HistoryRecord]
        if isinstance(record, Patient):
            resolved = replace(record, doctor_name=self.doctor_name(record.doctor_id))
        elif isinstance(record, (Appointment, HistoryRecord)):
            resolved = replace(
                record,
                patient_name=self.patient_name(record.patient_id),
                doctor_name=self.doctor_name(record.doctor_id),
            )
        else:
            raise TypeError(f"Cannot link record of type {type(record).__name__}")
        return resolved  # type: ignore[return-value]

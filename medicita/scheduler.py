"""Double-booking rule for doctor appointments."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .errors import ConflictError
from .models import Appointment

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Ya existe una cita para ese doctor en la misma fecha y hora"


def has_conflict(
    appointments: Iterable[Appointment],
    doctor_id: str,
    when: str,
    *,
    exclude_id: Optional[str] = None,
) -> bool:
    """Return ``True`` if the doctor already holds a live booking at *when*.

    Datetimes are compared as exact strings. Cancelled appointments never
    block a slot.
    """

    for appointment in appointments:
        if exclude_id is not None and appointment.id == exclude_id:
            continue
        if (
            appointment.doctor_id == doctor_id
            and appointment.datetime == when
            and not appointment.is_cancelled
        ):
            return True
    return False


class AppointmentScheduler:
    """Rejects new appointments that would double-book a doctor."""

    def __init__(self, *, recheck_on_update: bool = False) -> None:
        self.recheck_on_update = recheck_on_update

    def check(
        self,
        appointment: Appointment,
        existing: Iterable[Appointment],
        *,
        is_update: bool,
    ) -> None:
        if is_update and (not self.recheck_on_update or appointment.is_cancelled):
            return

        exclude_id = appointment.id if is_update else None
        if has_conflict(existing, appointment.doctor_id, appointment.datetime, exclude_id=exclude_id):
            logger.warning(
                "Rejected booking for doctor %s at %s: slot taken",
                appointment.doctor_id,
                appointment.datetime,
            )
            raise ConflictError(CONFLICT_MESSAGE)

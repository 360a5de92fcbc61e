"""Default data for a fresh store."""

from __future__ import annotations

import logging
from typing import List

from .models import Doctor, Role, User
from .repositories import DoctorRepository, UserRepository

logger = logging.getLogger(__name__)

# Demo credentials: admin/admin, doctor/doctor, recep/recep.
DEFAULT_USERS = (
    User(name="Admin", login_name="admin", password="admin", role=Role.ADMINISTRATOR),
    User(name="Dra. Demo", login_name="doctor", password="doctor", role=Role.DOCTOR),
    User(name="Recep Demo", login_name="recep", password="recep", role=Role.RECEPTIONIST),
)

DEFAULT_DOCTORS = (
    Doctor(
        name="Dra. Sofía Pérez",
        specialty="Medicina General",
        phone="999-111-2222",
        email="sofia@clinic.com",
        schedule="L-V 09:00-17:00",
    ),
    Doctor(
        name="Dr. Luis García",
        specialty="Pediatría",
        phone="999-333-4444",
        email="luis@clinic.com",
        schedule="L-V 10:00-16:00",
    ),
)


def seed_defaults(users: UserRepository, doctors: DoctorRepository) -> List[str]:
    """Fill empty user and doctor collections; existing data is left alone.

    Returns the names of the collections that were seeded.
    """

    seeded: List[str] = []
    if users.is_empty():
        for user in DEFAULT_USERS:
            users.upsert(user)
        seeded.append(users.key)
        logger.info("Seeded %d default users", len(DEFAULT_USERS))
    if doctors.is_empty():
        for doctor in DEFAULT_DOCTORS:
            doctors.upsert(doctor)
        seeded.append(doctors.key)
        logger.info("Seeded %d sample doctors", len(DEFAULT_DOCTORS))
    return seeded

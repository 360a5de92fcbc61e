"""Wiring of the store, repositories and session into one object."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .config import Settings, load_settings
from .identifiers import generate_id
from .linker import ReferentialLinker
from .repositories import (
    AppointmentRepository,
    DoctorRepository,
    HistoryRepository,
    PatientRepository,
    UserRepository,
)
from .scheduler import AppointmentScheduler
from .seeds import seed_defaults
from .session import AuthSession
from .store import JSONFileStore, KeyValueStore

logger = logging.getLogger(__name__)


class Clinic:
    """Entry point used by the CLI and the dashboard."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        recheck_conflicts_on_update: bool = False,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self.store = store
        self.users = UserRepository(store, id_factory=id_factory)
        self.doctors = DoctorRepository(store, id_factory=id_factory)
        self.linker = ReferentialLinker(self.doctors)
        self.patients = PatientRepository(store, self.linker, id_factory=id_factory)
        self.linker.attach_patients(self.patients)
        self.scheduler = AppointmentScheduler(recheck_on_update=recheck_conflicts_on_update)
        self.appointments = AppointmentRepository(
            store, self.linker, self.scheduler, id_factory=id_factory
        )
        self.history = HistoryRepository(store, self.linker, id_factory=id_factory)
        self.session = AuthSession(self.users, store)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Clinic":
        settings = settings or load_settings()
        logger.debug("Opening clinic data in %s", settings.data_dir)
        store = JSONFileStore(settings.data_dir, prefix=settings.key_prefix)
        return cls(store, recheck_conflicts_on_update=settings.recheck_conflicts_on_update)

    def seed(self) -> list:
        return seed_defaults(self.users, self.doctors)

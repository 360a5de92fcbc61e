"""Which screens each role may open, and where each role lands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional

from .models import Role, SessionSnapshot

LOGIN_VIEW = "index"
PATIENTS_VIEW = "pacientes"
DOCTORS_VIEW = "doctores"
APPOINTMENTS_VIEW = "citas"
HISTORY_VIEW = "historial"


@dataclass(frozen=True)
class View:
    name: str
    label: str
    roles: FrozenSet[Role]


VIEWS: Dict[str, View] = {
    view.name: view
    for view in (
        View(PATIENTS_VIEW, "Pacientes", frozenset({Role.ADMINISTRATOR, Role.RECEPTIONIST})),
        View(DOCTORS_VIEW, "Doctores", frozenset({Role.ADMINISTRATOR})),
        View(APPOINTMENTS_VIEW, "Citas", frozenset({Role.ADMINISTRATOR, Role.RECEPTIONIST})),
        View(HISTORY_VIEW, "Historial", frozenset({Role.ADMINISTRATOR, Role.DOCTOR})),
    )
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    redirect: Optional[str] = None


def default_view(role: Role) -> str:
    if role == Role.DOCTOR:
        return HISTORY_VIEW
    if role == Role.RECEPTIONIST:
        return APPOINTMENTS_VIEW
    return PATIENTS_VIEW


def decide_access(
    session: Optional[SessionSnapshot], roles: Optional[Iterable[Role]] = None
) -> AccessDecision:
    """Gate a screen: no session goes to login, a wrong role to its home view."""

    if session is None:
        return AccessDecision(False, LOGIN_VIEW)
    if roles is not None and session.role not in set(roles):
        return AccessDecision(False, default_view(session.role))
    return AccessDecision(True)


def roles_for(view_name: str) -> FrozenSet[Role]:
    try:
        return VIEWS[view_name].roles
    except KeyError as exc:
        raise KeyError(f"Unknown view '{view_name}'") from exc


def visible_views(session: Optional[SessionSnapshot]) -> List[View]:
    """Navbar entries for *session*; everything is listed when logged out."""

    return [view for view in VIEWS.values() if session is None or session.role in view.roles]

"""Format checks for phone numbers, emails and weekly schedules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

PHONE_MESSAGE = "Teléfono inválido. Ej: 9999-9999 o +1 202-555-0123"
EMAIL_MESSAGE = "Correo inválido"
SCHEDULE_EMPTY_MESSAGE = "Ingrese un horario (ej: L-V 09:00-17:00)"
SCHEDULE_FORMAT_MESSAGE = "Formato inválido en tramo {index}. Ej: L-V 09:00-17:00"
SCHEDULE_RANGE_MESSAGE = (
    "Rango horario inválido en tramo {index} (inicio debe ser menor que fin)"
)
PARTIES_MESSAGE = "Seleccione paciente y doctor"
DATE_MESSAGE = "Seleccione fecha"

_PHONE_SEPARATORS = re.compile(r"[\s().-]")
_INTL_DIGITS = re.compile(r"[0-9]{8,15}")
_LOCAL_DIGITS = re.compile(r"[0-9]{7,15}")
_EMAIL = re.compile(r"[^\s@]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,24}")

# Day codes: Lunes, Martes, miércoles (X), Jueves, Viernes, Sábado, Domingo.
_HOUR_MINUTE = r"(?:[01][0-9]|2[0-3]):[0-5][0-9]"
_SEGMENT = re.compile(
    rf"([LMXJVSD](?:\s*-\s*[LMXJVSD])?)\s+({_HOUR_MINUTE})\s*-\s*({_HOUR_MINUTE})"
)


@dataclass(frozen=True)
class ScheduleCheck:
    valid: bool
    message: Optional[str] = None


def is_phone_intl(value: Optional[str]) -> bool:
    """Accept local numbers (7-15 digits) or ``+`` prefixed ones (8-15 digits)."""

    if not value:
        return False
    text = str(value).strip()
    if not text:
        return False
    digits = _PHONE_SEPARATORS.sub("", text)
    if digits.startswith("+"):
        return _INTL_DIGITS.fullmatch(digits[1:]) is not None
    return _LOCAL_DIGITS.fullmatch(digits) is not None


def is_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return _EMAIL.fullmatch(str(value)) is not None


def _to_minutes(hour_minute: str) -> int:
    hours, minutes = hour_minute.split(":")
    return int(hours) * 60 + int(minutes)


def validate_schedule(value: Optional[str]) -> ScheduleCheck:
    """Check a schedule such as ``"L-V 09:00-17:00, S 08:00-12:00"``.

    Segments are comma separated. The first failing segment is reported by
    its 1-based position.
    """

    text = str(value) if value else ""
    if not text.strip():
        return ScheduleCheck(False, SCHEDULE_EMPTY_MESSAGE)

    segments = [segment.strip() for segment in text.split(",")]
    segments = [segment for segment in segments if segment]
    for index, segment in enumerate(segments, start=1):
        match = _SEGMENT.fullmatch(segment)
        if match is None:
            return ScheduleCheck(False, SCHEDULE_FORMAT_MESSAGE.format(index=index))
        if _to_minutes(match.group(2)) >= _to_minutes(match.group(3)):
            return ScheduleCheck(False, SCHEDULE_RANGE_MESSAGE.format(index=index))
    return ScheduleCheck(True)

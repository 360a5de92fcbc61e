"""PDF export of a patient's medical history."""

from __future__ import annotations

import hashlib
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from .formatting import format_date
from .models import HistoryRecord

logger = logging.getLogger(__name__)

_TOP = 10.5 * inch
_BOTTOM = 1 * inch
_LINE = 0.25 * inch
_WRAP = 90


def _report_filename(patient_id: str, output_dir: Path) -> Path:
    safe_id = re.sub(r"[^A-Za-z0-9_-]", "_", patient_id)
    digest = hashlib.sha1(patient_id.encode("utf-8")).hexdigest()[:8]
    return output_dir / f"historial_{safe_id}_{digest}.pdf"


def _wrap(text: str, width: int = _WRAP) -> List[str]:
    words = text.split()
    if not words:
        return [""]
    lines: List[str] = []
    current = words[0]
    for word in words[1:]:
        if len(current) + 1 + len(word) > width:
            lines.append(current)
            current = word
        else:
            current = f"{current} {word}"
    lines.append(current)
    return lines


class _Writer:
    """Tracks the cursor and starts a new page when it runs off the bottom."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self._pdf = pdf
        self._y = _TOP

    def line(self, text: str, *, font: str = "Helvetica", size: int = 11, indent: float = 1.0) -> None:
        if self._y < _BOTTOM:
            self._pdf.showPage()
            self._y = _TOP
        self._pdf.setFont(font, size)
        self._pdf.drawString(indent * inch, self._y, text)
        self._y -= _LINE

    def gap(self) -> None:
        self._y -= _LINE / 2


def build_history_report(
    patient_id: str,
    records: Iterable[HistoryRecord],
    output_dir: Path,
    *,
    generated_at: Optional[datetime] = None,
) -> Path:
    """Render the history *records* of *patient_id* into a PDF file."""

    entries = [record for record in records if record.patient_id == patient_id]
    if not entries:
        raise ValueError(f"No history records for patient '{patient_id}'")

    generated_at = generated_at or datetime.now()
    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = _report_filename(patient_id, output_dir)

    pdf = canvas.Canvas(str(report_path), pagesize=letter)
    writer = _Writer(pdf)
    writer.line("Historial médico", font="Helvetica-Bold", size=20)
    writer.line(f"Paciente: {entries[0].patient_name or patient_id}", size=12)
    writer.line(f"Generado: {generated_at.strftime('%d/%m/%Y %H:%M')}", size=10)
    writer.gap()

    for record in entries:
        writer.line(
            f"{format_date(record.date)} - {record.doctor_name or record.doctor_id}",
            font="Helvetica-Bold",
            size=12,
        )
        for label, value in (
            ("Diagnóstico", record.diagnosis),
            ("Medicamentos", record.medications),
            ("Observaciones", record.observations),
        ):
            for index, text in enumerate(_wrap(value or "-")):
                prefix = f"{label}: " if index == 0 else ""
                writer.line(f"{prefix}{text}", indent=1.2)
        writer.gap()

    pdf.showPage()
    pdf.save()
    logger.info("History report for %s created at %s", patient_id, report_path)
    return report_path

"""Flask front end for the clinic repositories.

Every screen of the clinic tool has a JSON endpoint here. Access is gated by
the logged-in role the same way the screens are: without a session the
caller is sent to the login view, and a role without permission is sent to
its own landing view.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Tuple, Type

from flask import Flask, Response, jsonify, request, send_file

from medicita.clinic import Clinic
from medicita.config import configure_logging, load_settings
from medicita.errors import SchemaError
from medicita.formatting import format_date, format_datetime
from medicita.models import Appointment, AppointmentStatus, Doctor, Entity, HistoryRecord, Patient
from medicita.navigation import (
    APPOINTMENTS_VIEW,
    DOCTORS_VIEW,
    HISTORY_VIEW,
    PATIENTS_VIEW,
    roles_for,
    visible_views,
)
from medicita.repositories import Repository
from medicita.reports import build_history_report

ENTITY_BY_VIEW: Dict[str, Type[Entity]] = {
    PATIENTS_VIEW: Patient,
    DOCTORS_VIEW: Doctor,
    APPOINTMENTS_VIEW: Appointment,
    HISTORY_VIEW: HistoryRecord,
}


def _repository_for(clinic: Clinic, view: str) -> Repository:
    return {
        PATIENTS_VIEW: clinic.patients,
        DOCTORS_VIEW: clinic.doctors,
        APPOINTMENTS_VIEW: clinic.appointments,
        HISTORY_VIEW: clinic.history,
    }[view]


def entity_from_payload(entity: Type[Entity], payload: Mapping[str, Any]) -> Entity:
    """Build a record from a form payload keyed like the stored rows.

    Keys the form leaves out default to empty values; unknown keys are
    rejected by the row schema.
    """

    row: MutableMapping[str, Any] = {key: "" for _, key in entity.ROW_FIELDS}
    row.update(payload)
    if not row.get("estado") and entity is Appointment:
        row["estado"] = AppointmentStatus.SCHEDULED.value
    record = entity.from_row(row)
    if not record.id:
        record = record.with_id(None)
    return record


def present(view: str, record: Entity) -> Dict[str, Any]:
    row = record.to_row()
    if view == APPOINTMENTS_VIEW:
        row["fechaTexto"] = format_datetime(row["fecha"])
    elif view == HISTORY_VIEW:
        row["fechaTexto"] = format_date(row["fecha"])
    return row


def create_app(clinic: Optional[Clinic] = None, reports_dir: Optional[Path] = None) -> Flask:
    settings = load_settings()
    clinic = clinic or Clinic.from_settings(settings)
    reports_path = reports_dir or settings.reports_dir

    app = Flask(__name__)
    app.config["CLINIC"] = clinic

    def _gate(view: str) -> Optional[Tuple[Response, int]]:
        decision = clinic.session.require(roles_for(view))
        if decision.allowed:
            return None
        status = 401 if clinic.session.current() is None else 403
        return jsonify({"message": "Acceso denegado", "redirect": decision.redirect}), status

    @app.route("/login", methods=["POST"])
    def login() -> Tuple[Response, int]:
        payload = request.get_json(silent=True) or {}
        result = clinic.session.login(str(payload.get("usuario", "")), str(payload.get("password", "")))
        if not result.success or result.value is None:
            return jsonify({"message": result.message}), 401
        return jsonify(result.value.to_row()), 200

    @app.route("/logout", methods=["POST"])
    def logout() -> Tuple[Response, int]:
        clinic.session.logout()
        return jsonify({"redirect": "index"}), 200

    @app.route("/session", methods=["GET"])
    def session() -> Tuple[Response, int]:
        current = clinic.session.current()
        if current is None:
            return jsonify({"message": "Sin sesión", "redirect": "index"}), 401
        return jsonify(current.to_row()), 200

    @app.route("/views", methods=["GET"])
    def views() -> Response:
        current = clinic.session.current()
        return jsonify(
            [{"name": view.name, "label": view.label} for view in visible_views(current)]
        )

    @app.route("/<view>", methods=["GET"])
    def list_view(view: str) -> Tuple[Response, int]:
        if view not in ENTITY_BY_VIEW:
            return jsonify({"message": f"Vista desconocida: {view}"}), 404
        denied = _gate(view)
        if denied:
            return denied
        query = request.args.get("q") or None
        records = _repository_for(clinic, view).list(query)
        return jsonify([present(view, record) for record in records]), 200

    @app.route("/<view>", methods=["POST"])
    def submit_view(view: str) -> Tuple[Response, int]:
        if view not in ENTITY_BY_VIEW:
            return jsonify({"message": f"Vista desconocida: {view}"}), 404
        denied = _gate(view)
        if denied:
            return denied
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"message": "Se esperaba un objeto JSON"}), 400
        try:
            record = entity_from_payload(ENTITY_BY_VIEW[view], payload)
        except SchemaError as exc:
            return jsonify({"message": exc.message}), 400
        result = _repository_for(clinic, view).submit(record)
        if not result.success or result.record is None:
            return jsonify({"message": result.message}), 422
        return jsonify(present(view, result.record)), 200

    @app.route("/<view>/<record_id>", methods=["DELETE"])
    def remove_view(view: str, record_id: str) -> Tuple[Response, int]:
        if view not in ENTITY_BY_VIEW:
            return jsonify({"message": f"Vista desconocida: {view}"}), 404
        denied = _gate(view)
        if denied:
            return denied
        if not _repository_for(clinic, view).remove(record_id):
            return jsonify({"message": f"No existe el registro {record_id}"}), 404
        return jsonify({"id": record_id}), 200

    @app.route("/historial/<patient_id>/report", methods=["GET"])
    def history_report(patient_id: str):
        denied = _gate(HISTORY_VIEW)
        if denied:
            return denied
        try:
            path = build_history_report(patient_id, clinic.history.for_patient(patient_id), reports_path)
        except ValueError as exc:
            return jsonify({"message": str(exc)}), 404
        return send_file(str(path), mimetype="application/pdf", as_attachment=True)

    return app


if __name__ == "__main__":
    _settings = load_settings()
    configure_logging(_settings.log_level)
    _clinic = Clinic.from_settings(_settings)
    _clinic.seed()
    create_app(_clinic).run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", str(_settings.port))),
        debug=False,
    )

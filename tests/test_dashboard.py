import tempfile
import unittest
from pathlib import Path

from medicita import Clinic, MemoryStore
from medicita.ui.dashboard import create_app


class DashboardTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.clinic = Clinic(MemoryStore())
        self.clinic.seed()
        app = create_app(self.clinic, reports_dir=Path(self._tmp.name))
        app.config["TESTING"] = True
        self.client = app.test_client()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _login(self, login_name: str) -> None:
        response = self.client.post("/login", json={"usuario": login_name, "password": login_name})
        self.assertEqual(response.status_code, 200)

    def test_requires_session(self) -> None:
        response = self.client.get("/pacientes")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["redirect"], "index")

    def test_login_failure(self) -> None:
        response = self.client.post("/login", json={"usuario": "admin", "password": "nope"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["message"], "Usuario o contraseña incorrectos")

    def test_role_redirects(self) -> None:
        self._login("doctor")
        response = self.client.get("/citas")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.get_json()["redirect"], "historial")

        self._login("recep")
        response = self.client.get("/doctores")
        self.assertEqual(response.get_json()["redirect"], "citas")

    def test_session_and_views(self) -> None:
        self._login("recep")
        self.assertNotIn("password", self.client.get("/session").get_json())
        names = [view["name"] for view in self.client.get("/views").get_json()]
        self.assertEqual(names, ["pacientes", "citas"])

        self.client.post("/logout")
        self.assertEqual(self.client.get("/session").status_code, 401)

    def test_list_with_filter(self) -> None:
        self._login("admin")
        response = self.client.get("/doctores?q=pediatr")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["nombre"] for row in response.get_json()], ["Dr. Luis García"])

    def test_submit_and_cancel_appointment(self) -> None:
        self._login("admin")
        doctor_id = self.clinic.doctors.list()[0].id
        patient = self.client.post(
            "/pacientes",
            json={"nombre": "Ana", "edad": "30", "sexo": "F", "telefono": "9999-9999", "medicoId": doctor_id},
        ).get_json()
        self.assertEqual(patient["medicoNombre"], "Dra. Sofía Pérez")

        payload = {"pacienteId": patient["id"], "doctorId": doctor_id, "fecha": "2024-05-10T09:30"}
        created = self.client.post("/citas", json=payload)
        self.assertEqual(created.status_code, 200)
        appointment = created.get_json()
        self.assertEqual(appointment["estado"], "Programada")
        self.assertEqual(appointment["fechaTexto"], "10/05/2024 09:30")

        conflict = self.client.post("/citas", json=payload)
        self.assertEqual(conflict.status_code, 422)

        removed = self.client.delete(f"/citas/{appointment['id']}")
        self.assertEqual(removed.status_code, 200)
        self.assertEqual(self.clinic.appointments.get(appointment["id"]).status.value, "Cancelada")

    def test_submit_rejects_unknown_fields(self) -> None:
        self._login("admin")
        response = self.client.post("/doctores", json={"nombre": "X", "extra": 1})
        self.assertEqual(response.status_code, 400)

    def test_submit_rejects_non_text_date(self) -> None:
        self._login("admin")
        doctor_id = self.clinic.doctors.list()[0].id
        patient = self.client.post("/pacientes", json={"nombre": "Ana", "telefono": "9999-9999"}).get_json()

        response = self.client.post(
            "/citas", json={"pacienteId": patient["id"], "doctorId": doctor_id, "fecha": 20240510}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.clinic.appointments.list(), [])
        listing = self.client.get("/citas")
        self.assertEqual(listing.status_code, 200)
        self.assertEqual(listing.get_json(), [])

    def test_submit_reports_validation_message(self) -> None:
        self._login("admin")
        response = self.client.post(
            "/doctores",
            json={"nombre": "X", "especialidad": "Y", "telefono": "9999999", "correo": "x@y", "horario": "L 09:00-10:00"},
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.get_json()["message"], "Correo inválido")

    def test_unknown_view_and_record(self) -> None:
        self._login("admin")
        self.assertEqual(self.client.get("/facturas").status_code, 404)
        self.assertEqual(self.client.delete("/pacientes/pac_missing").status_code, 404)

    def test_history_report(self) -> None:
        self._login("doctor")
        self.assertEqual(self.client.get("/historial/pac_none/report").status_code, 404)

        self._login("admin")
        doctor_id = self.clinic.doctors.list()[0].id
        patient = self.client.post(
            "/pacientes", json={"nombre": "Ana", "telefono": "9999-9999"}
        ).get_json()
        self.client.post(
            "/historial",
            json={"pacienteId": patient["id"], "doctorId": doctor_id, "fecha": "2024-05-10", "diagnostico": "Gripe"},
        )

        response = self.client.get(f"/historial/{patient['id']}/report")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.mimetype, "application/pdf")
        response.close()


if __name__ == "__main__":
    unittest.main()

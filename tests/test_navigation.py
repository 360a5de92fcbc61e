import unittest

from medicita.formatting import format_date, format_datetime
from medicita.models import Role, SessionSnapshot
from medicita.navigation import default_view, roles_for, visible_views


def snapshot(role: Role) -> SessionSnapshot:
    return SessionSnapshot(id="usr_1", login_name="x", name="X", role=role)


class NavigationTests(unittest.TestCase):
    def test_default_views(self) -> None:
        self.assertEqual(default_view(Role.DOCTOR), "historial")
        self.assertEqual(default_view(Role.RECEPTIONIST), "citas")
        self.assertEqual(default_view(Role.ADMINISTRATOR), "pacientes")

    def test_visible_views_by_role(self) -> None:
        names = lambda role: [view.name for view in visible_views(snapshot(role))]
        self.assertEqual(names(Role.ADMINISTRATOR), ["pacientes", "doctores", "citas", "historial"])
        self.assertEqual(names(Role.RECEPTIONIST), ["pacientes", "citas"])
        self.assertEqual(names(Role.DOCTOR), ["historial"])
        self.assertEqual(len(visible_views(None)), 4)

    def test_roles_for_unknown_view(self) -> None:
        self.assertEqual(roles_for("doctores"), frozenset({Role.ADMINISTRATOR}))
        with self.assertRaises(KeyError):
            roles_for("facturas")


class FormattingTests(unittest.TestCase):
    def test_format_datetime(self) -> None:
        self.assertEqual(format_datetime("2024-05-10T09:30"), "10/05/2024 09:30")
        self.assertEqual(format_datetime(""), "")
        self.assertEqual(format_datetime(None), "")
        self.assertEqual(format_datetime("mañana"), "mañana")
        self.assertEqual(format_datetime(20240510), "20240510")

    def test_format_date(self) -> None:
        self.assertEqual(format_date("2024-01-02"), "02/01/2024")
        self.assertEqual(format_date("2024-01-02T23:15"), "02/01/2024")
        self.assertEqual(format_date("n/a"), "n/a")
        self.assertEqual(format_date(20240510), "20240510")


if __name__ == "__main__":
    unittest.main()

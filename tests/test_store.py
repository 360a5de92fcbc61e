import tempfile
import unittest
from pathlib import Path

from medicita.errors import StorageError
from medicita.store import JSONFileStore, MemoryStore


class MemoryStoreTests(unittest.TestCase):
    def test_missing_key_returns_fallback(self) -> None:
        store = MemoryStore()
        self.assertEqual(store.get("patients", []), [])
        self.assertIsNone(store.get("session"))

    def test_one_lock_per_key(self) -> None:
        store = MemoryStore()

        self.assertIs(store.lock("citas"), store.lock("citas"))
        self.assertIsNot(store.lock("citas"), store.lock("patients"))
        self.assertIsNot(store.lock("citas"), MemoryStore().lock("citas"))

    def test_round_trip_through_json_text(self) -> None:
        store = MemoryStore()
        store.set("doctors", [{"id": "doc_1", "nombre": "Dra. Sofía"}])

        self.assertEqual(store.get("doctors", []), [{"id": "doc_1", "nombre": "Dra. Sofía"}])
        self.assertEqual(store.raw("doctors"), '[{"id": "doc_1", "nombre": "Dra. Sofía"}]')

    def test_keys_are_prefixed(self) -> None:
        store = MemoryStore(prefix="test_")
        store.set("users", [])
        self.assertIn("test_users", store._data)

    def test_corrupt_value_returns_fallback(self) -> None:
        store = MemoryStore()
        store.put_raw("citas", "{not json")
        self.assertEqual(store.get("citas", []), [])

    def test_stored_null_returns_fallback(self) -> None:
        store = MemoryStore()
        store.set("session", None)
        self.assertEqual(store.get("session", "fallback"), "fallback")

    def test_unserializable_value_raises_storage_error(self) -> None:
        store = MemoryStore()
        with self.assertRaises(StorageError):
            store.set("users", [object()])
        self.assertIsNone(store.raw("users"))

    def test_delete(self) -> None:
        store = MemoryStore()
        store.set("session", {"id": "usr_1"})
        store.delete("session")
        store.delete("session")
        self.assertIsNone(store.get("session"))


class JSONFileStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name) / "data"
        self.store = JSONFileStore(self.directory)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_writes_one_file_per_key(self) -> None:
        self.store.set("historial", [{"id": "his_1"}])

        path = self.directory / "med_historial.json"
        self.assertTrue(path.exists())
        self.assertEqual(self.store.get("historial", []), [{"id": "his_1"}])
        self.assertEqual(list(self.directory.glob("*.tmp")), [])

    def test_missing_and_empty_files_return_fallback(self) -> None:
        self.assertEqual(self.store.get("users", []), [])
        self.directory.mkdir(parents=True)
        (self.directory / "med_users.json").write_text("  \n", encoding="utf-8")
        self.assertEqual(self.store.get("users", []), [])

    def test_corrupt_file_returns_fallback(self) -> None:
        self.directory.mkdir(parents=True)
        (self.directory / "med_doctors.json").write_text("[{", encoding="utf-8")
        self.assertEqual(self.store.get("doctors", ["fallback"]), ["fallback"])

    def test_delete_removes_file(self) -> None:
        self.store.set("session", {"id": "usr_1"})
        self.store.delete("session")
        self.store.delete("session")
        self.assertFalse((self.directory / "med_session.json").exists())

    def test_unserializable_value_raises_storage_error(self) -> None:
        with self.assertRaises(StorageError):
            self.store.set("users", {"when": object()})


if __name__ == "__main__":
    unittest.main()

import re
import unittest

from medicita.identifiers import generate_id


class GenerateIdTests(unittest.TestCase):
    def test_shape(self) -> None:
        record_id = generate_id("doc")
        self.assertRegex(record_id, re.compile(r"^doc_[0-9a-z]{1,6}[0-9]{4}$"))

    def test_deterministic_components(self) -> None:
        # 0.5 in base 36 is 0.i; the clock contributes its last four millisecond digits.
        record_id = generate_id("pac", rng=lambda: 0.5, clock=lambda: 1700000012.3456)
        self.assertEqual(record_id, "pac_i2345")

    def test_random_part_is_capped_at_six_digits(self) -> None:
        record_id = generate_id("cit", rng=lambda: 0.123456789, clock=lambda: 1.0)
        self.assertEqual(len(record_id), len("cit_") + 6 + 4)
        self.assertTrue(record_id.endswith("1000"))

    def test_ids_differ(self) -> None:
        ids = {generate_id("usr") for _ in range(200)}
        self.assertGreater(len(ids), 190)

    def test_prefix_required(self) -> None:
        with self.assertRaises(ValueError):
            generate_id("")


if __name__ == "__main__":
    unittest.main()

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config.settings import _csv, _flag, env  # noqa: E402


class EnvReaderTests(unittest.TestCase):
    def test_unset_or_blank_uses_default(self):
        with patch.dict(os.environ, {"CRITIQUE_TEST_VALUE": "  "}, clear=False):
            self.assertEqual(env("CRITIQUE_TEST_VALUE", 3, int), 3)
        self.assertEqual(env("CRITIQUE_TEST_UNSET_VALUE", 0.7, float), 0.7)

    def test_values_are_parsed(self):
        with patch.dict(os.environ, {"CRITIQUE_TEST_VALUE": " 0.5 "}, clear=False):
            self.assertEqual(env("CRITIQUE_TEST_VALUE", 0.7, float), 0.5)
        with patch.dict(os.environ, {"CRITIQUE_TEST_VALUE": "off"}, clear=False):
            self.assertFalse(env("CRITIQUE_TEST_VALUE", True, _flag))
        with patch.dict(os.environ, {"CRITIQUE_TEST_VALUE": "a.com, ,b.com"}, clear=False):
            self.assertEqual(env("CRITIQUE_TEST_VALUE", (), _csv), ("a.com", "b.com"))

    def test_invalid_value_is_fatal(self):
        with patch.dict(os.environ, {"CRITIQUE_TEST_VALUE": "lots"}, clear=False):
            with self.assertRaisesRegex(RuntimeError, "CRITIQUE_TEST_VALUE"):
                env("CRITIQUE_TEST_VALUE", 3, int)
            with self.assertRaises(RuntimeError):
                env("CRITIQUE_TEST_VALUE", True, _flag)
        with patch.dict(os.environ, {"CRITIQUE_TEST_VALUE": ", ,"}, clear=False):
            with self.assertRaises(RuntimeError):
                env("CRITIQUE_TEST_VALUE", (), _csv)


if __name__ == "__main__":
    unittest.main()

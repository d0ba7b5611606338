import unittest
from unittest import mock

from fastapi import HTTPException

from app.config import Settings
from app.core.security import check_api_key, load_api_keys


def settings_with(**overrides):
    return Settings(_env_file=None, **overrides)


class ApiKeyTest(unittest.TestCase):
    def _patch(self, **overrides):
        return mock.patch("app.core.security.get_settings", return_value=settings_with(**overrides))

    def test_open_when_no_keys_configured(self):
        with self._patch():
            self.assertFalse(check_api_key(None))
            self.assertFalse(check_api_key("anything"))

    def test_keys_from_both_settings(self):
        with self._patch(ADMIN_API_KEY="admin", API_KEYS="one, two,,"):
            self.assertEqual(load_api_keys(), {"admin", "one", "two"})

    def test_valid_key(self):
        with self._patch(API_KEYS="clinic-key"):
            self.assertTrue(check_api_key("clinic-key"))
            self.assertTrue(check_api_key(" clinic-key "))

    def test_wrong_or_missing_key_rejected(self):
        with self._patch(ADMIN_API_KEY="clinic-key"):
            for candidate in ("nope", "", None):
                with self.subTest(candidate=candidate):
                    with self.assertRaises(HTTPException) as ctx:
                        check_api_key(candidate)
                    self.assertEqual(ctx.exception.status_code, 401)


if __name__ == "__main__":
    unittest.main()

"""Unit tests for app.core.config: Settings validators."""

import unittest

from pydantic import ValidationError

from app.core.config import Settings


def _settings(**overrides: object) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettingsValidators(unittest.TestCase):
    def test_defaults(self) -> None:
        s = _settings(DATABASE_URL="postgresql://u:p@localhost:5432/db")
        self.assertEqual(s.JWT_EXPIRE_MINUTES, 60)
        self.assertEqual(s.JWT_ALGORITHM, "HS256")
        self.assertFalse(s.EXPORT_REQUIRES_ADMIN)

    def test_database_url_scheme(self) -> None:
        self.assertEqual(_settings(DATABASE_URL=" sqlite:///./dev.db ").DATABASE_URL, "sqlite:///./dev.db")
        self.assertEqual(
            _settings(DATABASE_URL="\tpostgresql://u:p@localhost/db\n").DATABASE_URL,
            "postgresql://u:p@localhost/db",
        )
        for bad in ("", "   ", "mysql://u:p@localhost/db"):
            with self.subTest(url=bad), self.assertRaises(ValidationError):
                _settings(DATABASE_URL=bad)

    def test_jwt_expire_minutes_bounds(self) -> None:
        for bad in (0, 10081):
            with self.subTest(minutes=bad), self.assertRaises(ValidationError):
                _settings(JWT_EXPIRE_MINUTES=bad)

    def test_jwt_secret_non_empty(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(JWT_SECRET="   ")

    def test_log_level_normalized(self) -> None:
        self.assertEqual(_settings(LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")
        with self.assertRaises(ValidationError):
            _settings(LOG_LEVEL="chatty")

    def test_graphql_path(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(GRAPHQL_PATH="graphql")

    def test_cors_origins_split(self) -> None:
        s = _settings(CORS_ORIGINS="http://a.test, ,http://b.test")
        self.assertEqual(s.cors_origins, ["http://a.test", "http://b.test"])

    def test_default_admin_email(self) -> None:
        with self.assertRaises(ValidationError):
            _settings(DEFAULT_ADMIN_EMAIL="admin")


if __name__ == "__main__":
    unittest.main()

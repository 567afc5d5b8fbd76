from __future__ import annotations

import logging
import os
import re
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from jobly_data import PostgresDialect, Settings, SQLiteDialect, open_database


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings()
        self.assertEqual(settings.database_url, "sqlite:///jobly.db")
        self.assertEqual(settings.pool_size, 5)
        self.assertEqual(settings.pool_timeout, 30.0)
        self.assertEqual(settings.log_level, "INFO")
        self.assertFalse(settings.log_sql)

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            Settings(pool_size=0)
        self.assertEqual(Settings(log_level="debug").log_level, "DEBUG")

    def test_from_env(self) -> None:
        env = {
            "JOBLY_DATABASE_URL": "postgresql://u:p@db/jobly",
            "JOBLY_POOL_SIZE": "3",
            "JOBLY_POOL_TIMEOUT": "none",
            "JOBLY_LOG_LEVEL": "warning",
            "JOBLY_LOG_SQL": "yes",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()

        self.assertEqual(settings.database_url, "postgresql://u:p@db/jobly")
        self.assertEqual(settings.pool_size, 3)
        self.assertIsNone(settings.pool_timeout)
        self.assertEqual(settings.log_level, "WARNING")
        self.assertTrue(settings.log_sql)

    def test_from_env_uses_defaults_when_unset(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(Settings.from_env(), Settings())

    def test_from_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            env_file = Path(tmp) / ".env"
            env_file.write_text(
                "JOBLY_DATABASE_URL=sqlite:///:memory:\nJOBLY_POOL_TIMEOUT=2.5\n",
                encoding="utf-8",
            )
            with mock.patch.dict(os.environ, {"JOBLY_POOL_TIMEOUT": "7"}, clear=True):
                settings = Settings.from_env(env_file)

        self.assertEqual(settings.database_url, "sqlite:///:memory:")
        self.assertEqual(settings.pool_timeout, 7.0)

    def test_setup_logging(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        self.addCleanup(setattr, root, "level", saved_level)
        self.addCleanup(root.handlers.extend, saved_handlers)
        self.addCleanup(root.handlers.clear)

        Settings(log_level="debug").setup_logging()

        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)


class OpenDatabaseTests(unittest.TestCase):
    def test_sqlite_memory(self) -> None:
        db = open_database(Settings(database_url="sqlite:///:memory:", pool_size=4))
        self.addCleanup(db.close, close_pool=True)

        self.assertIsInstance(db.dialect, SQLiteDialect)
        db.execute('CREATE TABLE "t" ("id" INTEGER)')
        db.execute('INSERT INTO "t" ("id") VALUES (?1)', (1,))
        self.assertEqual(db.fetchall('SELECT "id" FROM "t"'), [{"id": 1}])

    def test_sqlite_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            url = f"sqlite:///{Path(tmp) / 'jobly.db'}"
            db = open_database(Settings(database_url=url, pool_size=2, log_sql=True))
            try:
                with self.assertLogs("jobly_data.ports.db_api.database", level="DEBUG"):
                    db.execute('CREATE TABLE "t" ("id" INTEGER)')
                with db.transaction():
                    db.execute('INSERT INTO "t" ("id") VALUES (?1)', (5,))
                self.assertEqual(db.fetchone('SELECT "id" FROM "t"'), {"id": 5})
            finally:
                db.close(close_pool=True)

    def test_postgres_url_binds_dollar_placeholders_with_raw_cursor(self) -> None:
        fake_psycopg = mock.Mock(name="psycopg")
        fake_psycopg.connect.return_value.cursor.return_value.fetchall.return_value = []
        url = "postgresql://u:p@db/jobly"

        with mock.patch.dict(sys.modules, {"psycopg": fake_psycopg}):
            db = open_database(Settings(database_url=url, pool_size=2))
            self.addCleanup(db.close, close_pool=True)
            db.fetchall("SELECT 1")

        self.assertIsInstance(db.dialect, PostgresDialect)
        fake_psycopg.connect.assert_called_once_with(
            url, cursor_factory=fake_psycopg.RawCursor
        )

    def test_postgres_extras_require_raw_cursor_release(self) -> None:
        pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
        floors = re.findall(
            r'"psycopg\[binary\]>=(\d+)\.(\d+)', pyproject.read_text(encoding="utf-8")
        )

        self.assertTrue(floors)
        for major, minor in floors:
            # RawCursor first shipped in psycopg 3.2.
            self.assertGreaterEqual((int(major), int(minor)), (3, 2))

    def test_unsupported_urls(self) -> None:
        for url in ("mysql://localhost/jobly", "sqlite://relative.db"):
            with self.subTest(url=url):
                with self.assertRaises(ValueError):
                    open_database(Settings(database_url=url))


if __name__ == "__main__":
    unittest.main()

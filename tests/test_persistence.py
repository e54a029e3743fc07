# tests/test_persistence.py
import os
import tempfile
import unittest
from unittest import mock

from acaishop.data import database


class PersistenceModeTests(unittest.TestCase):
    """database, local and auto modes pick the engine."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.local_path = os.path.join(self.tmp, "offline", "local.db")

    def test_unknown_mode_is_rejected(self):
        with self.assertRaises(ValueError):
            database.resolve_persistence("cloud")

    def test_local_mode_uses_sqlite_file(self):
        with mock.patch.object(database.settings, "LOCAL_DATABASE_PATH", self.local_path):
            mode, engine = database.resolve_persistence("local")
        self.assertEqual(mode, "local")
        self.assertEqual(engine.url.database, self.local_path)
        engine.dispose()

    def test_auto_falls_back_to_local_when_database_is_down(self):
        with mock.patch.object(database.settings, "LOCAL_DATABASE_PATH", self.local_path), \
                mock.patch.object(database, "_database_reachable", return_value=False):
            mode, engine = database.resolve_persistence("auto")
        self.assertEqual(mode, "local")
        engine.dispose()

    def test_auto_prefers_the_database(self):
        with mock.patch.object(database, "_database_reachable", return_value=True):
            mode, engine = database.resolve_persistence("auto")
        self.assertEqual(mode, "database")
        self.assertEqual(str(engine.url), database.settings.DATABASE_URL)
        engine.dispose()

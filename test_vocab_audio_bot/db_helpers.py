import os
import tempfile
import unittest
from unittest import mock

from vocab_audio_bot import config


class TempDatabaseMixin:
    """Trỏ config.DB_PATH tới một file SQLite tạm cho mỗi test."""

    def setUp(self):
        super().setUp()
        self._tmp_dir = tempfile.TemporaryDirectory()
        self.tmp_path = self._tmp_dir.name
        self.db_path = os.path.join(self.tmp_path, "library.db")
        patcher = mock.patch.object(config, "DB_PATH", self.db_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp_dir.cleanup)


class TempDatabaseTestCase(TempDatabaseMixin, unittest.TestCase):
    pass


class AsyncTempDatabaseTestCase(TempDatabaseMixin, unittest.IsolatedAsyncioTestCase):
    pass

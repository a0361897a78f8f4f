import os
import unittest
from unittest import mock

from telegram.ext import CallbackContext

from vocab_audio_bot.database.query_track import add_track, get_track, get_track_count
from vocab_audio_bot.database.query_feedback import SCORE_DISLIKE, set_feedback
from vocab_audio_bot.jobs import run_library_maintenance_job, run_library_startup_job

from test_vocab_audio_bot.db_helpers import AsyncTempDatabaseTestCase
from test_vocab_audio_bot.test_library_service import FakeRenderer, make_library


def make_job_context(audio_library):
    context = mock.MagicMock(spec=CallbackContext)
    context.bot_data = {"audio_library": audio_library}
    return context


class TestLibraryJobs(AsyncTempDatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.audio_dir = os.path.join(self.tmp_path, "audio")

    async def test_startup_job_only_tops_up(self):
        audio_library = mock.MagicMock()
        audio_library.ensure_library_size = mock.AsyncMock(return_value=3)
        audio_library.cleanup_low_score_tracks = mock.AsyncMock()
        audio_library.run_maintenance = mock.AsyncMock()

        await run_library_startup_job(make_job_context(audio_library))

        audio_library.ensure_library_size.assert_awaited_once()
        audio_library.cleanup_low_score_tracks.assert_not_awaited()
        audio_library.run_maintenance.assert_not_awaited()

    async def test_low_score_track_survives_startup_but_not_maintenance(self):
        audio_library = make_library(self.audio_dir, target_size=2, low_score_threshold=0)
        disliked_id = add_track(FakeRenderer().render([], 2, 1.5, self.audio_dir), [{"source": "a", "target": "b"}])
        set_feedback(1, disliked_id, SCORE_DISLIKE)
        context = make_job_context(audio_library)

        await run_library_startup_job(context)

        self.assertIsNotNone(get_track(disliked_id))
        self.assertEqual(get_track_count(), 2)

        await run_library_maintenance_job(context)

        self.assertIsNone(get_track(disliked_id))
        self.assertEqual(get_track_count(), 2)

    async def test_maintenance_failure_is_logged_not_raised(self):
        audio_library = mock.MagicMock()
        audio_library.run_maintenance = mock.AsyncMock(side_effect=RuntimeError("tts quota exceeded"))

        with self.assertLogs("vocab_audio_bot.jobs", level="ERROR") as logs:
            await run_library_maintenance_job(make_job_context(audio_library))

        audio_library.run_maintenance.assert_awaited_once()
        self.assertIn("tts quota exceeded", "\n".join(logs.output))

    async def test_startup_failure_is_logged_not_raised(self):
        audio_library = mock.MagicMock()
        audio_library.ensure_library_size = mock.AsyncMock(side_effect=RuntimeError("gemini down"))

        with self.assertLogs("vocab_audio_bot.jobs", level="ERROR") as logs:
            await run_library_startup_job(make_job_context(audio_library))

        self.assertIn("gemini down", "\n".join(logs.output))

    async def test_missing_library_is_logged(self):
        context = mock.MagicMock(spec=CallbackContext)
        context.bot_data = {}

        with self.assertLogs("vocab_audio_bot.jobs", level="ERROR"):
            await run_library_maintenance_job(context)


if __name__ == "__main__":
    unittest.main()

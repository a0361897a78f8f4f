import os
import tempfile
import unittest
from unittest import mock

from vocab_audio_bot.services.audio_service import convert_mp3_bytes_to_ogg, remove_file_quietly
from vocab_audio_bot.utils.exceptions import ExternalServiceError


class TestConvertMp3BytesToOgg(unittest.TestCase):
    def setUp(self):
        self._tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp_dir.cleanup)
        self.output_dir = self._tmp_dir.name

    @mock.patch("vocab_audio_bot.services.audio_service.AudioSegment")
    def test_success_removes_temp_mp3(self, mock_segment_cls):
        segment = mock_segment_cls.from_file.return_value

        ogg_path = convert_mp3_bytes_to_ogg(b"mp3", self.output_dir)

        self.assertTrue(ogg_path.endswith(".ogg"))
        self.assertEqual(os.path.dirname(ogg_path), self.output_dir)
        export_kwargs = segment.export.call_args[1]
        self.assertEqual(export_kwargs["codec"], "libopus")
        self.assertEqual(export_kwargs["bitrate"], "48k")
        self.assertEqual([f for f in os.listdir(self.output_dir) if f.endswith(".mp3")], [])

    @mock.patch("vocab_audio_bot.services.audio_service.AudioSegment")
    def test_failure_raises_and_cleans_up(self, mock_segment_cls):
        mock_segment_cls.from_file.side_effect = RuntimeError("ffmpeg not found")

        with self.assertRaises(ExternalServiceError):
            convert_mp3_bytes_to_ogg(b"mp3", self.output_dir)
        self.assertEqual(os.listdir(self.output_dir), [])

    @mock.patch("vocab_audio_bot.services.audio_service.AudioSegment")
    def test_output_names_are_unique(self, mock_segment_cls):
        first = convert_mp3_bytes_to_ogg(b"mp3", self.output_dir)
        second = convert_mp3_bytes_to_ogg(b"mp3", self.output_dir)

        self.assertNotEqual(first, second)


class TestRemoveFileQuietly(unittest.TestCase):
    def test_missing_file_returns_false(self):
        self.assertFalse(remove_file_quietly(None))
        self.assertFalse(remove_file_quietly("/nonexistent/path/file.ogg"))

    def test_existing_file_removed(self):
        with tempfile.NamedTemporaryFile(delete=False) as f:
            path = f.name

        self.assertTrue(remove_file_quietly(path))
        self.assertFalse(os.path.exists(path))


if __name__ == "__main__":
    unittest.main()

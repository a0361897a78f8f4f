import unittest
from unittest import mock

from vocab_audio_bot import config
from vocab_audio_bot.utils.exceptions import ValidationError


class TestParseAllowedUsers(unittest.TestCase):
    def test_invalid_entries_skipped(self):
        self.assertEqual(config.parse_allowed_users("1, 2,abc,, 3"), [1, 2, 3])

    def test_empty_means_unrestricted(self):
        self.assertEqual(config.parse_allowed_users(""), [])
        self.assertEqual(config.parse_allowed_users(None), [])


class TestValidateConfig(unittest.TestCase):
    def test_missing_required_variables_raise(self):
        with mock.patch.object(config, "BOT_TOKEN", ""), mock.patch.object(config, "GEMINI_API_KEY", ""):
            with self.assertRaises(ValidationError) as ctx:
                config.validate_config()
        self.assertIn("BOT_TOKEN", str(ctx.exception))
        self.assertIn("GEMINI_API_KEY", str(ctx.exception))

    def test_valid_configuration_passes(self):
        with mock.patch.object(config, "BOT_TOKEN", "123:abcd"), mock.patch.object(config, "GEMINI_API_KEY", "key"):
            config.validate_config()


class TestEnvParsing(unittest.TestCase):
    def test_float_accepts_seconds_suffix(self):
        with mock.patch.dict("os.environ", {"PAUSE_TEST": "1.5s"}):
            self.assertEqual(config._env_float("PAUSE_TEST", 2), 1.5)

    def test_bad_int_falls_back_to_default(self):
        with mock.patch.dict("os.environ", {"ITEMS_TEST": "lots"}):
            self.assertEqual(config._env_int("ITEMS_TEST", 20), 20)


if __name__ == "__main__":
    unittest.main()

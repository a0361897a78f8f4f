import unittest

from vocab_audio_bot import config
from vocab_audio_bot.services.recent_words_service import RecentWordsStore
from vocab_audio_bot.services.settings_service import ChatSettingsStore, clamp


class TestChatSettingsStore(unittest.TestCase):
    def setUp(self):
        self.store = ChatSettingsStore(
            {"pause_think": 2, "pause_between": 1.5, "items_per_track": 20},
            {"pause_think": (1, 10), "pause_between": (1, 10), "items_per_track": (5, 50)},
        )

    def test_defaults_created_lazily(self):
        self.assertEqual(self.store.get(1), {"pause_think": 2, "pause_between": 1.5, "items_per_track": 20})

    def test_get_returns_copy(self):
        self.store.get(1)["pause_think"] = 99

        self.assertEqual(self.store.get(1)["pause_think"], 2)

    def test_pause_think_clamped_at_both_ends(self):
        for _ in range(20):
            self.store.adjust_pause_think(1, 1)
        self.assertEqual(self.store.get(1)["pause_think"], 10)
        self.assertEqual(self.store.adjust_pause_think(1, 1), 10)

        for _ in range(20):
            self.store.adjust_pause_think(1, -1)
        self.assertEqual(self.store.get(1)["pause_think"], 1)
        self.assertEqual(self.store.adjust_pause_think(1, -1), 1)

    def test_pause_between_decrement_clamps_at_minimum(self):
        self.assertEqual(self.store.adjust_pause_between(1, -1), 1)
        self.assertEqual(self.store.adjust_pause_between(1, -1), 1)

    def test_items_step_and_limits(self):
        self.assertEqual(self.store.adjust_items(1, 5), 25)
        self.assertEqual(self.store.adjust_items(1, 100), 50)
        self.assertEqual(self.store.adjust_items(1, -100), 5)

    def test_settings_are_per_chat(self):
        self.store.adjust_items(1, 5)

        self.assertEqual(self.store.get(2)["items_per_track"], 20)

    def test_clamp(self):
        self.assertEqual(clamp(0, 1, 10), 1)
        self.assertEqual(clamp(11, 1, 10), 10)
        self.assertEqual(clamp(5, 1, 10), 5)

    def test_config_defaults_within_limits(self):
        for key, (lower, upper) in config.SETTINGS_LIMITS.items():
            self.assertTrue(lower <= config.SETTINGS_DEFAULTS[key] <= upper, key)


class TestRecentWordsStore(unittest.TestCase):
    def test_words_normalized(self):
        store = RecentWordsStore(max_recent=10)

        store.add_many(1, ["  Casa ", "", "   ", "PERRO"])

        self.assertEqual(store.get_recent(1), ["casa", "perro"])

    def test_window_keeps_newest(self):
        store = RecentWordsStore(max_recent=3)

        store.add_many(1, ["a", "b"])
        store.add_many(1, ["c", "d"])

        self.assertEqual(store.get_recent(1), ["b", "c", "d"])
        self.assertEqual(store.get_recent(1, count=2), ["c", "d"])

    def test_unknown_chat_is_empty(self):
        self.assertEqual(RecentWordsStore().get_recent(42), [])


if __name__ == "__main__":
    unittest.main()

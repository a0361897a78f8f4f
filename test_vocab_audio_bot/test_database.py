import os
import sqlite3
import unittest
from concurrent.futures import ThreadPoolExecutor

from vocab_audio_bot.database.connection import database_connect
from vocab_audio_bot.database.query_track import (
    add_track,
    delete_track,
    get_all_tracks,
    get_track,
    get_track_count,
)
from vocab_audio_bot.database.query_history import (
    clear_listen_history,
    get_listened_track_ids,
    get_next_unlistened_track,
    get_oldest_listened_track,
    mark_listened,
)
from vocab_audio_bot.database.query_feedback import (
    SCORE_DISLIKE,
    SCORE_LIKE,
    get_aggregate_score,
    get_feedback_summary,
    get_tracks_below_score,
    set_feedback,
)
from vocab_audio_bot.utils.exceptions import DatabaseError, ValidationError

from test_vocab_audio_bot.db_helpers import TempDatabaseTestCase

PAIRS = [{"source": "casa", "target": "дом"}, {"source": "perro", "target": "собака"}]


class TestTrackQueries(TempDatabaseTestCase):
    def test_add_track_assigns_increasing_ids(self):
        first = add_track("/audio/a.ogg", PAIRS)
        second = add_track("/audio/b.ogg", PAIRS)

        self.assertLess(first, second)
        self.assertEqual(get_track_count(), 2)

    def test_get_track_decodes_pairs(self):
        track_id = add_track("/audio/a.ogg", PAIRS)

        track = get_track(track_id)

        self.assertEqual(track["file_path"], "/audio/a.ogg")
        self.assertEqual(track["pairs"], PAIRS)
        self.assertNotIn("pairs_json", track)
        self.assertIsNotNone(track["created_at"])

    def test_get_track_missing_returns_none(self):
        self.assertIsNone(get_track(12345))

    def test_duplicate_file_path_raises_database_error(self):
        add_track("/audio/a.ogg", PAIRS)

        with self.assertRaises(DatabaseError):
            add_track("/audio/a.ogg", PAIRS)
        self.assertEqual(get_track_count(), 1)

    def test_get_all_tracks_ordered_by_id(self):
        ids = [add_track(f"/audio/{name}.ogg", PAIRS) for name in ("c", "a", "b")]

        self.assertEqual([track["track_id"] for track in get_all_tracks()], ids)

    def test_delete_track_reports_whether_row_existed(self):
        track_id = add_track("/audio/a.ogg", PAIRS)

        self.assertTrue(delete_track(track_id))
        self.assertFalse(delete_track(track_id))
        self.assertEqual(get_track_count(), 0)

    def test_connection_enables_foreign_keys(self):
        conn = database_connect()
        try:
            self.assertEqual(conn.execute("PRAGMA foreign_keys;").fetchone()[0], 1)
        finally:
            conn.close()


class TestSchemaBootstrap(TempDatabaseTestCase):
    def test_existing_empty_file_gets_schema(self):
        open(self.db_path, "wb").close()

        self.assertEqual(get_track_count(), 0)
        track_id = add_track("/audio/a.ogg", PAIRS)
        self.assertEqual(get_track(track_id)["pairs"], PAIRS)

    def test_concurrent_first_connections_all_see_tables(self):
        for round_number in range(5):
            db_path = os.path.join(self.tmp_path, f"fresh-{round_number}.db")

            def count_tracks(_):
                conn = database_connect(db_path)
                try:
                    return conn.execute("SELECT COUNT(*) FROM audio_tracks").fetchone()[0]
                finally:
                    conn.close()

            with ThreadPoolExecutor(max_workers=8) as pool:
                counts = list(pool.map(count_tracks, range(8)))

            self.assertEqual(counts, [0] * 8)


class TestListenHistoryQueries(TempDatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.track_ids = [add_track(f"/audio/{i}.ogg", PAIRS) for i in range(3)]

    def test_next_unlistened_is_lowest_id(self):
        mark_listened(1, self.track_ids[0], listened_at=100)

        track = get_next_unlistened_track(1)

        self.assertEqual(track["track_id"], self.track_ids[1])

    def test_history_is_per_chat(self):
        mark_listened(1, self.track_ids[0], listened_at=100)

        self.assertEqual(get_next_unlistened_track(2)["track_id"], self.track_ids[0])
        self.assertEqual(get_listened_track_ids(2), [])

    def test_mark_listened_twice_keeps_single_row(self):
        mark_listened(1, self.track_ids[0], listened_at=100)
        mark_listened(1, self.track_ids[0], listened_at=500)

        self.assertEqual(get_listened_track_ids(1), [self.track_ids[0]])

    def test_oldest_listened_uses_timestamp(self):
        mark_listened(1, self.track_ids[2], listened_at=100)
        mark_listened(1, self.track_ids[0], listened_at=300)
        mark_listened(1, self.track_ids[1], listened_at=200)

        self.assertEqual(get_oldest_listened_track(1)["track_id"], self.track_ids[2])

    def test_clear_listen_history_returns_count(self):
        mark_listened(1, self.track_ids[0], listened_at=100)
        mark_listened(1, self.track_ids[1], listened_at=200)
        mark_listened(2, self.track_ids[1], listened_at=200)

        self.assertEqual(clear_listen_history(1), 2)
        self.assertEqual(get_listened_track_ids(1), [])
        self.assertEqual(get_listened_track_ids(2), [self.track_ids[1]])

    def test_mark_listened_unknown_track_raises(self):
        with self.assertRaises(DatabaseError):
            mark_listened(1, 9999)


class TestFeedbackQueries(TempDatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.track_id = add_track("/audio/a.ogg", PAIRS)

    def test_feedback_upsert_keeps_latest_vote(self):
        set_feedback(7, self.track_id, SCORE_DISLIKE)
        set_feedback(7, self.track_id, SCORE_LIKE)

        self.assertEqual(get_aggregate_score(self.track_id), 1)
        self.assertEqual(get_feedback_summary(self.track_id), {"likes": 1, "dislikes": 0})

    def test_invalid_score_rejected(self):
        with self.assertRaises(ValidationError):
            set_feedback(7, self.track_id, 2)

    def test_track_without_feedback_scores_zero(self):
        self.assertEqual(get_aggregate_score(self.track_id), 0)
        self.assertEqual(get_tracks_below_score(0), [])
        self.assertEqual([t["track_id"] for t in get_tracks_below_score(1)], [self.track_id])

    def test_delete_track_cascades_to_history_and_feedback(self):
        set_feedback(7, self.track_id, SCORE_LIKE)
        mark_listened(7, self.track_id, listened_at=100)

        delete_track(self.track_id)

        conn = sqlite3.connect(self.db_path)
        try:
            feedback_rows = conn.execute("SELECT COUNT(*) FROM track_feedback").fetchone()[0]
            history_rows = conn.execute("SELECT COUNT(*) FROM listen_history").fetchone()[0]
        finally:
            conn.close()
        self.assertEqual(feedback_rows, 0)
        self.assertEqual(history_rows, 0)


if __name__ == "__main__":
    unittest.main()

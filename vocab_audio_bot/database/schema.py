# File: vocab-audio-bot/vocab_audio_bot/database/schema.py
"""
Module định nghĩa schema cho database thư viện audio.
Gồm 3 bảng: audio_tracks (bài nghe), listen_history (lịch sử nghe theo chat)
và track_feedback (đánh giá like/dislike theo chat).
"""
import logging

logger = logging.getLogger(__name__)

def database_initialize(conn):
    """
    Khởi tạo cấu trúc (schema) cho cơ sở dữ liệu.
    Các bảng phụ thuộc dùng ON DELETE CASCADE nên khi xóa một bài nghe,
    lịch sử nghe và đánh giá của bài đó cũng bị xóa theo.

    Args:
        conn: Đối tượng kết nối sqlite3.Connection.
    """
    logger.debug("Đang khởi tạo các bảng và index cho database...")
    with conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS audio_tracks (
                track_id INTEGER PRIMARY KEY AUTOINCREMENT,
                file_path TEXT NOT NULL UNIQUE,
                pairs_json TEXT NOT NULL,
                created_at INTEGER NOT NULL DEFAULT (strftime('%s', 'now'))
            );
        ''')
        logger.debug("Đã tạo/kiểm tra bảng audio_tracks.")

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS listen_history (
                history_id INTEGER PRIMARY KEY AUTOINCREMENT,
                chat_id INTEGER NOT NULL,
                track_id INTEGER NOT NULL,
                listened_at INTEGER NOT NULL DEFAULT (strftime('%s', 'now')),
                FOREIGN KEY (track_id) REFERENCES audio_tracks(track_id) ON DELETE CASCADE,
                UNIQUE (chat_id, track_id)
            );
        ''')
        logger.debug("Đã tạo/kiểm tra bảng listen_history.")

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS track_feedback (
                feedback_id INTEGER PRIMARY KEY AUTOINCREMENT,
                chat_id INTEGER NOT NULL,
                track_id INTEGER NOT NULL,
                score INTEGER NOT NULL CHECK (score IN (-1, 1)),
                created_at INTEGER NOT NULL DEFAULT (strftime('%s', 'now')),
                FOREIGN KEY (track_id) REFERENCES audio_tracks(track_id) ON DELETE CASCADE,
                UNIQUE (chat_id, track_id)
            );
        ''')
        logger.debug("Đã tạo/kiểm tra bảng track_feedback.")

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_listen_history_chat ON listen_history(chat_id);")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_track_feedback_track ON track_feedback(track_id);")
        logger.debug("Đã tạo/kiểm tra các index.")
    logger.debug("Khởi tạo schema hoàn tất.")

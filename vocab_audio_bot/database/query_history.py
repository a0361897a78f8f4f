"""
Module chứa các hàm truy vấn lịch sử nghe (bảng listen_history).
Mỗi cặp (chat_id, track_id) có tối đa một bản ghi; nghe lại chỉ cập nhật thời điểm.
"""
import time
import sqlite3
import logging
from vocab_audio_bot.database.connection import database_connect
from vocab_audio_bot.database.query_track import TRACK_COLUMNS, row_to_track
from vocab_audio_bot.utils.exceptions import DatabaseError
logger = logging.getLogger(__name__)

def mark_listened(chat_id, track_id, listened_at=None, conn=None):
    """
    Ghi nhận chat đã nghe bài. Nếu đã có bản ghi thì thay thế (timestamp mới).
    INSERT OR REPLACE cấp lại history_id nên thứ tự history_id phản ánh lần nghe gần nhất.
    """
    log_prefix = f"[MARK_LISTENED|Chat:{chat_id}|Track:{track_id}]"
    internal_conn = None
    listened_at = int(time.time()) if listened_at is None else int(listened_at)
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO listen_history (chat_id, track_id, listened_at) VALUES (?, ?, ?)",
                (chat_id, track_id, listened_at)
            )
        logger.debug(f"{log_prefix} Đã ghi nhận lượt nghe lúc {listened_at}.")
    except sqlite3.Error as e:
        logger.error(f"{log_prefix} Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi ghi nhận lượt nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_listened_track_ids(chat_id, conn=None):
    """Trả về danh sách track_id mà chat đã nghe trong vòng hiện tại."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        rows = conn.execute(
            "SELECT track_id FROM listen_history WHERE chat_id = ? ORDER BY track_id",
            (chat_id,)
        ).fetchall()
        return [row[0] for row in rows]
    except sqlite3.Error as e:
        logger.error(f"[GET_LISTENED_IDS|Chat:{chat_id}] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi lấy lịch sử nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_next_unlistened_track(chat_id, conn=None):
    """Bài có track_id nhỏ nhất mà chat chưa nghe, hoặc None."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        query = f"""
            SELECT {TRACK_COLUMNS}
            FROM audio_tracks t
            LEFT JOIN listen_history h ON t.track_id = h.track_id AND h.chat_id = ?
            WHERE h.history_id IS NULL
            ORDER BY t.track_id
            LIMIT 1
        """
        row = conn.execute(query, (chat_id,)).fetchone()
        return row_to_track(row)
    except sqlite3.Error as e:
        logger.error(f"[GET_NEXT_UNLISTENED|Chat:{chat_id}] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi tìm bài chưa nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_oldest_listened_track(chat_id, conn=None):
    """Bài mà chat đã nghe lâu nhất (listened_at nhỏ nhất, hòa thì history_id nhỏ hơn), hoặc None."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        query = f"""
            SELECT {TRACK_COLUMNS}
            FROM audio_tracks t
            INNER JOIN listen_history h ON t.track_id = h.track_id AND h.chat_id = ?
            ORDER BY h.listened_at ASC, h.history_id ASC
            LIMIT 1
        """
        row = conn.execute(query, (chat_id,)).fetchone()
        return row_to_track(row)
    except sqlite3.Error as e:
        logger.error(f"[GET_OLDEST_LISTENED|Chat:{chat_id}] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi tìm bài nghe lâu nhất.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def clear_listen_history(chat_id, conn=None):
    """Xóa toàn bộ lịch sử nghe của một chat (bắt đầu vòng mới). Trả về số dòng đã xóa."""
    log_prefix = f"[CLEAR_HISTORY|Chat:{chat_id}]"
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        with conn:
            cursor = conn.execute("DELETE FROM listen_history WHERE chat_id = ?", (chat_id,))
        logger.info(f"{log_prefix} Đã xóa {cursor.rowcount} bản ghi lịch sử nghe.")
        return cursor.rowcount
    except sqlite3.Error as e:
        logger.error(f"{log_prefix} Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi xóa lịch sử nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

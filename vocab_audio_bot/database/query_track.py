"""
Module chứa các hàm truy vấn dữ liệu liên quan trực tiếp đến bảng audio_tracks.
Mỗi hàm nhận tham số conn tùy chọn; nếu không truyền, hàm tự mở và đóng kết nối.
"""
import json
import sqlite3
import logging
from vocab_audio_bot.database.connection import database_connect
from vocab_audio_bot.utils.exceptions import DatabaseError
logger = logging.getLogger(__name__)

TRACK_COLUMNS = "t.track_id, t.file_path, t.pairs_json, t.created_at"

def row_to_track(row):
    """Chuyển một dòng audio_tracks thành dict bài nghe (giải mã pairs_json)."""
    if row is None:
        return None
    track = dict(row)
    pairs_json = track.pop('pairs_json', None) or "[]"
    try:
        track['pairs'] = json.loads(pairs_json)
    except (TypeError, ValueError) as e:
        logger.error(f"[ROW_TO_TRACK|Track:{track.get('track_id')}] pairs_json hỏng: {e}")
        track['pairs'] = []
    return track

def add_track(file_path, pairs, conn=None):
    """
    Thêm một bài nghe mới vào thư viện.
    Args:
        file_path (str): Đường dẫn file audio (duy nhất).
        pairs (list): Danh sách cặp từ dạng {'source': ..., 'target': ...}.
        conn (sqlite3.Connection): Kết nối DB có sẵn (tùy chọn).
    Returns:
        int: track_id vừa được cấp (tăng dần).
    Raises:
        DatabaseError: Nếu có lỗi SQLite (kể cả trùng file_path).
    """
    log_prefix = "[ADD_TRACK]"
    internal_conn = None
    pairs_data = [{'source': p['source'], 'target': p['target']} for p in pairs]
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        with conn:
            cursor = conn.execute(
                "INSERT INTO audio_tracks (file_path, pairs_json) VALUES (?, ?)",
                (file_path, json.dumps(pairs_data, ensure_ascii=False))
            )
        track_id = cursor.lastrowid
        logger.info(f"{log_prefix} Đã thêm bài nghe ID {track_id} ({len(pairs_data)} cặp từ): {file_path}")
        return track_id
    except sqlite3.Error as e:
        logger.error(f"{log_prefix} Lỗi SQLite khi thêm bài nghe '{file_path}': {e}")
        raise DatabaseError("Lỗi SQLite khi thêm bài nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_track(track_id, conn=None):
    """Lấy một bài nghe theo ID. Trả về dict hoặc None nếu không tồn tại."""
    log_prefix = f"[GET_TRACK|Track:{track_id}]"
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        row = conn.execute(
            f"SELECT {TRACK_COLUMNS} FROM audio_tracks t WHERE t.track_id = ?",
            (track_id,)
        ).fetchone()
        if row is None:
            logger.debug(f"{log_prefix} Không tìm thấy bài nghe.")
        return row_to_track(row)
    except sqlite3.Error as e:
        logger.error(f"{log_prefix} Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi lấy bài nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_all_tracks(conn=None):
    """Lấy toàn bộ bài nghe, sắp xếp theo track_id tăng dần."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        rows = conn.execute(
            f"SELECT {TRACK_COLUMNS} FROM audio_tracks t ORDER BY t.track_id"
        ).fetchall()
        return [row_to_track(row) for row in rows]
    except sqlite3.Error as e:
        logger.error(f"[GET_ALL_TRACKS] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi lấy danh sách bài nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_track_count(conn=None):
    """Đếm số bài nghe hiện có trong thư viện."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        row = conn.execute("SELECT COUNT(*) FROM audio_tracks").fetchone()
        return row[0] if row else 0
    except sqlite3.Error as e:
        logger.error(f"[GET_TRACK_COUNT] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi đếm bài nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def delete_track(track_id, conn=None):
    """
    Xóa một bài nghe. Lịch sử nghe và đánh giá của bài bị xóa theo (CASCADE).
    File audio trên đĩa KHÔNG bị xóa ở đây; việc đó thuộc về tầng service.
    Returns:
        bool: True nếu có bản ghi bị xóa.
    """
    log_prefix = f"[DELETE_TRACK|Track:{track_id}]"
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        with conn:
            cursor = conn.execute("DELETE FROM audio_tracks WHERE track_id = ?", (track_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"{log_prefix} Đã xóa bài nghe (kèm lịch sử nghe và đánh giá).")
        else:
            logger.warning(f"{log_prefix} Không có bài nghe nào để xóa.")
        return deleted
    except sqlite3.Error as e:
        logger.error(f"{log_prefix} Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi xóa bài nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

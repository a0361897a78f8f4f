"""
Module chứa các hàm truy vấn đánh giá bài nghe (bảng track_feedback).
Mỗi chat chỉ có một phiếu cho mỗi bài: phiếu sau ghi đè phiếu trước.
Điểm tổng của bài là tổng điểm của mọi chat.
"""
import sqlite3
import logging
from vocab_audio_bot.database.connection import database_connect
from vocab_audio_bot.database.query_track import TRACK_COLUMNS, row_to_track
from vocab_audio_bot.utils.exceptions import DatabaseError, ValidationError
logger = logging.getLogger(__name__)

SCORE_LIKE = 1
SCORE_DISLIKE = -1

def set_feedback(chat_id, track_id, score, conn=None):
    """
    Ghi (hoặc ghi đè) đánh giá của chat cho bài nghe.
    Args:
        score (int): +1 (like) hoặc -1 (dislike).
    Raises:
        ValidationError: Nếu score không phải +1/-1.
        DatabaseError: Nếu có lỗi SQLite (vd: track_id không tồn tại).
    """
    log_prefix = f"[SET_FEEDBACK|Chat:{chat_id}|Track:{track_id}]"
    if score not in (SCORE_LIKE, SCORE_DISLIKE):
        raise ValidationError(field_name="score", details=f"Giá trị {score!r} không hợp lệ, chỉ chấp nhận +1 hoặc -1.")
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO track_feedback (chat_id, track_id, score) VALUES (?, ?, ?)",
                (chat_id, track_id, score)
            )
        logger.info(f"{log_prefix} Đã ghi nhận đánh giá {score:+d}.")
    except sqlite3.Error as e:
        logger.error(f"{log_prefix} Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi ghi đánh giá.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_aggregate_score(track_id, conn=None):
    """Tổng điểm đánh giá của một bài (0 nếu chưa có đánh giá nào)."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        row = conn.execute(
            "SELECT COALESCE(SUM(score), 0) FROM track_feedback WHERE track_id = ?",
            (track_id,)
        ).fetchone()
        return row[0] if row else 0
    except sqlite3.Error as e:
        logger.error(f"[GET_SCORE|Track:{track_id}] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi tính điểm bài nghe.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_feedback_summary(track_id, conn=None):
    """Trả về dict {'likes': n, 'dislikes': m} cho một bài."""
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        row = conn.execute(
            """
            SELECT COALESCE(SUM(CASE WHEN score > 0 THEN 1 ELSE 0 END), 0) AS likes,
                   COALESCE(SUM(CASE WHEN score < 0 THEN 1 ELSE 0 END), 0) AS dislikes
            FROM track_feedback WHERE track_id = ?
            """,
            (track_id,)
        ).fetchone()
        return {'likes': row['likes'], 'dislikes': row['dislikes']}
    except sqlite3.Error as e:
        logger.error(f"[GET_FEEDBACK_SUMMARY|Track:{track_id}] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi lấy thống kê đánh giá.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

def get_tracks_below_score(threshold, conn=None):
    """
    Lấy các bài có tổng điểm nhỏ hơn hẳn threshold.
    Bài chưa có đánh giá được tính là 0 điểm.
    """
    internal_conn = None
    try:
        if conn is None:
            internal_conn = database_connect()
            if internal_conn is None:
                raise DatabaseError("Không thể tạo kết nối database nội bộ.")
            conn = internal_conn
        query = f"""
            SELECT {TRACK_COLUMNS}, COALESCE(SUM(f.score), 0) AS total_score
            FROM audio_tracks t
            LEFT JOIN track_feedback f ON t.track_id = f.track_id
            GROUP BY t.track_id
            HAVING total_score < ?
            ORDER BY t.track_id
        """
        rows = conn.execute(query, (threshold,)).fetchall()
        tracks = []
        for row in rows:
            track = row_to_track(row)
            tracks.append(track)
        logger.debug(f"[GET_TRACKS_BELOW_SCORE] {len(tracks)} bài có điểm < {threshold}.")
        return tracks
    except sqlite3.Error as e:
        logger.error(f"[GET_TRACKS_BELOW_SCORE] Lỗi SQLite: {e}")
        raise DatabaseError("Lỗi SQLite khi lọc bài điểm thấp.", original_exception=e)
    finally:
        if internal_conn:
            internal_conn.close()

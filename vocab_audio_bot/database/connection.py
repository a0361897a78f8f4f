"""
Module quản lý kết nối đến cơ sở dữ liệu SQLite.
(Bật chế độ WAL để các handler và job bảo trì có thể truy cập đồng thời;
SQLite tự tuần tự hóa các thao tác ghi.)
"""
import os
import sqlite3
import logging
from vocab_audio_bot import config
from vocab_audio_bot.database.schema import database_initialize

DB_BUSY_TIMEOUT_SECONDS = 10

def database_connect(db_path=None):
    """
    Thiết lập và trả về một kết nối đến cơ sở dữ liệu SQLite.
    Đã bật hỗ trợ foreign key (cần cho ON DELETE CASCADE) và chế độ WAL.
    Nếu file database chưa tồn tại, hàm sẽ tạo thư mục chứa database (nếu cần).
    database_initialize được gọi ở mọi kết nối để bảo đảm các bảng luôn tồn tại.
    Args:
        db_path (str): Đường dẫn file database (mặc định: config.DB_PATH).
    Returns:
        Đối tượng sqlite3.Connection nếu kết nối thành công, hoặc None nếu xảy ra lỗi.
    """
    db_path = db_path or config.DB_PATH
    logger = logging.getLogger(__name__)
    if not os.path.exists(db_path):
        logger.info(f"File database không tìm thấy tại '{db_path}'. Sẽ tiến hành khởi tạo.")
        db_dir = os.path.dirname(db_path)
        if db_dir:
            try:
                os.makedirs(db_dir, exist_ok=True)
            except OSError as e:
                logger.error(f"Không thể tạo thư mục database '{db_dir}': {e}")
                return None
    try:
        conn = sqlite3.connect(db_path, timeout=DB_BUSY_TIMEOUT_SECONDS, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            cursor = conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            current_journal_mode = cursor.fetchone()
            if not current_journal_mode or current_journal_mode[0].lower() != 'wal':
                current_mode_str = current_journal_mode[0] if current_journal_mode else 'Không xác định'
                logger.warning(f"Không thể bật chế độ WAL cho '{db_path}'. Chế độ hiện tại: {current_mode_str}.")
        except sqlite3.Error as e_wal:
            logger.error(f"Lỗi khi thực thi PRAGMA journal_mode=WAL: {e_wal}")
        logger.debug(f"Kết nối database tại '{db_path}' thành công.")
    except sqlite3.Error as e:
        logger.error(f"Lỗi khi kết nối đến database tại '{db_path}': {e}")
        return None
    # File đã tồn tại chưa chắc đã có bảng (file rỗng, luồng khác đang khởi tạo).
    # Schema chỉ gồm CREATE ... IF NOT EXISTS.
    try:
        database_initialize(conn)
    except Exception as e_init:
        logger.error(f"Khởi tạo database thất bại: {e_init}", exc_info=True)
        conn.close()
        return None
    return conn

# File: vocab-audio-bot/vocab_audio_bot/config.py
"""
File cấu hình trung tâm cho Vocab Audio Bot.
Đọc biến môi trường (.env), định nghĩa hằng số nghiệp vụ và cấu hình logging.
Việc kiểm tra các biến bắt buộc được thực hiện trong validate_config()
để module có thể import được khi chạy test.
"""

import os
import logging
import sys
from dotenv import load_dotenv

from vocab_audio_bot.utils.exceptions import ValidationError

# --- Tải biến môi trường ---
load_dotenv()


def _env_str(name, default=""):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name, default):
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logging.warning(f"Giá trị {name}='{raw}' không phải số nguyên. Dùng mặc định {default}.")
        return default


def _env_float(name, default):
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return float(raw.rstrip("s"))
    except ValueError:
        logging.warning(f"Giá trị {name}='{raw}' không phải số. Dùng mặc định {default}.")
        return default


def parse_allowed_users(raw):
    """Chuyển chuỗi '1, 2,abc' thành [1, 2]; các phần tử không hợp lệ bị bỏ qua."""
    if not raw:
        return []
    allowed = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            allowed.append(int(part))
        except ValueError:
            logging.warning(f"Bỏ qua ID không hợp lệ trong ALLOWED_USERS: '{part}'")
    return allowed


# --- Định nghĩa Đường dẫn ---
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(BASE_DIR, "..", "data")
DB_PATH = _env_str("DB_PATH", os.path.join(DATA_DIR, "library.db"))
AUDIO_DIR = _env_str("AUDIO_DIR", os.path.join(DATA_DIR, "audio"))

# --- Cấu hình Bot & dịch vụ bên ngoài ---
BOT_TOKEN = _env_str("BOT_TOKEN")
GEMINI_API_KEY = _env_str("GEMINI_API_KEY")
GEMINI_MODEL = _env_str("GEMINI_MODEL", "gemini-1.5-flash")
GOOGLE_CREDENTIALS_JSON = _env_str("GOOGLE_CREDENTIALS_JSON")
ALLOWED_USERS = parse_allowed_users(_env_str("ALLOWED_USERS"))

# --- Nội dung bài nghe ---
LANGUAGE_LEVEL = _env_str("LANGUAGE_LEVEL", "A2-B1")
SOURCE_LANGUAGE = {
    'code': _env_str("SOURCE_LANG_CODE", "es-ES"),
    'name': _env_str("SOURCE_LANG_NAME", "Spanish (Spain)"),
    'voice_name': _env_str("SOURCE_VOICE", "es-ES-Neural2-B"),
}
TARGET_LANGUAGE = {
    'code': _env_str("TARGET_LANG_CODE", "ru-RU"),
    'name': _env_str("TARGET_LANG_NAME", "Russian"),
    'voice_name': _env_str("TARGET_VOICE", "ru-RU-Wavenet-D"),
}

# --- Cài đặt theo chat (mặc định và giới hạn) ---
ITEMS_PER_TRACK = _env_int("ITEMS_PER_TRACK", 20)
ITEMS_MIN = _env_int("ITEMS_MIN", 5)
ITEMS_MAX = _env_int("ITEMS_MAX", 50)
ITEMS_STEP = _env_int("ITEMS_STEP", 5)
PAUSE_THINK = _env_float("PAUSE_THINK", 2)
PAUSE_THINK_MIN = _env_float("PAUSE_THINK_MIN", 1)
PAUSE_THINK_MAX = _env_float("PAUSE_THINK_MAX", 10)
PAUSE_BETWEEN = _env_float("PAUSE_BETWEEN", 1.5)
PAUSE_BETWEEN_MIN = _env_float("PAUSE_BETWEEN_MIN", 1)
PAUSE_BETWEEN_MAX = _env_float("PAUSE_BETWEEN_MAX", 10)
PAUSE_STEP = 1

SETTINGS_DEFAULTS = {
    'pause_think': PAUSE_THINK,
    'pause_between': PAUSE_BETWEEN,
    'items_per_track': ITEMS_PER_TRACK,
}
SETTINGS_LIMITS = {
    'pause_think': (PAUSE_THINK_MIN, PAUSE_THINK_MAX),
    'pause_between': (PAUSE_BETWEEN_MIN, PAUSE_BETWEEN_MAX),
    'items_per_track': (ITEMS_MIN, ITEMS_MAX),
}

# --- Danh sách từ gần đây (chế độ tạo nhanh) ---
MAX_RECENT_WORDS = _env_int("MAX_RECENT_WORDS", 200)
RECENT_AVOID_LIST_SIZE = _env_int("RECENT_AVOID_LIST_SIZE", 120)

# --- Thư viện audio ---
LIBRARY_TARGET_SIZE = _env_int("LIBRARY_TARGET_SIZE", 20)
LOW_SCORE_THRESHOLD = _env_int("LOW_SCORE_THRESHOLD", -2)
MAINTENANCE_INTERVAL_HOURS = _env_float("MAINTENANCE_INTERVAL_HOURS", 6)
STARTUP_TOPUP_DELAY_SECONDS = 5

# --- Hằng số Audio ---
AUDIO_OUTPUT_FORMAT = "ogg"
AUDIO_OUTPUT_CODEC = "libopus"
AUDIO_OUTPUT_BITRATE = "48k"

# --- Hằng số Callback Query Prefixes ---
SETTINGS_CALLBACK_PREFIX = "settings"
FEEDBACK_CALLBACK_PREFIX = "feedback"
LIBRARY_CALLBACK_PREFIX = "library"
GENERATE_TRIGGER_WORD = "go"
NEXT_TRIGGER_WORD = "next"

REQUIRED_ENV_VARS = ("BOT_TOKEN", "GEMINI_API_KEY")


def validate_config():
    """
    Kiểm tra các biến môi trường bắt buộc.
    Raises:
        ValidationError: Nếu thiếu ít nhất một biến bắt buộc.
    """
    missing = [name for name in REQUIRED_ENV_VARS if not globals().get(name)]
    if missing:
        raise ValidationError(f"Thiếu biến môi trường bắt buộc: {', '.join(missing)}")
    logging.info(f"BOT_TOKEN đã được tải (...{BOT_TOKEN[-4:]})")
    logging.info(f"DB_PATH: {DB_PATH} | AUDIO_DIR: {AUDIO_DIR}")
    logging.info(f"Ngôn ngữ: {SOURCE_LANGUAGE['name']} -> {TARGET_LANGUAGE['name']}, level {LANGUAGE_LEVEL}")


# --- Cấu hình Logging ---
class HideHttpRequestFilter(logging.Filter):
    def filter(self, record): return "HTTP Request" not in record.getMessage()


LOG_FORMAT = '[%(levelname)s] %(asctime)s - %(name)s - %(module)s > %(funcName)s | (%(lineno)d) - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'
logging.basicConfig(
    level=getattr(logging, _env_str("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format=LOG_FORMAT,
    datefmt=LOG_DATEFMT
)
logger_global = logging.getLogger(); filter_instance = HideHttpRequestFilter(); applied_filter = False
for handler_item in logger_global.handlers: handler_item.addFilter(filter_instance); applied_filter = True
if not applied_filter:
    console_handler = logging.StreamHandler(sys.stdout); console_handler.addFilter(filter_instance)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger_global.addHandler(console_handler)

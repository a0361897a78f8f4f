"""
Module chứa các hàm xây dựng giao diện người dùng liên quan đến phần cài đặt.
"""
import logging
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from vocab_audio_bot.config import (
    SETTINGS_CALLBACK_PREFIX,
    ITEMS_STEP,
    PAUSE_STEP,
    GENERATE_TRIGGER_WORD,
    NEXT_TRIGGER_WORD,
)
logger = logging.getLogger(__name__)

def format_seconds(value):
    return f"{float(value):g}"

def build_settings_keyboard():
    """Bàn phím điều chỉnh cài đặt: khoảng nghỉ suy nghĩ, khoảng nghỉ giữa cặp, số từ."""
    prefix = SETTINGS_CALLBACK_PREFIX
    keyboard = [
        [
            InlineKeyboardButton(f"⏱ Suy nghĩ −{PAUSE_STEP}s", callback_data=f"{prefix}:think_dec"),
            InlineKeyboardButton(f"⏱ Suy nghĩ +{PAUSE_STEP}s", callback_data=f"{prefix}:think_inc"),
        ],
        [
            InlineKeyboardButton(f"⏸ Giữa cặp −{PAUSE_STEP}s", callback_data=f"{prefix}:between_dec"),
            InlineKeyboardButton(f"⏸ Giữa cặp +{PAUSE_STEP}s", callback_data=f"{prefix}:between_inc"),
        ],
        [
            InlineKeyboardButton(f"📝 Số từ −{ITEMS_STEP}", callback_data=f"{prefix}:items_dec"),
            InlineKeyboardButton(f"📝 Số từ +{ITEMS_STEP}", callback_data=f"{prefix}:items_inc"),
        ],
    ]
    return InlineKeyboardMarkup(keyboard)

def build_settings_text(settings):
    """Nội dung tóm tắt cài đặt hiện tại của chat."""
    return (
        f"⚙️ Cài đặt hiện tại:\n"
        f"  • Khoảng nghỉ suy nghĩ: {format_seconds(settings['pause_think'])}s\n"
        f"  • Khoảng nghỉ giữa cặp: {format_seconds(settings['pause_between'])}s\n"
        f"  • Số từ mỗi bài: {settings['items_per_track']}"
    )

def build_main_menu(settings, source_language, target_language):
    """
    Xây dựng tin nhắn chào mừng kèm cài đặt và bàn phím.
    Returns:
        tuple: (text, reply_markup)
    """
    text = (
        f"🎧 Thẻ từ vựng dạng audio {source_language['name']} → {target_language['name']}.\n\n"
        f"• Gửi \"{NEXT_TRIGGER_WORD}\" hoặc /next để nghe bài tiếp theo trong thư viện.\n"
        f"• Gửi \"{GENERATE_TRIGGER_WORD}\" để tạo một bài mới theo cài đặt của bạn.\n"
        f"• /status để xem tình trạng thư viện.\n\n"
        f"{build_settings_text(settings)}"
    )
    return text, build_settings_keyboard()

"""
Module xây dựng giao diện đi kèm bài nghe trong thư viện (nút đánh giá, chú thích).
"""
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from vocab_audio_bot.config import FEEDBACK_CALLBACK_PREFIX, LIBRARY_CALLBACK_PREFIX

def build_track_keyboard(track_id):
    """Bàn phím dưới mỗi bài nghe: 👍 / 👎 / ⏭."""
    keyboard = [[
        InlineKeyboardButton("👍", callback_data=f"{FEEDBACK_CALLBACK_PREFIX}:like:{track_id}"),
        InlineKeyboardButton("👎", callback_data=f"{FEEDBACK_CALLBACK_PREFIX}:dislike:{track_id}"),
        InlineKeyboardButton("⏭ Bài tiếp", callback_data=f"{LIBRARY_CALLBACK_PREFIX}:next"),
    ]]
    return InlineKeyboardMarkup(keyboard)

def build_track_caption(track):
    return f"🎧 Bài #{track['track_id']} · {len(track['pairs'])} từ"

def build_status_text(track_count, target_size, listened_count):
    return (
        f"📚 Thư viện: {track_count}/{target_size} bài\n"
        f"👂 Bạn đã nghe {listened_count} bài trong vòng hiện tại."
    )

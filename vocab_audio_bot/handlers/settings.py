"""
Module chứa các handlers cho phần cài đặt theo chat (khoảng nghỉ, số từ mỗi bài).
Cài đặt chỉ sống trong bộ nhớ và áp dụng cho chế độ tạo nhanh ("go").
"""
import logging
from telegram.ext import Application, CommandHandler, CallbackQueryHandler
from vocab_audio_bot.config import SETTINGS_CALLBACK_PREFIX, PAUSE_STEP, ITEMS_STEP
from vocab_audio_bot.ui.settings_ui import build_settings_text, build_settings_keyboard
from vocab_audio_bot.utils.helpers import (
    GENERIC_ERROR_TEXT,
    answer_callback_quietly,
    get_chat_id,
    require_allowed_user,
    send_or_edit_message,
)
logger = logging.getLogger(__name__)

# action -> (tên phương thức của ChatSettingsStore, mức thay đổi)
SETTINGS_ACTIONS = {
    'think_dec': ('adjust_pause_think', -PAUSE_STEP),
    'think_inc': ('adjust_pause_think', PAUSE_STEP),
    'between_dec': ('adjust_pause_between', -PAUSE_STEP),
    'between_inc': ('adjust_pause_between', PAUSE_STEP),
    'items_dec': ('adjust_items', -ITEMS_STEP),
    'items_inc': ('adjust_items', ITEMS_STEP),
}

@require_allowed_user
async def handle_command_settings(update, context):
    """Handler cho lệnh /settings."""
    chat_id = get_chat_id(update)
    if chat_id is None:
        logger.warning("handle_command_settings: Không xác định được chat_id.")
        return
    settings_store = context.bot_data.get('settings_store')
    if settings_store is None:
        logger.error(f"[SETTINGS_CMD|Chat:{chat_id}] Không tìm thấy settings_store trong bot_data.")
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)
        return
    await send_or_edit_message(
        context, chat_id,
        build_settings_text(settings_store.get(chat_id)),
        reply_markup=build_settings_keyboard()
    )

@require_allowed_user
async def handle_callback_settings(update, context):
    """Handler cho callback 'settings:<action>'. Sửa lại tin nhắn với giá trị mới."""
    query = update.callback_query
    if not query or not query.data:
        logger.warning("handle_callback_settings: callback query không hợp lệ.")
        return
    chat_id = get_chat_id(update)
    log_prefix = f"[SETTINGS_CB|Chat:{chat_id}]"
    action = query.data.split(":", 1)[-1]
    if action not in SETTINGS_ACTIONS:
        logger.error(f"{log_prefix} Action không hợp lệ: '{query.data}'")
        await answer_callback_quietly(query, "❌ Lỗi dữ liệu.", log_prefix)
        return
    settings_store = context.bot_data.get('settings_store')
    if settings_store is None:
        logger.error(f"{log_prefix} Không tìm thấy settings_store trong bot_data.")
        await answer_callback_quietly(query, GENERIC_ERROR_TEXT, log_prefix)
        return

    method_name, delta = SETTINGS_ACTIONS[action]
    new_value = getattr(settings_store, method_name)(chat_id, delta)
    logger.info(f"{log_prefix} {action} -> {new_value}")
    await answer_callback_quietly(query, f"✅ Giá trị mới: {new_value:g}", log_prefix)
    await send_or_edit_message(
        context, chat_id,
        build_settings_text(settings_store.get(chat_id)),
        reply_markup=build_settings_keyboard(),
        message_to_edit=query.message
    )

def register_handlers(app: Application):
    """Đăng ký các handler cho module Settings."""
    app.add_handler(CommandHandler("settings", handle_command_settings))
    app.add_handler(CallbackQueryHandler(handle_callback_settings, pattern=f"^{SETTINGS_CALLBACK_PREFIX}:"))
    logger.info("Đã đăng ký các handler cho module Settings.")

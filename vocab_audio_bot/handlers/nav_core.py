"""
Module chứa các handlers cốt lõi: /start, /help, /status và error handler chung.
"""
import asyncio
import logging
from telegram import Update
from telegram.ext import Application, CommandHandler
from telegram.error import Forbidden
from vocab_audio_bot import config
from vocab_audio_bot.database.query_history import get_listened_track_ids
from vocab_audio_bot.ui.settings_ui import build_main_menu
from vocab_audio_bot.ui.track_ui import build_status_text
from vocab_audio_bot.utils.helpers import (
    GENERIC_ERROR_TEXT,
    get_chat_id,
    require_allowed_user,
    send_or_edit_message,
)
logger = logging.getLogger(__name__)

@require_allowed_user
async def handle_command_start(update, context):
    """Handler cho lệnh /start và /help: giới thiệu bot kèm bàn phím cài đặt."""
    chat_id = get_chat_id(update)
    if chat_id is None:
        logger.warning("handle_command_start: Không xác định được chat_id.")
        return
    log_prefix = f"[NAV_START|Chat:{chat_id}]"
    logger.info(f"{log_prefix} Hiển thị menu chính.")
    settings_store = context.bot_data.get('settings_store')
    if settings_store is None:
        logger.error(f"{log_prefix} Không tìm thấy settings_store trong bot_data.")
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)
        return
    text, reply_markup = build_main_menu(
        settings_store.get(chat_id), config.SOURCE_LANGUAGE, config.TARGET_LANGUAGE
    )
    await send_or_edit_message(context, chat_id, text, reply_markup=reply_markup)

@require_allowed_user
async def handle_command_status(update, context):
    """Handler cho lệnh /status: số bài trong thư viện và số bài chat đã nghe."""
    chat_id = get_chat_id(update)
    if chat_id is None:
        logger.warning("handle_command_status: Không xác định được chat_id.")
        return
    log_prefix = f"[NAV_STATUS|Chat:{chat_id}]"
    library = context.bot_data.get('audio_library')
    if library is None:
        logger.error(f"{log_prefix} Không tìm thấy audio_library trong bot_data.")
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)
        return
    loop = asyncio.get_running_loop()
    try:
        track_count = await loop.run_in_executor(None, library.get_track_count)
        listened_ids = await loop.run_in_executor(None, get_listened_track_ids, chat_id)
    except Exception as e:
        logger.error(f"{log_prefix} Lỗi khi lấy trạng thái thư viện: {e}", exc_info=True)
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)
        return
    text = build_status_text(track_count, library.target_size, len(listened_ids))
    await send_or_edit_message(context, chat_id, text)

async def error_handler(update, context):
    """Log lỗi và gửi lời xin lỗi chung cho người dùng nếu cần."""
    err = getattr(context, 'error', None)
    if err is None:
        logger.error(f"Lỗi không xác định hoặc context không có error: update={update}")
        return
    logger.error(f"Lỗi trong quá trình xử lý update: {err}", exc_info=err)

    if not isinstance(update, Update) or not update.effective_chat:
        return
    chat_id_err = update.effective_chat.id
    err_str = str(err).lower()
    ignore_errors = [
        "message is not modified",
        "query is too old",
        "chat not found",
        "bot was blocked by the user"
    ]
    for ignore_msg in ignore_errors:
        if ignore_msg in err_str:
            logger.info(f"Bỏ qua thông báo lỗi cho chat {chat_id_err} do lỗi: {ignore_msg}")
            return
    if isinstance(err, Forbidden):
        logger.warning(f"Bot bị chặn trong chat {chat_id_err}.")
        return
    try:
        await context.bot.send_message(chat_id=chat_id_err, text=GENERIC_ERROR_TEXT)
    except Forbidden:
        logger.warning(f"Bot bị chặn trong chat {chat_id_err} khi gửi thông báo lỗi.")
    except Exception as e_send_err:
        logger.error(f"Lỗi khi gửi thông báo lỗi tới chat {chat_id_err}: {e_send_err}")

def register_handlers(app: Application):
    """Đăng ký các handler điều hướng cốt lõi."""
    app.add_handler(CommandHandler("start", handle_command_start))
    app.add_handler(CommandHandler("help", handle_command_start))
    app.add_handler(CommandHandler("status", handle_command_status))
    logger.info("Đã đăng ký các handler cho module Nav Core.")

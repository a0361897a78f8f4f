"""
Module chứa các handlers phát bài nghe từ thư viện dùng chung và ghi nhận đánh giá.
Các đối tượng dịch vụ được lấy từ context.bot_data (được main.py khởi tạo).
"""
import asyncio
import logging
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, MessageHandler, filters
from telegram.constants import ChatAction
from vocab_audio_bot.config import (
    FEEDBACK_CALLBACK_PREFIX,
    LIBRARY_CALLBACK_PREFIX,
    NEXT_TRIGGER_WORD,
)
from vocab_audio_bot.database.query_track import get_track
from vocab_audio_bot.database.query_history import mark_listened
from vocab_audio_bot.database.query_feedback import (
    SCORE_LIKE,
    SCORE_DISLIKE,
    set_feedback,
    get_feedback_summary,
)
from vocab_audio_bot.ui.track_ui import build_track_keyboard, build_track_caption
from vocab_audio_bot.utils.helpers import (
    GENERIC_ERROR_TEXT,
    answer_callback_quietly,
    get_chat_id,
    require_allowed_user,
    send_or_edit_message,
)
from vocab_audio_bot.utils.exceptions import DatabaseError, MissingAudioFileError
logger = logging.getLogger(__name__)

FEEDBACK_SCORES = {'like': SCORE_LIKE, 'dislike': SCORE_DISLIKE}

async def deliver_next_track(context, chat_id):
    """
    Chọn bài tiếp theo cho chat, gửi dưới dạng voice kèm nút đánh giá,
    rồi ghi nhận lượt nghe. Mọi lỗi được báo cho người dùng bằng tin nhắn chung.
    """
    log_prefix = f"[LIBRARY_DELIVER|Chat:{chat_id}]"
    library = context.bot_data.get('audio_library')
    if library is None:
        logger.error(f"{log_prefix} Không tìm thấy audio_library trong bot_data.")
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)
        return
    loop = asyncio.get_running_loop()
    try:
        track = await loop.run_in_executor(None, library.get_next_track_for_user, chat_id)
        if track is None:
            await send_or_edit_message(context, chat_id, "📭 Thư viện đang được chuẩn bị. Vui lòng quay lại sau ít phút.")
            return
        await loop.run_in_executor(None, library.ensure_track_file, track)
        try:
            await context.bot.send_chat_action(chat_id=chat_id, action=ChatAction.UPLOAD_VOICE)
        except Exception as e_action:
            logger.warning(f"{log_prefix} Lỗi gửi chat action: {e_action}")
        with open(track['file_path'], 'rb') as voice_file:
            await context.bot.send_voice(
                chat_id=chat_id,
                voice=voice_file,
                caption=build_track_caption(track),
                reply_markup=build_track_keyboard(track['track_id'])
            )
        logger.info(f"{log_prefix} Đã gửi bài ID {track['track_id']}.")
        try:
            await loop.run_in_executor(None, mark_listened, chat_id, track['track_id'])
        except DatabaseError as e_mark:
            # Bài có thể vừa bị loại bởi job bảo trì sau khi đã gửi.
            logger.warning(f"{log_prefix} Không ghi nhận được lượt nghe bài ID {track['track_id']}: {e_mark}")
    except MissingAudioFileError as e_missing:
        logger.warning(f"{log_prefix} {e_missing}")
        await send_or_edit_message(context, chat_id, "⚠️ Bài nghe này không còn nữa. Vui lòng thử lại.")
    except Exception as e:
        logger.error(f"{log_prefix} Lỗi khi phát bài nghe: {e}", exc_info=True)
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)

@require_allowed_user
async def handle_command_next(update, context):
    """Handler cho lệnh /next và tin nhắn 'next'."""
    chat_id = get_chat_id(update)
    if chat_id is None:
        logger.warning("handle_command_next: Không xác định được chat_id.")
        return
    logger.info(f"[LIBRARY_NEXT_CMD|Chat:{chat_id}] Yêu cầu bài tiếp theo.")
    await deliver_next_track(context, chat_id)

@require_allowed_user
async def handle_callback_next(update, context):
    """Handler cho callback 'library:next'."""
    query = update.callback_query
    if not query: logger.warning("handle_callback_next: callback query không hợp lệ."); return
    await answer_callback_quietly(query, log_prefix="[LIBRARY_NEXT_CB]")
    chat_id = get_chat_id(update)
    if chat_id is None:
        return
    await deliver_next_track(context, chat_id)

@require_allowed_user
async def handle_callback_feedback(update, context):
    """Handler cho callback 'feedback:<like|dislike>:<track_id>'."""
    query = update.callback_query
    if not query: logger.warning("handle_callback_feedback: callback query không hợp lệ."); return
    if not query.data: logger.warning("handle_callback_feedback: callback data không hợp lệ."); return
    chat_id = get_chat_id(update)
    log_prefix = f"[FEEDBACK|Chat:{chat_id}]"
    loop = asyncio.get_running_loop()
    try:
        parts = query.data.split(":")
        if len(parts) != 3 or parts[0] != FEEDBACK_CALLBACK_PREFIX or parts[1] not in FEEDBACK_SCORES:
            raise ValueError("Invalid callback data format")
        score = FEEDBACK_SCORES[parts[1]]
        track_id = int(parts[2])
    except (ValueError, IndexError) as e_parse:
        logger.error(f"{log_prefix} Lỗi parse callback data '{query.data}': {e_parse}")
        await answer_callback_quietly(query, "❌ Lỗi dữ liệu.", log_prefix)
        return
    try:
        track = await loop.run_in_executor(None, get_track, track_id)
        if track is None:
            logger.info(f"{log_prefix} Bài ID {track_id} đã bị loại khỏi thư viện.")
            await answer_callback_quietly(query, "Bài nghe này không còn trong thư viện.", log_prefix)
            return
        await loop.run_in_executor(None, set_feedback, chat_id, track_id, score)
        summary = await loop.run_in_executor(None, get_feedback_summary, track_id)
        icon = "👍" if score > 0 else "👎"
        await answer_callback_quietly(
            query,
            f"Đã ghi nhận {icon} (👍 {summary['likes']} · 👎 {summary['dislikes']})",
            log_prefix
        )
    except Exception as e:
        logger.error(f"{log_prefix} Lỗi khi ghi đánh giá cho bài {track_id}: {e}", exc_info=True)
        await answer_callback_quietly(query, GENERIC_ERROR_TEXT, log_prefix)

def register_handlers(app: Application):
    """Đăng ký các handler cho thư viện bài nghe."""
    app.add_handler(CommandHandler("next", handle_command_next))
    app.add_handler(MessageHandler(
        filters.TEXT & ~filters.COMMAND & filters.Regex(rf"(?i)^\s*{NEXT_TRIGGER_WORD}\s*$"),
        handle_command_next
    ))
    app.add_handler(CallbackQueryHandler(handle_callback_next, pattern=f"^{LIBRARY_CALLBACK_PREFIX}:next$"))
    app.add_handler(CallbackQueryHandler(handle_callback_feedback, pattern=f"^{FEEDBACK_CALLBACK_PREFIX}:"))
    logger.info("Đã đăng ký các handler cho module Library.")

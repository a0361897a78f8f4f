"""
Module chứa handler tạo nhanh một bài nghe riêng cho chat (gửi "go").
Bài được tạo theo cài đặt của chat, tránh các từ gần đây của chat đó,
và file audio bị xóa ngay sau khi gửi.
"""
import asyncio
import functools
import logging
import tempfile
from telegram.ext import Application, MessageHandler, filters
from telegram.constants import ChatAction
from vocab_audio_bot import config
from vocab_audio_bot.config import GENERATE_TRIGGER_WORD
from vocab_audio_bot.services.audio_service import remove_file_quietly
from vocab_audio_bot.utils.helpers import (
    GENERIC_ERROR_TEXT,
    get_chat_id,
    require_allowed_user,
    send_or_edit_message,
)
logger = logging.getLogger(__name__)

@require_allowed_user
async def handle_text_generate(update, context):
    """Handler cho tin nhắn 'go'."""
    chat_id = get_chat_id(update)
    if chat_id is None:
        logger.warning("handle_text_generate: Không xác định được chat_id.")
        return
    log_prefix = f"[GENERATE_TRACK|Chat:{chat_id}]"
    settings_store = context.bot_data.get('settings_store')
    recent_words_store = context.bot_data.get('recent_words_store')
    script_generator = context.bot_data.get('script_generator')
    renderer = context.bot_data.get('track_renderer')
    if not all([settings_store, recent_words_store, script_generator, renderer]):
        logger.error(f"{log_prefix} Thiếu dịch vụ trong bot_data.")
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT)
        return

    settings = settings_store.get(chat_id)
    logger.info(f"{log_prefix} Bắt đầu tạo bài với cài đặt {settings}.")
    status_message = await send_or_edit_message(context, chat_id, "⏳ Đang tạo bài nghe...")
    loop = asyncio.get_running_loop()
    output_path = None
    try:
        recent_avoid_list = recent_words_store.get_recent(chat_id, config.RECENT_AVOID_LIST_SIZE)
        pairs = await loop.run_in_executor(None, functools.partial(
            script_generator.generate,
            items_per_track=settings['items_per_track'],
            level=config.LANGUAGE_LEVEL,
            recent_avoid_list=recent_avoid_list,
            source_lang_name=config.SOURCE_LANGUAGE['name'],
            target_lang_name=config.TARGET_LANGUAGE['name'],
        ))
        recent_words_store.add_many(chat_id, [pair['source'] for pair in pairs])
        try:
            await context.bot.send_chat_action(chat_id=chat_id, action=ChatAction.RECORD_VOICE)
        except Exception as e_action:
            logger.warning(f"{log_prefix} Lỗi gửi chat action: {e_action}")
        output_path = await loop.run_in_executor(
            None, renderer.render, pairs, settings['pause_think'], settings['pause_between'], tempfile.gettempdir()
        )
        with open(output_path, 'rb') as voice_file:
            await context.bot.send_voice(chat_id=chat_id, voice=voice_file)
        logger.info(f"{log_prefix} Đã gửi bài {len(pairs)} từ.")
        if status_message:
            try:
                await context.bot.delete_message(chat_id=status_message.chat_id, message_id=status_message.message_id)
            except Exception as e_del:
                logger.warning(f"{log_prefix} Lỗi xóa tin nhắn trạng thái: {e_del}")
    except Exception as e:
        logger.error(f"{log_prefix} Tạo bài nghe thất bại: {e}", exc_info=True)
        await send_or_edit_message(context, chat_id, GENERIC_ERROR_TEXT, message_to_edit=status_message)
    finally:
        if output_path:
            await loop.run_in_executor(None, remove_file_quietly, output_path, log_prefix)

def register_handlers(app: Application):
    """Đăng ký handler tạo nhanh bài nghe."""
    app.add_handler(MessageHandler(
        filters.TEXT & ~filters.COMMAND & filters.Regex(rf"(?i)^\s*{GENERATE_TRIGGER_WORD}\s*$"),
        handle_text_generate
    ))
    logger.info("Đã đăng ký handler cho module Generate.")

# Path: vocab_audio_bot/utils/helpers.py
"""
Module chứa các hàm tiện ích chung cho handlers và decorator kiểm tra quyền truy cập.
"""
import logging
import functools
from telegram.error import BadRequest
from vocab_audio_bot import config

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "😔 Xin lỗi, đã có lỗi xảy ra. Vui lòng thử lại sau."

def is_user_allowed(user_id, allowed_users=None):
    """Danh sách rỗng nghĩa là không giới hạn."""
    allowed = config.ALLOWED_USERS if allowed_users is None else allowed_users
    if not allowed:
        return True
    return user_id in allowed

def get_chat_id(update):
    """Lấy chat_id từ update (message hoặc callback), trả về None nếu không xác định được."""
    if update.effective_chat:
        return update.effective_chat.id
    if update.callback_query and update.callback_query.message:
        return update.callback_query.message.chat_id
    if update.effective_user:
        return update.effective_user.id
    return None

async def answer_callback_quietly(query, text=None, log_prefix="[ANSWER_CALLBACK]"):
    """Trả lời callback query; lỗi (vd: query quá cũ) chỉ được ghi log."""
    try:
        await query.answer(text)
    except BadRequest as e_ans:
        if "Query is too old" in str(e_ans): logger.warning(f"{log_prefix} Callback query cũ.")
        else: logger.error(f"{log_prefix} Lỗi answer callback: {e_ans}")
    except Exception as e_ans_unk:
        logger.error(f"{log_prefix} Lỗi không mong muốn answer callback: {e_ans_unk}")

async def send_or_edit_message(context, chat_id, text, reply_markup=None, parse_mode=None, message_to_edit=None):
    """
    Gửi tin nhắn mới hoặc sửa tin nhắn đã có.
    Nếu sửa thất bại (trừ lỗi 'Message is not modified') thì gửi tin nhắn mới.
    Returns:
        Message hoặc None nếu cả hai cách đều lỗi.
    """
    log_prefix = f"[HELPER_SEND_OR_EDIT|Chat:{chat_id}]"
    sent_or_edited_message = None
    edit_failed = False
    if message_to_edit and hasattr(message_to_edit, 'message_id') and hasattr(message_to_edit, 'chat_id'):
        try:
            await context.bot.edit_message_text(
                text=text,
                chat_id=message_to_edit.chat_id,
                message_id=int(message_to_edit.message_id),
                reply_markup=reply_markup,
                parse_mode=parse_mode
            )
            sent_or_edited_message = message_to_edit
        except BadRequest as e:
            if "Message is not modified" in str(e):
                logger.info(f"{log_prefix} Message {message_to_edit.message_id} không thay đổi.")
                sent_or_edited_message = message_to_edit
            else:
                logger.error(f"{log_prefix} Lỗi BadRequest khi sửa message {message_to_edit.message_id}: {e}")
                edit_failed = True
        except Exception as e:
             logger.error(f"{log_prefix} Lỗi Exception khác khi sửa message {message_to_edit.message_id}: {e}", exc_info=True)
             edit_failed = True
    else:
        edit_failed = True

    if edit_failed:
        try:
            sent_or_edited_message = await context.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_markup=reply_markup,
                parse_mode=parse_mode
            )
        except Exception as e_send:
            logger.error(f"{log_prefix} Lỗi khi gửi tin nhắn mới: {e_send}", exc_info=True)
            sent_or_edited_message = None
    return sent_or_edited_message

def require_allowed_user(func):
    """
    Decorator chặn người dùng không nằm trong ALLOWED_USERS.
    Update bị chặn chỉ được ghi log, bot không trả lời.
    """
    @functools.wraps(func)
    async def wrapper(update, context, *args, **kwargs):
        if not update or not update.effective_user:
            logger.warning(f"Decorator: Không tìm thấy user trong update cho {func.__name__}.")
            return None
        user_id = update.effective_user.id
        if not is_user_allowed(user_id):
            logger.warning(f"[ACCESS_DENIED|User:{user_id}|Func:{func.__name__}] Truy cập trái phép, bỏ qua.")
            return None
        return await func(update, context, *args, **kwargs)
    return wrapper

# File: vocab-audio-bot/vocab_audio_bot/jobs.py
"""
Module chứa các hàm callback được thực thi bởi JobQueue của bot.
Cả hai job lấy AudioLibrary từ bot_data; lỗi chỉ được ghi log để job
định kỳ tiếp tục chạy ở lần sau.
"""
import logging

from telegram.ext import CallbackContext

logger = logging.getLogger(__name__)


def _get_library(context, log_prefix):
    if not context or not isinstance(context, CallbackContext):
        logger.error(f"{log_prefix} Context không hợp lệ.")
        return None
    library = context.bot_data.get('audio_library')
    if library is None:
        logger.error(f"{log_prefix} Không tìm thấy audio_library trong bot_data.")
    return library


async def run_library_startup_job(context):
    """Chạy một lần sau khi khởi động: chỉ tạo bù cho đủ số bài mục tiêu."""
    log_prefix = "[JOB_LIBRARY_STARTUP]"
    library = _get_library(context, log_prefix)
    if library is None:
        return
    logger.info(f"{log_prefix} Bắt đầu tạo bù thư viện khi khởi động.")
    try:
        generated = await library.ensure_library_size()
        logger.info(f"{log_prefix} Hoàn tất, đã tạo {generated} bài.")
    except Exception as e:
        logger.error(f"{log_prefix} Lỗi khi tạo bù thư viện: {e}", exc_info=True)


async def run_library_maintenance_job(context):
    """Chạy định kỳ: loại bài điểm thấp rồi tạo bù."""
    log_prefix = "[JOB_LIBRARY_MAINTENANCE]"
    library = _get_library(context, log_prefix)
    if library is None:
        return
    try:
        result = await library.run_maintenance()
        logger.info(f"{log_prefix} Kết quả: {result}")
    except Exception as e:
        logger.error(f"{log_prefix} Lỗi trong chu trình bảo trì: {e}", exc_info=True)

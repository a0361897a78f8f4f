# File: vocab-audio-bot/vocab_audio_bot/main.py
"""
Điểm khởi chạy chính (Entry Point) cho Vocab Audio Bot.
Khởi tạo các dịch vụ (Gemini, Google TTS, thư viện audio), đăng ký handlers,
lên lịch các job bảo trì thư viện và chạy bot bất đồng bộ.
"""
import logging
import asyncio
import sys
from datetime import timedelta

from telegram import Update
from telegram import BotCommand
from telegram.ext import ApplicationBuilder

from vocab_audio_bot import config
from vocab_audio_bot.utils.exceptions import ValidationError
from vocab_audio_bot.database.connection import database_connect
from vocab_audio_bot.services.script_service import ScriptGenerator
from vocab_audio_bot.services.tts_service import get_tts_client, SpeechSynthesizer, TrackRenderer
from vocab_audio_bot.services.library_service import AudioLibrary
from vocab_audio_bot.services.settings_service import ChatSettingsStore
from vocab_audio_bot.services.recent_words_service import RecentWordsStore
from vocab_audio_bot.handlers import nav_core
from vocab_audio_bot.handlers import settings
from vocab_audio_bot.handlers import library
from vocab_audio_bot.handlers import generate
from vocab_audio_bot.jobs import run_library_startup_job, run_library_maintenance_job

logger = logging.getLogger(__name__)


def build_services():
    """
    Tạo các đối tượng dịch vụ dùng chung, sẽ được đặt vào bot_data.
    Returns:
        dict: Khóa bot_data -> đối tượng dịch vụ.
    """
    script_generator = ScriptGenerator(api_key=config.GEMINI_API_KEY, model_name=config.GEMINI_MODEL)
    synthesizer = SpeechSynthesizer(
        client=get_tts_client(config.GOOGLE_CREDENTIALS_JSON),
        language_code=config.SOURCE_LANGUAGE['code']
    )
    track_renderer = TrackRenderer(
        synthesizer=synthesizer,
        source_voice=config.SOURCE_LANGUAGE['voice_name'],
        target_voice=config.TARGET_LANGUAGE['voice_name']
    )
    audio_library = AudioLibrary(
        script_generator=script_generator,
        renderer=track_renderer,
        audio_dir=config.AUDIO_DIR,
        target_size=config.LIBRARY_TARGET_SIZE,
        items_per_track=config.ITEMS_PER_TRACK,
        level=config.LANGUAGE_LEVEL,
        pause_think=config.PAUSE_THINK,
        pause_between=config.PAUSE_BETWEEN,
        source_language=config.SOURCE_LANGUAGE,
        target_language=config.TARGET_LANGUAGE,
        low_score_threshold=config.LOW_SCORE_THRESHOLD
    )
    return {
        'script_generator': script_generator,
        'track_renderer': track_renderer,
        'audio_library': audio_library,
        'settings_store': ChatSettingsStore(config.SETTINGS_DEFAULTS, config.SETTINGS_LIMITS),
        'recent_words_store': RecentWordsStore(config.MAX_RECENT_WORDS),
    }


def register_all_handlers(app):
    """Đăng ký tất cả các handlers, error handler và lên lịch jobs."""
    logger.info("Đăng ký handlers từ các module...")
    for module in (nav_core, settings, library, generate):
        if hasattr(module, 'register_handlers'): module.register_handlers(app)
        else: logger.error(f"!!! Thiếu register_handlers trong {module.__name__}")

    app.add_error_handler(nav_core.error_handler)
    logger.info("Đã đăng ký error_handler.")

    job_queue = app.job_queue
    if job_queue:
        job_queue.run_once(
            run_library_startup_job,
            when=timedelta(seconds=config.STARTUP_TOPUP_DELAY_SECONDS),
            name="LibraryStartupTopUpJob"
        )
        interval_hours = max(1, config.MAINTENANCE_INTERVAL_HOURS)
        job_queue.run_repeating(
            run_library_maintenance_job,
            interval=timedelta(hours=interval_hours),
            first=timedelta(hours=interval_hours),
            name="LibraryMaintenanceJob"
        )
        logger.info(f"Đã lên lịch tạo bù khi khởi động và bảo trì thư viện mỗi {interval_hours} giờ.")
    else:
        logger.warning("JobQueue không khả dụng. Không thể lên lịch bảo trì thư viện.")
    logger.info("Đăng ký handlers và jobs hoàn tất.")


async def set_commands(app):
    """Thiết lập danh sách lệnh gợi ý hiển thị trên Telegram."""
    commands = [
        BotCommand("start", "🎧 Giới thiệu và cài đặt"),
        BotCommand("next", "⏭ Nghe bài tiếp theo"),
        BotCommand("settings", "⚙️ Cài đặt"),
        BotCommand("status", "📚 Tình trạng thư viện"),
        BotCommand("help", "❓ Hướng dẫn sử dụng"),
    ]
    try:
        await app.bot.set_my_commands(commands)
        logger.info(f"✅ Lệnh bot đã được thiết lập thành công ({len(commands)} lệnh).")
        return True
    except Exception as e:
        logger.error(f"❌ Lỗi khi thiết lập lệnh bot: {e}", exc_info=True)
        return False


async def main():
    """Khởi tạo và chạy ứng dụng Telegram bot."""
    logger.info("--- Khởi tạo Vocab Audio Bot ---")
    try:
        config.validate_config()
    except ValidationError as e:
        logger.critical(f"LỖI NGHIÊM TRỌNG: {e}")
        print(f"LỖI: {e}", file=sys.stderr)
        sys.exit(1)

    conn = database_connect()
    if conn is None:
        logger.critical(f"LỖI NGHIÊM TRỌNG: Không thể mở database tại '{config.DB_PATH}'.")
        sys.exit(1)
    conn.close()

    app = None
    try:
        app = ApplicationBuilder().token(config.BOT_TOKEN).build()
        logger.info("Application được tạo thành công.")
        app.bot_data.update(build_services())
        register_all_handlers(app)

        logger.info(">>> Bot chuẩn bị chạy (async)...")
        await app.initialize()
        await set_commands(app)
        await app.start()

        if app.updater:
            await app.updater.start_polling(allowed_updates=Update.ALL_TYPES)
            logger.info(">>> Bot đang chạy (async)... Nhấn Ctrl+C để dừng.")
            stop_event = asyncio.Event()
            await stop_event.wait()
        else:
            logger.error("Updater không được khởi tạo.")
            return

    except (KeyboardInterrupt, SystemExit):
        logger.info("Nhận tín hiệu dừng...")
    except Exception as e:
        logger.critical(f"Lỗi nghiêm trọng khi chạy bot: {e}", exc_info=True)
    finally:
        if app is not None:
            logger.info("--- Bắt đầu quá trình tắt bot ---")
            try:
                if app.updater and app.updater.running: await app.updater.stop()
                if app.running: await app.stop()
                await app.shutdown()
                logger.info("--- Bot đã tắt hoàn toàn ---")
            except Exception as e_shutdown:
                logger.error(f"Lỗi khi tắt bot: {e_shutdown}", exc_info=True)


def run():
    """Entry point cho console script."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot đã dừng bởi người dùng.")
    except Exception as e:
        logger.critical(f"Lỗi không xác định cấp cao nhất: {e}", exc_info=True)


if __name__ == "__main__":
    run()

"""
Module chứa business logic liên quan đến xử lý file audio.
Chuyển bytes MP3 từ dịch vụ TTS thành file OGG/Opus (định dạng voice của Telegram)
bằng pydub (gọi ffmpeg). File MP3 tạm luôn được dọn dẹp dù chuyển đổi thành công hay lỗi.
"""
import os
import uuid
import logging
from pydub import AudioSegment
from vocab_audio_bot.config import (
    AUDIO_OUTPUT_FORMAT,
    AUDIO_OUTPUT_CODEC,
    AUDIO_OUTPUT_BITRATE,
)
from vocab_audio_bot.utils.exceptions import ExternalServiceError
logger = logging.getLogger(__name__)
def remove_file_quietly(path, log_prefix="[REMOVE_FILE]"):
    """
    Xóa file nếu tồn tại. Lỗi OSError chỉ được ghi log.
    Returns:
        bool: True nếu file đã bị xóa bởi lần gọi này.
    """
    if not path or not os.path.exists(path):
        return False
    try:
        os.remove(path)
        logger.debug(f"{log_prefix} Đã xóa file: {path}")
        return True
    except OSError as e_remove:
        logger.error(f"{log_prefix} Lỗi xóa file {path}: {e_remove}")
        return False
def convert_mp3_bytes_to_ogg(mp3_bytes, output_dir):
    """
    Ghi bytes MP3 ra file tạm có tên duy nhất, chuyển sang OGG/Opus rồi xóa file tạm.
    Args:
        mp3_bytes (bytes): Dữ liệu MP3.
        output_dir (str): Thư mục chứa cả file tạm và file kết quả.
    Returns:
        str: Đường dẫn file .ogg kết quả.
    Raises:
        ExternalServiceError: Nếu ffmpeg/pydub chuyển đổi thất bại.
    """
    log_prefix = "[CONVERT_MP3_TO_OGG]"
    os.makedirs(output_dir, exist_ok=True)
    file_id = uuid.uuid4().hex[:16]
    mp3_path = os.path.join(output_dir, f"temp-{file_id}.mp3")
    ogg_path = os.path.join(output_dir, f"track-{file_id}.{AUDIO_OUTPUT_FORMAT}")
    try:
        with open(mp3_path, "wb") as mp3_file:
            mp3_file.write(mp3_bytes)
        logger.debug(f"{log_prefix} Đã ghi {len(mp3_bytes)} bytes vào {mp3_path}. Đang chuyển đổi...")
        try:
            segment = AudioSegment.from_file(mp3_path, format="mp3")
            segment.export(
                ogg_path,
                format=AUDIO_OUTPUT_FORMAT,
                codec=AUDIO_OUTPUT_CODEC,
                bitrate=AUDIO_OUTPUT_BITRATE,
                parameters=["-vbr", "on"]
            )
        except Exception as e_convert:
            remove_file_quietly(ogg_path, log_prefix)
            raise ExternalServiceError("Chuyển đổi MP3 sang OGG thất bại.", service_name="ffmpeg", original_exception=e_convert)
        logger.info(f"{log_prefix} Chuyển đổi thành công -> {ogg_path}")
        return ogg_path
    finally:
        remove_file_quietly(mp3_path, log_prefix)

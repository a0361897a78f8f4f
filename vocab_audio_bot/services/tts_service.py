"""
Module tổng hợp giọng nói bằng Google Cloud Text-to-Speech.
Xây dựng tài liệu SSML cho danh sách cặp từ (giọng nguồn, khoảng nghỉ suy nghĩ,
giọng đích, khoảng nghỉ giữa các cặp) và gửi đi trong một yêu cầu duy nhất.
"""
import json
import logging

from google.cloud import texttospeech
from google.oauth2 import service_account

from vocab_audio_bot.services.audio_service import convert_mp3_bytes_to_ogg
from vocab_audio_bot.utils.exceptions import EmptyResultError, ExternalServiceError

logger = logging.getLogger(__name__)

SSML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_ssml(text):
    """Escape 5 ký tự đặc biệt của XML. '&' phải được thay trước tiên."""
    for char, entity in SSML_ESCAPES:
        text = text.replace(char, entity)
    return text


def unescape_ssml(text):
    for char, entity in reversed(SSML_ESCAPES):
        text = text.replace(entity, char)
    return text


def format_pause(seconds):
    """2 -> '2s', 1.5 -> '1.5s'."""
    return f"{float(seconds):g}s"


def build_ssml(pairs, pause_think, pause_between, source_voice, target_voice):
    """
    Xây dựng tài liệu SSML cho danh sách cặp từ.
    Danh sách rỗng vẫn cho ra tài liệu hợp lệ: '<speak></speak>'.
    """
    parts = ["<speak>"]
    think = format_pause(pause_think)
    between = format_pause(pause_between)
    for pair in pairs:
        parts.append(f'<voice name="{source_voice}">{escape_ssml(pair["source"])}</voice>')
        parts.append(f'<break time="{think}"/>')
        parts.append(f'<voice name="{target_voice}">{escape_ssml(pair["target"])}</voice>')
        parts.append(f'<break time="{between}"/>')
    parts.append("</speak>")
    return "".join(parts)


def get_tts_client(credentials_json=None):
    """Tạo TextToSpeechClient; dùng service account nếu có JSON, ngược lại dùng ADC."""
    if credentials_json:
        credentials = service_account.Credentials.from_service_account_info(
            json.loads(credentials_json),
            scopes=["https://www.googleapis.com/auth/cloud-platform"]
        )
        return texttospeech.TextToSpeechClient(credentials=credentials)
    return texttospeech.TextToSpeechClient()


class SpeechSynthesizer:
    """Bọc lời gọi synthesize_speech của Google Cloud TTS."""

    def __init__(self, client, language_code):
        self.client = client
        self.language_code = language_code

    def synthesize_mp3(self, ssml):
        """
        Gửi toàn bộ SSML trong một yêu cầu và trả về bytes MP3.
        Raises:
            ExternalServiceError: Khi API báo lỗi.
            EmptyResultError: Khi API không trả về audio.
        """
        log_prefix = "[TTS_SYNTHESIZE]"
        logger.debug(f"{log_prefix} Gửi SSML dài {len(ssml)} ký tự.")
        try:
            response = self.client.synthesize_speech(
                input=texttospeech.SynthesisInput(ssml=ssml),
                voice=texttospeech.VoiceSelectionParams(language_code=self.language_code),
                audio_config=texttospeech.AudioConfig(audio_encoding=texttospeech.AudioEncoding.MP3)
            )
        except Exception as e:
            raise ExternalServiceError("Tổng hợp giọng nói thất bại.", service_name="Google TTS", original_exception=e)
        audio_content = getattr(response, "audio_content", None)
        if not audio_content:
            raise EmptyResultError("Google TTS trả về audio rỗng.", service_name="Google TTS")
        logger.info(f"{log_prefix} Nhận được {len(audio_content)} bytes MP3.")
        return bytes(audio_content)


class TrackRenderer:
    """
    Ghép 3 bước: SSML -> audio MP3 -> file OGG/Opus.
    File trả về thuộc về bên gọi (thư viện giữ lại, chế độ tạo nhanh xóa sau khi gửi).
    """

    def __init__(self, synthesizer, source_voice, target_voice):
        self.synthesizer = synthesizer
        self.source_voice = source_voice
        self.target_voice = target_voice

    def render(self, pairs, pause_think, pause_between, output_dir):
        ssml = build_ssml(pairs, pause_think, pause_between, self.source_voice, self.target_voice)
        mp3_bytes = self.synthesizer.synthesize_mp3(ssml)
        return convert_mp3_bytes_to_ogg(mp3_bytes, output_dir)

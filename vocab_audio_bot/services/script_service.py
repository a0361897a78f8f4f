"""
Module tạo kịch bản từ vựng bằng mô hình ngôn ngữ (Google Gemini).
Gồm bộ tách cặp từ từ văn bản có thẻ <SOURCE>/<TARGET> và lớp ScriptGenerator
gọi API đúng một lần cho mỗi yêu cầu.
"""
import re
import logging

import google.generativeai as genai

from vocab_audio_bot.utils.exceptions import EmptyResultError, ExternalServiceError

logger = logging.getLogger(__name__)

SOURCE_TAG_PATTERN = re.compile(r"<SOURCE>(.*?)</SOURCE>", re.DOTALL)
TARGET_TAG_PATTERN = re.compile(r"<TARGET>(.*?)</TARGET>", re.DOTALL)

SYSTEM_INSTRUCTION = (
    "You are a vocabulary generator. Output ONLY single words, never phrases. "
    "Follow the formatting rules exactly."
)


def parse_pairs(script_text):
    """
    Tách các cặp từ từ văn bản trả về của mô hình.
    Các nội dung <SOURCE> và <TARGET> được lấy theo thứ tự xuất hiện, cắt khoảng trắng
    rồi ghép theo vị trí tới độ dài ngắn hơn. Thẻ hỏng hoặc thiếu thẻ đóng bị bỏ qua.
    Args:
        script_text (str): Văn bản thô (có thể None).
    Returns:
        list: Danh sách dict {'source': ..., 'target': ...}, có thể rỗng.
    """
    if not script_text:
        return []
    sources = [match.strip() for match in SOURCE_TAG_PATTERN.findall(script_text)]
    targets = [match.strip() for match in TARGET_TAG_PATTERN.findall(script_text)]
    return [{'source': source, 'target': target} for source, target in zip(sources, targets)]


def build_prompt(items_per_track, level, recent_avoid_list, source_lang_name, target_lang_name):
    """Xây dựng prompt yêu cầu mô hình sinh đúng items_per_track cặp từ."""
    lines = [
        f"Generate {items_per_track} vocabulary words for {source_lang_name} -> {target_lang_name} flashcards.",
        "",
        "Format each entry exactly like this:",
        "<SOURCE>word</SOURCE>",
        "<TARGET>translation</TARGET>",
        "",
        "STRICT RULES:",
        "- ONLY ONE WORD per entry - never two or more words",
        "- NO multi-word phrases or set expressions",
        "- Verbs: infinitive only",
        "- Nouns: singular form only",
        "- Adjectives: base form only",
        f"- Level: {level}",
        "- No slang, no numbering, no explanations",
    ]
    if recent_avoid_list:
        lines.append(f"- DO NOT repeat any {source_lang_name} entries from this recent list:")
        lines.extend(f"  - {word}" for word in recent_avoid_list)
    return "\n".join(lines).strip()


class ScriptGenerator:
    """Sinh danh sách cặp từ bằng Gemini; mỗi lần generate gọi API đúng một lần."""

    def __init__(self, api_key, model_name):
        self.model_name = model_name
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            system_instruction=SYSTEM_INSTRUCTION
        )
        logger.info(f"ScriptGenerator khởi tạo với model '{model_name}'.")

    def _complete(self, prompt):
        """Gọi mô hình và trả về văn bản thô."""
        try:
            response = self.model.generate_content(prompt)
            return response.text if response is not None else ""
        except Exception as e:
            raise ExternalServiceError("Không lấy được kết quả từ mô hình.", service_name="Gemini", original_exception=e)

    def generate(self, items_per_track, level, recent_avoid_list, source_lang_name, target_lang_name):
        """
        Sinh danh sách cặp từ cho một bài nghe.
        Không kiểm tra số lượng hay dạng từ; chỉ báo lỗi khi không tách được cặp nào.
        Raises:
            ExternalServiceError: Khi gọi API thất bại.
            EmptyResultError: Khi kết quả không chứa cặp từ hợp lệ nào.
        """
        log_prefix = "[SCRIPT_GENERATE]"
        prompt = build_prompt(items_per_track, level, recent_avoid_list, source_lang_name, target_lang_name)
        logger.info(f"{log_prefix} Yêu cầu {items_per_track} cặp từ (level {level}, tránh {len(recent_avoid_list or [])} từ).")
        raw = self._complete(prompt)
        pairs = parse_pairs(raw)
        if not pairs:
            logger.error(f"{log_prefix} Mô hình không trả về cặp từ nào. Raw: '{(raw or '')[:200]}'")
            raise EmptyResultError("Mô hình không trả về cặp từ nào tách được.", service_name="Gemini")
        logger.info(f"{log_prefix} Nhận được {len(pairs)} cặp từ.")
        return pairs

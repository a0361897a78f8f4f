"""
Module quản lý cài đặt theo chat (khoảng nghỉ suy nghĩ, khoảng nghỉ giữa cặp,
số từ mỗi bài). Cài đặt được tạo lười từ giá trị mặc định khi đọc lần đầu
và chỉ tồn tại trong bộ nhớ tiến trình.
"""
import logging

logger = logging.getLogger(__name__)


def clamp(value, lower, upper):
    return max(lower, min(upper, value))


class ChatSettingsStore:
    """
    Lưu cài đặt theo chat_id.
    Args:
        defaults (dict): {'pause_think', 'pause_between', 'items_per_track'}.
        limits (dict): Cùng các khóa, mỗi giá trị là tuple (min, max).
    """

    def __init__(self, defaults, limits):
        self.defaults = dict(defaults)
        self.limits = dict(limits)
        self._settings_by_chat = {}

    def get(self, chat_id):
        """Trả về bản sao cài đặt của chat (tạo từ mặc định nếu chưa có)."""
        settings = self._settings_by_chat.get(chat_id)
        if settings is None:
            settings = dict(self.defaults)
            self._settings_by_chat[chat_id] = settings
        return dict(settings)

    def _adjust(self, chat_id, key, delta):
        current = self.get(chat_id)
        lower, upper = self.limits[key]
        new_value = clamp(current[key] + delta, lower, upper)
        current[key] = new_value
        self._settings_by_chat[chat_id] = current
        logger.debug(f"[SETTINGS|Chat:{chat_id}] {key}: {new_value}")
        return new_value

    def adjust_pause_think(self, chat_id, delta):
        return self._adjust(chat_id, 'pause_think', delta)

    def adjust_pause_between(self, chat_id, delta):
        return self._adjust(chat_id, 'pause_between', delta)

    def adjust_items(self, chat_id, delta):
        return self._adjust(chat_id, 'items_per_track', delta)

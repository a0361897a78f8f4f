"""
Danh sách từ gần đây theo chat, dùng để tạo danh sách từ cần tránh
cho chế độ tạo bài nhanh. Từ cũ nhất bị loại trước khi vượt giới hạn.
"""


class RecentWordsStore:

    def __init__(self, max_recent=200):
        self.max_recent = max_recent
        self._words_by_chat = {}

    def get_recent(self, chat_id, count=120):
        """Trả về tối đa count từ mới nhất của chat (theo thứ tự thêm vào)."""
        words = self._words_by_chat.get(chat_id, [])
        if count <= 0:
            return []
        return words[-count:]

    def add_many(self, chat_id, words):
        # chuẩn hóa: cắt khoảng trắng, chữ thường, bỏ từ rỗng
        normalized = [word.strip().lower() for word in words if word and word.strip()]
        existing = self._words_by_chat.get(chat_id, []) + normalized
        self._words_by_chat[chat_id] = existing[-self.max_recent:] if self.max_recent > 0 else []

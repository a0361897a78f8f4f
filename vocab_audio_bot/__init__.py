"""Vocab Audio Bot: bot Telegram tạo và phát các bài nghe từ vựng song ngữ."""

__version__ = "0.1.0"

# Path: vocab_audio_bot/database/__init__.py
"""
Khởi tạo package 'database'.

Các module khác import trực tiếp từ module con cần thiết, ví dụ:
`from vocab_audio_bot.database.query_track import get_track`.
"""

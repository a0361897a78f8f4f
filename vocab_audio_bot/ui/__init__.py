# Path: vocab_audio_bot/ui/__init__.py
"""
Khởi tạo package 'ui'.
Chứa các hàm xây dựng nội dung tin nhắn và bàn phím inline.
"""

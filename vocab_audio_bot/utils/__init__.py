# Path: vocab_audio_bot/utils/__init__.py
"""
Khởi tạo package 'utils'.
Chứa các exception tùy chỉnh và các hàm tiện ích dùng chung cho handlers.
"""

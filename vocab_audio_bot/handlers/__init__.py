# Path: vocab_audio_bot/handlers/__init__.py
"""
Khởi tạo package 'handlers'.
Mỗi module con cung cấp hàm register_handlers(app) để main.py đăng ký.
"""

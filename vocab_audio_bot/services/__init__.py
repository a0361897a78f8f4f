# Path: vocab_audio_bot/services/__init__.py
"""
Khởi tạo package 'services'.

Package này chứa business logic cốt lõi (tạo kịch bản, tổng hợp giọng nói,
quản lý thư viện audio), tách biệt khỏi lớp giao diện (handlers)
và lớp truy cập dữ liệu (database).
"""

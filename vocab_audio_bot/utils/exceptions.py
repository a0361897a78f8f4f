"""
Module định nghĩa các lớp Exception tùy chỉnh cho Vocab Audio Bot.
Việc sử dụng các exception tùy chỉnh giúp phân loại lỗi rõ ràng hơn
và cho phép xử lý lỗi cụ thể ở các tầng cao hơn (handlers, jobs).
"""
class AppException(Exception):
    def __init__(self, message="Lỗi ứng dụng không xác định."):
        self.message = message
        super().__init__(self.message)
class DatabaseError(AppException):
    def __init__(self, message="Lỗi cơ sở dữ liệu.", original_exception=None):
        self.original_exception = original_exception
        full_message = f"{message} ({type(original_exception).__name__}: {original_exception})" if original_exception else message
        super().__init__(full_message)
class NotFoundError(AppException):
    def __init__(self, message="Không tìm thấy tài nguyên."):
        super().__init__(message)
class MissingAudioFileError(NotFoundError):
    def __init__(self, track_id=None, file_path=None, message="File audio của bài nghe không còn tồn tại."):
        self.track_id = track_id
        self.file_path = file_path
        if track_id:
            message = f"File audio của bài nghe ID {track_id} không còn tồn tại: {file_path}"
        super().__init__(message)
class ValidationError(AppException):
    def __init__(self, message="Dữ liệu đầu vào không hợp lệ.", field_name=None, details=None):
        if field_name:
            message = f"Dữ liệu không hợp lệ cho trường '{field_name}'."
        if details:
             message = f"{message} Chi tiết: {details}"
        super().__init__(message)
class ServiceError(AppException):
    def __init__(self, message="Lỗi xử lý nghiệp vụ.", service_name=None):
        if service_name:
            message = f"Lỗi trong service '{service_name}': {message}"
        super().__init__(message)
class ExternalServiceError(ServiceError):
    def __init__(self, message="Lỗi dịch vụ bên ngoài.", service_name="External", original_exception=None):
        self.original_exception = original_exception
        full_message = f"Lỗi gọi dịch vụ '{service_name}'. {message}"
        if original_exception:
             full_message = f"{full_message} ({type(original_exception).__name__}: {original_exception})"
        super().__init__(message=full_message, service_name=service_name)
class EmptyResultError(ServiceError):
    def __init__(self, message="Dịch vụ không trả về dữ liệu.", service_name=None):
        super().__init__(message=message, service_name=service_name)

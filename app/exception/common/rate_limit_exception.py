from app.exception.base_exception import BaseCustomException, ErrorCode


class OverRateLimitError(BaseCustomException):
    error_code = ErrorCode.RATE_LIMITED
    message = "リクエストが多すぎます。しばらくしてから再度お試しください"
    status_code = 429

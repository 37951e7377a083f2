from app.exception.base_exception import BaseCustomException, ErrorCode


class FetchError(BaseCustomException):
    """외부 사이트 호출 실패(네트워크/상태코드/타임아웃 등)"""
    error_code = ErrorCode.API_REQUEST_FAILED
    message = "外部サイトへのリクエストに失敗しました"
    status_code = 503

    def __init__(self, message: str = None, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status

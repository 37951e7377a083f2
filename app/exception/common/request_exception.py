from app.exception.base_exception import BaseCustomException, ErrorCode


class InvalidRequestError(BaseCustomException):
    """필수 파라미터 누락/형식 오류. 재시도 대상이 아님"""
    error_code = ErrorCode.COMMON_BAD_REQUEST
    message = "リクエストパラメータが不正です"
    status_code = 400


class UnknownResourceError(BaseCustomException):
    """레지스트리에 없는 리소스 ID. 요청 전체가 아니라 해당 레코드만 실패 처리"""
    error_code = ErrorCode.RESOURCE_NOT_FOUND
    message = "スタジオが見つかりません"
    status_code = 404

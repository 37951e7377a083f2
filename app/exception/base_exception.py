from enum import Enum


class ErrorCode(str, Enum):
    """
    애플리케이션 전반에서 사용하는 에러 코드 정의.
    형식: 카테고리(영문)-번호(3자리)
    """
    # 1. COMMON: 공통/일반 에러
    GENERIC_UNKNOWN = "GENERIC-000"
    COMMON_INTERNAL_ERROR = "COMMON-001"
    COMMON_BAD_REQUEST = "COMMON-002"
    RATE_LIMITED = "RATE-001"

    # 2. RESOURCE: 스튜디오/방 레지스트리 관련
    RESOURCE_NOT_FOUND = "RESOURCE-001"

    # 3. API: 외부 사이트 요청/통신 관련
    API_REQUEST_FAILED = "API-001"

    # 4. CRAWLER: 크롤러 실행/파싱 관련
    CRAWLER_EXECUTION_FAILED = "CRAWLER-001"
    CRAWLER_PARSING_FAILED = "CRAWLER-002"
    CRAWLER_AUTH_FAILED = "CRAWLER-003"  # 세션 상태 없음
    CRAWLER_TIMEOUT = "CRAWLER-004"      # 위임 서버 타임아웃
    CRAWLER_NAVIGATION_FAILED = "CRAWLER-005"  # 날짜/월 이동 횟수 초과


class BaseCustomException(Exception):
    """
    모든 커스텀 예외의 최상위 클래스.
    이 클래스를 상속받아 구체적인 예외를 정의해야 함.

    message는 그대로 각 결과 레코드의 error 필드에 실리므로
    사용자(일본어 UI)에게 보여줄 수 있는 문장으로 작성합니다.
    """
    error_code: ErrorCode = ErrorCode.GENERIC_UNKNOWN
    message: str = "不明なエラーが発生しました"
    status_code: int = 500

    def __init__(self, message: str = None, error_code: ErrorCode = None, status_code: int = None):
        if message:
            self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def error_code_value(self) -> str:
        return self.error_code.value if isinstance(self.error_code, Enum) else str(self.error_code)

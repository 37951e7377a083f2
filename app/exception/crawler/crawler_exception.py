from app.exception.base_exception import BaseCustomException, ErrorCode


class CrawlerException(BaseCustomException):
    """크롤링 로직 수행 중 발생하는 일반 예외.

    Rationale (의도):
        - 특정 사이트(BUZZ, 시민회관, CREA)에 종속되지 않는 공통적인 크롤링 오류를 처리합니다.
    """
    def __init__(self, message: str = "スクレイピングに失敗しました"):
        super().__init__(
            message=message,
            error_code=ErrorCode.CRAWLER_EXECUTION_FAILED,
            status_code=500
        )


class CrawlerParseError(BaseCustomException):
    """가져온 HTML/JSON에서 기대한 구조를 찾지 못했을 때 발생하는 예외.

    Rationale (의도):
        - "빈 결과"와 "파싱 실패"를 구분하기 위해 사용합니다.
          테이블 자체가 없으면 사이트 마크업이 바뀐 것으로 보고 에러로 보고합니다.
    """
    def __init__(self, message: str = "ページの解析に失敗しました"):
        super().__init__(
            message=message,
            error_code=ErrorCode.CRAWLER_PARSING_FAILED,
            status_code=500
        )


class NavigationTimeoutError(BaseCustomException):
    """달력 이동 루프가 정해진 횟수 안에 목표 날짜/월에 도달하지 못했을 때 발생하는 예외.

    Rationale (의도):
        - 벽시계 타임아웃이 아니라 이동 횟수로 제한합니다.
          느린 네트워크에서도 같은 횟수만큼 시도하도록 보장합니다.
    """
    def __init__(self, message: str = "指定日付まで移動できませんでした"):
        super().__init__(
            message=message,
            error_code=ErrorCode.CRAWLER_NAVIGATION_FAILED,
            status_code=504
        )


class AuthUnavailableError(BaseCustomException):
    """브라우저 크롤러에 필요한 세션 상태(쿠키/스토리지)가 없을 때 발생하는 예외.

    Rationale (의도):
        - 해당 어댑터만 실패시키고 다른 사이트 조회에는 영향을 주지 않습니다.
    """
    def __init__(self, message: str = "認証情報が見つかりません"):
        super().__init__(
            message=message,
            error_code=ErrorCode.CRAWLER_AUTH_FAILED,
            status_code=401
        )


class DelegateTimeoutError(BaseCustomException):
    """위임 스크래핑 서버 호출이 제한 시간을 넘겼을 때 발생하는 예외."""
    def __init__(self, message: str = "スクレイピングサーバーがタイムアウトしました"):
        super().__init__(
            message=message,
            error_code=ErrorCode.CRAWLER_TIMEOUT,
            status_code=504
        )

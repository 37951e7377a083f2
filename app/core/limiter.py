"""
Rate Limiter 모듈

대상 예약 사이트들은 느리고 요청 빈도에 민감하므로, 집계 API 호출 횟수를
클라이언트 IP 기준으로 제한합니다. 순환 임포트를 피하기 위해 여기서 한 번만 생성합니다.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.config import RATE_LIMIT_PER_MINUTE

AVAILABILITY_RATE_LIMIT = f"{RATE_LIMIT_PER_MINUTE}/minute"

limiter = Limiter(key_func=get_remote_address)

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from app.api.dependencies import get_availability_service
from app.core.limiter import limiter, AVAILABILITY_RATE_LIMIT
from app.models.dto import AggregatedResponse
from app.services.availability_service import AvailabilityService
from app.validate.request_validator import validate_availability_request

router = APIRouter()


@router.get("/availability", response_model=AggregatedResponse)
@router.get("/api/availability", response_model=AggregatedResponse)
@limiter.limit(AVAILABILITY_RATE_LIMIT)
async def get_availability(
    request: Request,
    resources: Optional[str] = Query(None, description="Comma separated resource ids"),
    studios: Optional[str] = Query(None, description="Alias of resources"),
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    window: Optional[str] = Query(None, description="start,end (HH:MM or minutes)"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """
    여러 스튜디오의 공실을 한 번에 조회합니다.

    - 파라미터 검증 실패는 크롤링 전에 400으로 응답 (전역 핸들러)
    - 개별 사이트 실패는 해당 레코드의 error로만 표시되고 응답은 200
    """
    req = validate_availability_request(resources or studios, date, window)
    return await service.check_availability(req)

"""
스튜디오 공실 집계 서비스

세 예약 사이트(BUZZ, 福岡市民会館, CREA)의 크롤러를 어댑터 종류(kind)별로 묶어
동시에 실행하고, 요청한 리소스 순서대로 하나의 응답으로 합칩니다.

주요 기능:
- kind 그룹 단위 병렬 실행 (한 그룹의 실패는 그 그룹 레코드에만 error로 남음)
- 알 수 없는 리소스 ID는 resourceName="unknown" 레코드로 응답 (다른 리소스에 영향 없음)
- 시간대(window) 필터는 수집이 끝난 뒤 레코드별로 적용
"""

from __future__ import annotations
import asyncio
import logging
from collections import OrderedDict
from typing import Dict, List

import httpx

from app.crawler.base import BaseCrawler
from app.exception.base_exception import BaseCustomException, ErrorCode
from app.exception.common.request_exception import UnknownResourceError
from app.exception.crawler.crawler_exception import CrawlerParseError
from app.models.dto import (
    AggregatedResponse, AvailabilityRequest, ResourceDescriptor, ResourceResult,
    TableAvailability, HallAvailability, PricedAvailability, UnknownAvailability,
)
from app.services.time_window import filter_by_window
from app.utils.resource_loader import get_catalog, load_resources
from app.validate.date_validator import day_of_week

logger = logging.getLogger("app")

_RECORD_TYPES = {
    "table": TableAvailability,
    "range": HallAvailability,
    "priced": PricedAvailability,
}


class AvailabilityService:
    """공실 집계 서비스.

    크롤러 맵을 주입받아(kind -> BaseCrawler) 테스트에서 가짜 크롤러로 바꿀 수 있습니다.

    사용 예시:
        >>> service = AvailabilityService(registry.get_all_map(), client)
        >>> response = await service.check_availability(request)
    """

    def __init__(self, crawlers_map: dict[str, BaseCrawler], client: httpx.AsyncClient):
        self.crawlers_map = crawlers_map
        self.client = client

    async def check_availability(self, request: AvailabilityRequest) -> AggregatedResponse:
        registry_map = load_resources()

        # 1. 알려진 리소스만 kind 별로 묶기 (요청 순서 유지, 중복 제거)
        groups: Dict[str, List[ResourceDescriptor]] = OrderedDict()
        for resource_id in request.resourceIds:
            resource = registry_map.get(resource_id)
            if resource is None:
                continue
            group = groups.setdefault(resource.kind, [])
            if resource not in group:
                group.append(resource)

        # 2. 그룹 동시 실행
        kinds = list(groups.keys())
        group_results = await asyncio.gather(*[
            self._run_group(kind, request.date, groups[kind]) for kind in kinds
        ])

        by_id: Dict[str, ResourceResult] = {}
        for kind, results in zip(kinds, group_results):
            for resource, result in zip(groups[kind], results):
                by_id[resource.id] = result

        self._log_errors(list(by_id.values()), request.date)

        # 3. 요청 순서대로 레코드 조립 + 시간대 필터
        records = []
        for resource_id in request.resourceIds:
            resource = registry_map.get(resource_id)
            if resource is None:
                records.append(self._unknown_record(resource_id, request.date))
                continue
            record = self._to_record(resource, by_id[resource.id], request.date)
            records.append(self._apply_window(resource, record, request))

        return AggregatedResponse(
            date=request.date,
            dayOfWeek=day_of_week(request.date),
            window=request.window,
            results=records,
            resourceCatalog=get_catalog(),
        )

    async def _run_group(self, kind: str, date: str, resources: List[ResourceDescriptor]) -> List[ResourceResult]:
        """크롤러 하나를 실행. 예외를 던지거나 결과 개수가 어긋나면 그룹 전체를 에러로 채움"""
        crawler = self.crawlers_map.get(kind)
        if crawler is None:
            error = BaseCustomException(
                message=f"{kind} のクローラーが登録されていません",
                error_code=ErrorCode.CRAWLER_EXECUTION_FAILED,
            )
            return [error for _ in resources]

        try:
            results = list(await crawler.check_availability(self.client, date, resources))
        except Exception as e:
            return [e for _ in resources]

        if len(results) != len(resources):
            error = Exception(f"{kind} クローラーの結果件数が一致しません ({len(results)}/{len(resources)})")
            return [error for _ in resources]
        return results

    def _to_record(self, resource: ResourceDescriptor, result: ResourceResult, date: str):
        if not isinstance(result, Exception):
            return result

        if isinstance(result, BaseCustomException):
            message = result.message
        else:
            message = str(result) or "スクレイピングに失敗しました"
        record_type = _RECORD_TYPES[resource.kind]
        return record_type(
            resourceId=resource.id,
            resourceName=resource.name,
            date=date,
            dayOfWeek=day_of_week(date),
            error=message,
        )

    def _apply_window(self, resource: ResourceDescriptor, record, request: AvailabilityRequest):
        """시간대 필터를 레코드 하나에만 적용. 시각 표기를 읽지 못하면 그 레코드만 error"""
        try:
            return filter_by_window(record, request.window)
        except ValueError as e:
            error = CrawlerParseError(f"時刻の解析に失敗しました: {e}")
            logger.warning({
                "timestamp": request.date,
                "status": error.status_code,
                "errorCode": error.error_code_value,
                "message": error.message,
                "resourceId": resource.id,
            })
            return self._to_record(resource, error, request.date)

    def _unknown_record(self, resource_id: str, date: str) -> UnknownAvailability:
        error = UnknownResourceError()
        logger.warning({
            "timestamp": date,
            "status": error.status_code,
            "errorCode": error.error_code_value,
            "message": error.message,
            "resourceId": resource_id,
        })
        return UnknownAvailability(
            resourceId=resource_id,
            resourceName="unknown",
            date=date,
            dayOfWeek=day_of_week(date),
            error=error.message,
        )

    def _log_errors(self, results: list[ResourceResult], date_context: str):
        """
        크롤러 결과 중 Exception만 골라 로깅합니다.
        BaseCustomException은 warning, 그 외 예상치 못한 에러는 error 레벨.
        """
        seen = set()
        for err in results:
            if not isinstance(err, Exception) or id(err) in seen:
                continue
            seen.add(id(err))
            if isinstance(err, BaseCustomException):
                logger.warning({
                    "timestamp": date_context,
                    "status": err.status_code,
                    "errorCode": err.error_code_value,
                    "message": err.message,
                })
            else:
                logger.error({
                    "timestamp": date_context,
                    "status": 500,
                    "errorCode": ErrorCode.COMMON_INTERNAL_ERROR.value,
                    "message": str(err),
                })

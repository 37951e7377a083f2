from abc import ABC, abstractmethod
from typing import List

import httpx

from app.models.dto import ResourceDescriptor, ResourceResult


class BaseCrawler(ABC):
    """
    모든 크롤러가 구현해야 하는 기본 인터페이스.

    새로운 예약 사이트 크롤러를 추가할 때:
    1. 이 클래스를 상속받아 구현
    2. check_availability 메서드 구현
    3. 모듈 하단에서 registry.register()로 어댑터 종류(kind)에 등록

    Example:
        class NewCrawler(BaseCrawler):
            async def check_availability(self, client, date, resources):
                # 구현
                pass

        registry.register("table", NewCrawler())
    """
    @abstractmethod
    async def check_availability(
        self,
        client: httpx.AsyncClient,
        date: str,
        resources: List[ResourceDescriptor],
    ) -> List[ResourceResult]:
        """
        주어진 날짜에 대한 리소스(스튜디오) 별 빈 슬롯을 조회.

        Args:
            client: 앱 수명 동안 재사용하는 httpx.AsyncClient
            date: 조회할 날짜 (YYYY-MM-DD 형식)
            resources: 조회할 리소스 정보 리스트 (모두 같은 kind)

        Returns:
            resources와 같은 순서의 리스트
            - 성공 시: kind에 맞는 정규화 레코드 (TableAvailability 등)
            - 실패 시: Exception 반환 (로깅 후 error 레코드로 변환)
        """
        pass

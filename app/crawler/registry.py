from __future__ import annotations
import logging
from threading import Lock
from typing import Dict

from app.crawler.base import BaseCrawler

logger = logging.getLogger("app")


class CrawlerRegistry:
    """어댑터 종류(kind) -> 크롤러 인스턴스를 관리하는 싱글톤 레지스트리.

    각 크롤러 모듈은 import 시점에 자기 kind로 등록합니다.
    위임 서버가 설정된 경우 remote_checker가 같은 kind에 다시 등록하여
    로컬 브라우저 크롤러를 대체합니다 (나중에 등록한 쪽이 우선).
    """
    _instance: CrawlerRegistry | None = None
    _lock: Lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._crawlers = {}
        return cls._instance

    def register(self, kind: str, crawler: BaseCrawler) -> None:
        """크롤러를 kind에 등록. 이미 등록된 kind면 교체합니다.

        Args:
            kind: 어댑터 종류 ("table", "range", "priced")
            crawler: BaseCrawler를 상속받은 크롤러 인스턴스
        """
        previous = self._crawlers.get(kind)
        if previous is not None and previous is not crawler:
            logger.info({
                "message": "crawler replaced",
                "kind": kind,
                "previous": type(previous).__name__,
                "current": type(crawler).__name__,
            })
        self._crawlers[kind] = crawler

    def get(self, kind: str) -> BaseCrawler | None:
        return self._crawlers.get(kind)

    def get_all_map(self) -> Dict[str, BaseCrawler]:
        """등록된 크롤러 맵 복사본 반환 (원본 수정 방지)."""
        return self._crawlers.copy()


# Global singleton instance
registry = CrawlerRegistry()

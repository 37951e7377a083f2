import json
import logging
from functools import lru_cache
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from app.core.paths import pkg_data_path
from app.models.dto import CatalogEntry, ResourceDescriptor, AdapterKind

logger = logging.getLogger("app")


def _read_resources_file() -> list:
    resources_file = pkg_data_path("resources.json")
    try:
        with resources_file.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(
            "resources.json not found",
            extra={"status": 500, "errorCode": "COMMON-001"}
        )
        raise
    except json.JSONDecodeError:
        logger.error(
            "resources.json decode error",
            extra={"status": 500, "errorCode": "COMMON-001"}
        )
        raise
    except OSError:
        logger.error(
            "resources.json IO error",
            extra={"status": 500, "errorCode": "COMMON-001"}
        )
        raise


@lru_cache(maxsize=1)
def load_resources() -> Mapping[str, ResourceDescriptor]:
    """
    정적 리소스 레지스트리를 한 번만 읽어 읽기 전용 맵으로 반환합니다.
    (키: 리소스 ID, 값: ResourceDescriptor, 파일에 적힌 순서 유지)
    """
    descriptors = {}
    for raw in _read_resources_file():
        descriptor = ResourceDescriptor(**raw)
        if descriptor.id in descriptors:
            raise ValueError(f"duplicated resource id in resources.json: {descriptor.id}")
        descriptors[descriptor.id] = descriptor
    return MappingProxyType(descriptors)


def get_resource(resource_id: str) -> Optional[ResourceDescriptor]:
    return load_resources().get(resource_id)


def get_resources_by_kind(kind: AdapterKind) -> List[ResourceDescriptor]:
    return [r for r in load_resources().values() if r.kind == kind]


def get_catalog() -> List[CatalogEntry]:
    return [
        CatalogEntry(id=r.id, name=r.name, kind=r.kind, studioCount=r.studioCount)
        for r in load_resources().values()
    ]


@lru_cache(maxsize=1)
def get_crea_public_id_map() -> Mapping[str, Tuple[str, str]]:
    """예약 플랫폼 public id -> (스튜디오 리소스 ID, slotType) 역방향 조회표"""
    lookup = {}
    for resource in get_resources_by_kind("priced"):
        for slot in resource.priced_slots:
            lookup[slot.publicId] = (resource.id, slot.slotType)
    return MappingProxyType(lookup)

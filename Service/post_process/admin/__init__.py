"""
Service/post_process/admin/__init__.py

행정구역 속성 부여를 위한 공간 인덱스 및 처리 모듈들을 외부로 노출합니다.
"""
from .processor import AdminProcessor
from .index import RegionEntry, SpatialIndex, collect_entries

__all__ = [
    "AdminProcessor",
    "RegionEntry",
    "SpatialIndex",
    "collect_entries",
]

"""
Service/post_process/admin/index.py

행정구역 폴리곤 엔트리를 수집하고 경계 상자 기반 공간 인덱스를 일괄 구축하는 모듈입니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

import numpy as np
import shapely
from shapely.geometry import Polygon
from shapely.strtree import STRtree

from Service.post_process.feature import Envelope, ReferenceDatasource
from Service.post_process.geometry_adapter import polygon_parts

# R-tree 노드당 최대 엔트리 수
NODE_CAPACITY = 16


@dataclass(frozen=True)
class RegionEntry:
    """참조 폴리곤, 부여할 속성값, 우선순위(0이 최우선)를 묶은 엔트리입니다."""
    polygon: Polygon
    value: Any
    index: int


def collect_entries(datasource: ReferenceDatasource, envelope: Envelope, field_name: str) -> List[RegionEntry]:
    """
    데이터소스에서 범위와 교차하는 피처를 조회하여 반환 순서대로 우선순위를 부여합니다.

    폴리곤이 아닌 지오메트리는 버립니다.
    """
    entries: List[RegionEntry] = []
    for feature in datasource.features(envelope):
        value = feature.get(field_name)
        for geom in feature.geometries:
            for polygon in polygon_parts(geom):
                entries.append(RegionEntry(polygon=polygon, value=value, index=len(entries)))
    return entries


class SpatialIndex:
    """
    엔트리 경계 상자에 대한 읽기 전용 STR 패킹 인덱스입니다.

    한 번의 속성 부여 호출 동안만 사용하며 호출 간에 재사용하지 않습니다.
    """

    def __init__(self, entries: Sequence[RegionEntry]):
        self._entries = list(entries)
        self._tree = None
        if self._entries:
            boxes = [shapely.box(*entry.polygon.bounds) for entry in self._entries]
            self._tree = STRtree(boxes, node_capacity=NODE_CAPACITY)

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, entry_id: int) -> RegionEntry:
        return self._entries[entry_id]

    def query(self, bounds: Sequence[float]) -> List[int]:
        """주어진 경계 상자와 겹치는 엔트리 번호를 오름차순으로 반환합니다."""
        if self._tree is None:
            return []
        hits = self._tree.query(shapely.box(*bounds))
        return [int(i) for i in np.sort(hits)]

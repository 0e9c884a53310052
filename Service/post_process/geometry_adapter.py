"""
Service/post_process/geometry_adapter.py

외부 지오메트리(GeoDataFrame의 shapely 객체)를 피처 파트 단위 및 엔진 내부 형식으로 변환하고 다시 복원하는 어댑터 모듈입니다.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
import shapely
from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.base import BaseGeometry

# 연속 중복 정점으로 간주하는 좌표 허용 오차
DUPLICATE_VERTEX_TOLERANCE = 1e-12

_SINGLE_TYPES = (Point, LineString, Polygon)


def explode_geometry(geom: Optional[BaseGeometry]) -> List[BaseGeometry]:
    """멀티/컬렉션 지오메트리를 단일 파트 목록으로 분해합니다. 빈 지오메트리는 버립니다."""
    if geom is None or geom.is_empty:
        return []
    if isinstance(geom, _SINGLE_TYPES):
        return [geom]

    parts: List[BaseGeometry] = []
    for part in shapely.get_parts(geom):
        parts.extend(explode_geometry(part))
    return parts


def assemble_geometry(geoms: Iterable[BaseGeometry]) -> Optional[BaseGeometry]:
    """피처의 파트 목록을 하나의 (멀티) 지오메트리로 다시 묶습니다."""
    parts = [g for g in geoms if g is not None and not g.is_empty]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]

    if all(isinstance(g, Point) for g in parts):
        return MultiPoint(parts)
    if all(isinstance(g, LineString) for g in parts):
        return MultiLineString(parts)
    if all(isinstance(g, Polygon) for g in parts):
        return MultiPolygon(parts)
    return GeometryCollection(parts)


def to_engine_geometry(geom: Optional[BaseGeometry]) -> Optional[BaseGeometry]:
    """
    피처 지오메트리를 교차 판정용 엔진 형식으로 변환합니다.

    점은 MultiPoint, 선은 MultiLineString, 면은 홀을 포함한 Polygon이 되며 연속 중복 정점은 제거됩니다.
    지원하지 않는 타입이거나 빈 지오메트리면 None을 반환합니다.
    """
    if geom is None or geom.is_empty:
        return None

    if isinstance(geom, (Point, MultiPoint)):
        return MultiPoint(list(shapely.get_parts(geom)))

    if isinstance(geom, (LineString, MultiLineString, Polygon)):
        cleaned = shapely.remove_repeated_points(geom, tolerance=DUPLICATE_VERTEX_TOLERANCE)
        if cleaned is None or cleaned.is_empty:
            return None
        if isinstance(cleaned, LineString):
            return MultiLineString([cleaned])
        return cleaned

    return None


def any_part_intersects(engine_geom: BaseGeometry, polygon: BaseGeometry) -> bool:
    """엔진 지오메트리의 파트 중 하나라도 폴리곤과 교차하면 True를 반환합니다."""
    parts = shapely.get_parts(engine_geom)
    if len(parts) == 0:
        return False
    return bool(np.any(shapely.intersects(parts, polygon)))


def polygon_parts(geom: Optional[BaseGeometry]) -> List[Polygon]:
    """참조 지오메트리에서 폴리곤 파트만 추출합니다. 그 외 타입은 무시합니다."""
    return [g for g in explode_geometry(geom) if isinstance(g, Polygon)]


def line_coords(line: LineString) -> List[tuple]:
    """선형 객체의 정점 좌표를 (x, y) 튜플 목록으로 반환합니다."""
    return [(float(c[0]), float(c[1])) for c in line.coords]

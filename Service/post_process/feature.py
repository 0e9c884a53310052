"""
Service/post_process/feature.py

후처리 엔진이 다루는 피처(Feature)와 외곽 범위(Envelope), 참조 데이터소스 규약을 정의합니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Tuple

import shapely
from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True)
class Envelope:
    """축 정렬 경계 상자(minx, miny, maxx, maxy)입니다."""
    minx: float
    miny: float
    maxx: float
    maxy: float

    @classmethod
    def from_bounds(cls, bounds: Iterable[float]) -> "Envelope":
        minx, miny, maxx, maxy = (float(v) for v in bounds)
        return cls(minx, miny, maxx, maxy)

    @property
    def width(self) -> float:
        return self.maxx - self.minx

    @property
    def height(self) -> float:
        return self.maxy - self.miny

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.minx, self.miny, self.maxx, self.maxy)

    def expand_to_include(self, other: "Envelope") -> "Envelope":
        return Envelope(
            min(self.minx, other.minx),
            min(self.miny, other.miny),
            max(self.maxx, other.maxx),
            max(self.maxy, other.maxy),
        )

    def intersects(self, other: "Envelope") -> bool:
        return not (
            other.minx > self.maxx or other.maxx < self.minx
            or other.miny > self.maxy or other.maxy < self.miny
        )

    def to_box(self) -> BaseGeometry:
        return shapely.box(self.minx, self.miny, self.maxx, self.maxy)


@dataclass
class Feature:
    """
    하나의 레이어 피처입니다. 지오메트리 목록과 속성 맵을 보유하며 외곽 범위를 캐시합니다.

    지오메트리 변경은 반드시 이 클래스의 메서드를 통해 수행해야 캐시가 무효화됩니다.
    """
    id: int
    geometries: List[BaseGeometry] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)
    _envelope: Optional[Envelope] = field(default=None, init=False, repr=False, compare=False)

    # 속성 접근
    def has_key(self, key: str) -> bool:
        return key in self.attributes

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    # 지오메트리 접근
    def num_geometries(self) -> int:
        return len(self.geometries)

    def get_geometry(self, index: int) -> BaseGeometry:
        return self.geometries[index]

    def set_geometry(self, index: int, geom: BaseGeometry) -> None:
        self.geometries[index] = geom
        self._envelope = None

    def add_geometry(self, geom: BaseGeometry) -> None:
        self.geometries.append(geom)
        self._envelope = None

    def remove_geometry(self, index: int) -> None:
        del self.geometries[index]
        self._envelope = None

    def envelope(self) -> Optional[Envelope]:
        """모든 지오메트리를 포함하는 외곽 범위를 반환합니다. 지오메트리가 없으면 None입니다."""
        if self._envelope is None:
            geoms = [g for g in self.geometries if g is not None and not g.is_empty]
            if not geoms:
                return None
            self._envelope = Envelope.from_bounds(shapely.total_bounds(geoms))
        return self._envelope


class ReferenceDatasource(Protocol):
    """행정구역 폴리곤을 제공하는 참조 데이터소스 규약입니다."""

    def features(self, envelope: Envelope) -> Iterator[Feature]:
        ...


def layer_envelope(layer: Iterable[Feature]) -> Optional[Envelope]:
    """레이어 전체 피처의 통합 외곽 범위를 계산합니다. 지오메트리가 없는 피처는 무시합니다."""
    result: Optional[Envelope] = None
    for feature in layer:
        env = feature.envelope()
        if env is None:
            continue
        result = env if result is None else result.expand_to_include(env)
    return result

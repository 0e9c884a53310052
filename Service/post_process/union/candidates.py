"""
Service/post_process/union/candidates.py

선형 피처의 양 끝점을 병합 후보로 추출하고, 좌표와 태그 값이 같은 후보끼리 묶어 병합 가능한 쌍을 제안하는 모듈입니다.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from itertools import combinations, groupby
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from shapely.geometry import LineString

from Service.config import UnionHeuristic
from Service.post_process.feature import Feature
from Service.post_process.geometry_adapter import line_coords


class Position(Enum):
    FRONT = "front"
    BACK = "back"


@dataclass(frozen=True)
class EndpointCandidate:
    """
    선형 지오메트리 한쪽 끝점에 대한 병합 후보입니다.

    feature_index 는 레이어 리스트에서의 위치이며, 한 라운드 동안만 유효합니다.
    """
    position: Position
    geometry_index: int
    feature_index: int
    directional: bool
    x: float
    y: float
    dx: float = 0.0
    dy: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.dx == 0.0 and self.dy == 0.0


@dataclass
class CandidatePair:
    first: EndpointCandidate
    second: EndpointCandidate
    score: int = 0


class CurveApproximator:
    """
    끝점에서 바깥쪽으로 정점을 따라가며 곡선의 진행 방향을 하나의 벡터로 근사합니다.

    축별 샘플링 예산을 모두 쓰면 더 이상 정점을 받지 않습니다.
    """
    SQ_LENGTH_TOLERANCE = 1e-5

    def __init__(self, x: float, y: float, consume_x: float, consume_y: float):
        self._prev = (x, y)
        self._consume_x = consume_x
        self._consume_y = consume_y
        self._total_weight = 0.0
        self._samples: List[Tuple[float, float, float]] = []

    def consume(self, x: float, y: float) -> bool:
        """다음 정점을 소비합니다. 예산이 남아 있으면 True를 반환합니다."""
        offset_x = x - self._prev[0]
        offset_y = y - self._prev[1]
        x_diff = abs(offset_x)
        y_diff = abs(offset_y)

        # 예산을 넘는 구간은 남은 예산 지점까지 비례 절단
        if x_diff > self._consume_x:
            y_diff = (y_diff / x_diff) * self._consume_x
            x_diff = self._consume_x
        if y_diff > self._consume_y:
            x_diff = (x_diff / y_diff) * self._consume_y
            y_diff = self._consume_y

        self._consume_x -= x_diff
        self._consume_y -= y_diff

        sample_x = math.copysign(x_diff, offset_x)
        sample_y = math.copysign(y_diff, offset_y)
        weight = sample_x * sample_x + sample_y * sample_y
        self._samples.append((sample_x, sample_y, weight))
        self._total_weight += weight
        self._prev = (x, y)

        return self._consume_x > 0 and self._consume_y > 0

    def approximation(self) -> Tuple[float, float]:
        """구간 길이 제곱으로 가중 평균한 방향 벡터를 반환합니다. 길이가 거의 0이면 (0, 0)입니다."""
        if abs(self._total_weight) < self.SQ_LENGTH_TOLERANCE:
            return 0.0, 0.0

        scale = 1.0 / self._total_weight
        dx = sum(sx * w for sx, _, w in self._samples) * scale
        dy = sum(sy * w for _, sy, w in self._samples) * scale
        return dx, dy


class CandidateExtractor:
    """
    병합 대상 태그를 모두 가진 피처에서 선형 지오메트리의 앞/뒤 끝점 후보를 생성합니다.
    """

    def __init__(
            self,
            match_tags: Sequence[str],
            preserve_direction_tags: Sequence[str],
            heuristic: UnionHeuristic,
    ):
        self._match_tags = tuple(match_tags)
        self._direction_tags = tuple(preserve_direction_tags)
        self._needs_direction = heuristic in (UnionHeuristic.OBTUSE, UnionHeuristic.ACUTE)

    def extract(self, layer: Sequence[Feature], sample_distance: Tuple[float, float]) -> List[EndpointCandidate]:
        candidates: List[EndpointCandidate] = []
        for feature_index, feature in enumerate(layer):
            if not self._unionable(feature):
                continue

            directional = any(feature.has_key(tag) for tag in self._direction_tags)
            for geometry_index, geom in enumerate(feature.geometries):
                if not isinstance(geom, LineString) or geom.is_empty:
                    continue
                coords = line_coords(geom)
                if len(coords) < 2:
                    continue
                for position in (Position.FRONT, Position.BACK):
                    candidates.append(
                        self._make_candidate(position, geometry_index, feature_index, directional, coords, sample_distance)
                    )
        return candidates

    def _unionable(self, feature: Feature) -> bool:
        """지오메트리가 있고 모든 병합 태그를 보유한 피처인지 확인합니다."""
        if feature.num_geometries() == 0:
            return False
        return all(feature.has_key(tag) for tag in self._match_tags)

    def _make_candidate(
            self,
            position: Position,
            geometry_index: int,
            feature_index: int,
            directional: bool,
            coords: List[Tuple[float, float]],
            sample_distance: Tuple[float, float],
    ) -> EndpointCandidate:
        walk = coords if position is Position.FRONT else coords[::-1]
        x, y = walk[0]

        dx = dy = 0.0
        if self._needs_direction:
            approximator = CurveApproximator(x, y, sample_distance[0], sample_distance[1])
            for px, py in walk[1:]:
                if not approximator.consume(px, py):
                    break
            dx, dy = approximator.approximation()

        return EndpointCandidate(position, geometry_index, feature_index, directional, x, y, dx, dy)


def _value_key(value: Any) -> Tuple[int, Any]:
    """서로 다른 타입의 속성값도 비교할 수 있도록 null < 숫자 < 문자열 < 기타 순서의 키를 만듭니다."""
    if value is None:
        return 0, 0
    if isinstance(value, (bool, int, float)):
        if isinstance(value, float) and math.isnan(value):
            return 0, 0
        return 1, float(value)
    if isinstance(value, str):
        return 2, value
    return 3, str(value)


def order_candidates(
        candidates: Sequence[EndpointCandidate],
        layer: Sequence[Feature],
        match_tags: Sequence[str],
) -> List[Tuple[tuple, EndpointCandidate]]:
    """후보를 (x, y, 병합 태그 값) 순으로 안정 정렬하여 (정렬 키, 후보) 목록으로 반환합니다."""
    keyed = []
    for candidate in candidates:
        feature = layer[candidate.feature_index]
        tag_key = tuple(_value_key(feature.get(tag)) for tag in match_tags)
        keyed.append(((candidate.x, candidate.y, tag_key), candidate))
    keyed.sort(key=lambda item: item[0])
    return keyed


def make_pair(a: EndpointCandidate, b: EndpointCandidate) -> Optional[CandidatePair]:
    """두 후보가 병합 가능한 조합이면 쌍을 만들고, 아니면 None을 반환합니다."""
    # 같은 지오메트리의 양 끝(닫힌 고리)은 자기 자신과 병합하지 않음
    if a.feature_index == b.feature_index and a.geometry_index == b.geometry_index:
        return None
    if a.directional != b.directional:
        return None
    # 방향 유지 피처는 앞-뒤 연결만 허용
    if a.directional and a.position == b.position:
        return None
    return CandidatePair(a, b)


def propose_pairs(
        candidates: Sequence[EndpointCandidate],
        layer: Sequence[Feature],
        match_tags: Sequence[str],
) -> Iterator[CandidatePair]:
    """끝점 좌표와 태그 값이 같은 그룹 안에서 가능한 모든 쌍을 제안합니다."""
    ordered = order_candidates(candidates, layer, match_tags)
    for _key, group in groupby(ordered, key=lambda item: item[0]):
        members = [candidate for _, candidate in group]
        for a, b in combinations(members, 2):
            pair = make_pair(a, b)
            if pair is not None:
                yield pair

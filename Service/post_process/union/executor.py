"""
Service/post_process/union/executor.py

점수순으로 정렬된 후보 쌍을 실제로 병합하여 지오메트리를 이어 붙이고 속성을 조정하는 모듈입니다.
"""
from __future__ import annotations

from collections import Counter
from typing import List, Sequence, Set

from shapely.geometry import LineString

from Common.log import Log
from Service.config import TagStrategy
from Service.post_process.feature import Feature
from Service.post_process.geometry_adapter import line_coords

from .candidates import CandidatePair, Position
from .strategies import ScoredPairs


class UnionExecutor:
    """
    한 라운드의 병합을 수행합니다. 결과 지오메트리는 항상 쌍의 첫 번째 피처에 남습니다.
    """

    def __init__(self, logger: Log, strategy: TagStrategy):
        self._logger = logger
        self._strategy = strategy

    def execute(self, layer: Sequence[Feature], scored: ScoredPairs) -> int:
        """
        점수 오름차순으로 쌍을 병합하고, 이번 라운드에 사용된 피처 ID 수를 반환합니다.

        이미 병합에 사용된 피처가 포함된 쌍은 건너뜁니다.
        """
        consumed: Set[int] = set()
        shapes: Counter = Counter()
        for pair in scored:
            first = layer[pair.first.feature_index]
            second = layer[pair.second.feature_index]
            if first.id in consumed or second.id in consumed:
                continue

            shapes[_shape_of(pair)] += 1
            pair = self._do_union(layer, pair)
            self._reconcile_tags(layer[pair.first.feature_index], layer[pair.second.feature_index])

            consumed.add(first.id)
            consumed.add(second.id)

        if shapes:
            self._logger.log(
                "[Unionizer:Execute] 병합 형태 "
                + " ".join(f"{shape}={shapes[shape]}" for shape in ("front-back", "back-back", "front-front")),
                level="DEBUG",
            )
        return len(consumed)

    def _do_union(self, layer: Sequence[Feature], pair: CandidatePair) -> CandidatePair:
        """지오메트리를 병합하고, 정규화된(결과가 첫 번째에 있는) 쌍을 반환합니다."""
        if pair.first.position != pair.second.position:
            # 항상 뒤쪽 끝을 가진 쪽에 앞쪽 끝을 가진 쪽을 이어 붙임
            if pair.second.position is Position.BACK:
                pair = CandidatePair(pair.second, pair.first, pair.score)
            self._append(layer, pair, reverse=False)
        elif pair.first.position is Position.BACK:
            self._append(layer, pair, reverse=True)
        else:
            self._join_fronts(layer, pair)
        return pair

    def _append(self, layer: Sequence[Feature], pair: CandidatePair, reverse: bool) -> None:
        dst_feature = layer[pair.first.feature_index]
        src_feature = layer[pair.second.feature_index]

        dst = line_coords(dst_feature.get_geometry(pair.first.geometry_index))
        src = line_coords(src_feature.get_geometry(pair.second.geometry_index))
        if reverse:
            src = src[::-1]

        # 공유 끝점은 한 번만 포함
        dst_feature.set_geometry(pair.first.geometry_index, LineString(dst + src[1:]))
        src_feature.remove_geometry(pair.second.geometry_index)

    def _join_fronts(self, layer: Sequence[Feature], pair: CandidatePair) -> None:
        """앞-앞 병합은 첫 번째를 뒤집어 새 지오메트리를 만들고 원본 두 개를 제거합니다."""
        first_feature = layer[pair.first.feature_index]
        second_feature = layer[pair.second.feature_index]

        first = line_coords(first_feature.get_geometry(pair.first.geometry_index))
        second = line_coords(second_feature.get_geometry(pair.second.geometry_index))
        merged = LineString(first[::-1] + second[1:])

        removals = [
            (first_feature, pair.first.geometry_index),
            (second_feature, pair.second.geometry_index),
        ]
        if first_feature is second_feature:
            # 같은 피처라면 뒤쪽 인덱스부터 지워야 앞쪽 인덱스가 밀리지 않음
            removals.sort(key=lambda item: item[1], reverse=True)
        for feature, geometry_index in removals:
            feature.remove_geometry(geometry_index)

        first_feature.add_geometry(merged)

    def _reconcile_tags(self, first: Feature, second: Feature) -> None:
        """태그 전략에 따라 결과 피처(first)의 속성을 조정합니다. 일치하지 않는 태그는 null로 비웁니다."""
        if first is second:
            return

        for key, value in list(first.attributes.items()):
            if not second.has_key(key):
                if self._strategy is TagStrategy.INTERSECT:
                    first.put(key, None)
            elif value != second.get(key):
                first.put(key, None)

        if self._strategy is TagStrategy.ACCUMULATE:
            for key, value in second.attributes.items():
                if not first.has_key(key):
                    first.put(key, value)


def _shape_of(pair: CandidatePair) -> str:
    if pair.first.position != pair.second.position:
        return "front-back"
    if pair.first.position is Position.BACK:
        return "back-back"
    return "front-front"


def cull(layer: List[Feature]) -> int:
    """지오메트리가 모두 사라진 피처를 레이어에서 한 번에 제거하고 제거 수를 반환합니다."""
    kept = [feature for feature in layer if feature.num_geometries() > 0]
    removed = len(layer) - len(kept)
    layer[:] = kept
    return removed

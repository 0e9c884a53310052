"""
Service/post_process/union/processor.py

후보 추출, 점수 산정, 병합을 한 라운드로 묶어 더 이상 병합이 일어나지 않을 때까지 반복하는 오케스트레이터 모듈입니다.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.config import UnionizerConfig
from Service.post_process.feature import Envelope, Feature, layer_envelope

from .candidates import CandidateExtractor, propose_pairs
from .executor import UnionExecutor, cull
from .strategies import score_candidates


class UnionProcessor:
    """
    설정된 휴리스틱과 태그 전략으로 레이어의 선형 피처를 반복 병합합니다.
    """

    def __init__(self, logger: Log, config: UnionizerConfig):
        self._logger = logger
        self._config = config
        self._extractor = CandidateExtractor(
            config.match_tags,
            config.preserve_direction_tags,
            config.union_heuristic,
        )
        self._executor = UnionExecutor(logger, config.tag_strategy)

        if config.keep_ids_tag:
            self._logger.log(
                f"[Unionizer] keep_ids_tag='{config.keep_ids_tag}' 설정은 현재 병합 동작에 반영되지 않습니다.",
                level="WARNING",
            )

    @safe_run
    @log_execution_time
    def process(self, layer: List[Feature], extent: Optional[Envelope] = None) -> List[Feature]:
        """레이어를 제자리에서 병합하고 빈 피처를 정리한 뒤 같은 리스트를 반환합니다."""
        before = len(layer)
        sample_distance = self._sample_distance(layer, extent)

        rounds = 0
        total_merged = 0
        max_iterations = self._config.max_iterations
        while max_iterations is None or rounds < max_iterations:
            # 매 라운드 현재 레이어 상태에서 후보를 새로 계산
            candidates = self._extractor.extract(layer, sample_distance)
            pairs = propose_pairs(candidates, layer, self._config.match_tags)
            scored = score_candidates(pairs, self._config.union_heuristic)

            merged = self._executor.execute(layer, scored)
            rounds += 1
            self._logger.log(
                f"[Unionizer] 라운드 {rounds}: 후보 {len(candidates)}개, 후보쌍 {len(scored)}개, 병합 피처 {merged}개",
                level="DEBUG",
            )
            if merged == 0:
                break
            total_merged += merged

        removed = cull(layer)
        self._logger.log(
            f"[Unionizer] 병합 완료: {before} -> {len(layer)}개 피처 "
            f"(라운드={rounds}, 병합 참여={total_merged}, 제거={removed}, 휴리스틱={self._config.union_heuristic.value})",
            level="INFO",
        )
        return layer

    def _sample_distance(self, layer: List[Feature], extent: Optional[Envelope]) -> Tuple[float, float]:
        """지도 범위에 샘플링 비율을 곱해 방향 근사용 축별 거리를 계산합니다."""
        if extent is None:
            extent = layer_envelope(layer)
        if extent is None:
            return 0.0, 0.0
        ratio = self._config.angle_union_sample_ratio
        return extent.width * ratio, extent.height * ratio

"""
Service/post_process/admin/processor.py

피처의 위치를 기준으로 겹치는 행정구역 폴리곤의 속성값을 피처에 기록하는 속성 부여(adminizer) 모듈입니다.
"""
from __future__ import annotations

from typing import List, Optional

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.config import AdminizerConfig
from Service.post_process.feature import Envelope, Feature, ReferenceDatasource, layer_envelope
from Service.post_process.geometry_adapter import any_part_intersects, to_engine_geometry

from .index import RegionEntry, SpatialIndex, collect_entries


class AdminProcessor:
    """
    레이어의 통합 범위로 참조 폴리곤을 조회해 인덱스를 만들고, 피처마다 최우선 교차 폴리곤의 값을 기록합니다.
    """

    def __init__(self, logger: Log, config: AdminizerConfig, datasource: ReferenceDatasource):
        self._logger = logger
        self._param_name = config.param_name
        self._field_name = config.datasource.get("field", config.param_name)
        self._datasource = datasource

    @safe_run
    @log_execution_time
    def process(self, layer: List[Feature], extent: Optional[Envelope] = None) -> List[Feature]:
        """레이어의 모든 피처에 행정구역 속성을 부여합니다. 지도 범위는 사용하지 않습니다."""
        env = layer_envelope(layer)
        if env is None:
            self._logger.log("[Adminizer] 지오메트리가 있는 피처가 없어 건너뜁니다.", level="DEBUG")
            return layer

        entries = collect_entries(self._datasource, env, self._field_name)
        index = SpatialIndex(entries)
        self._logger.log(f"[Adminizer] 참조 폴리곤 {len(index)}개로 인덱스 구축 완료", level="INFO")

        matched = 0
        for feature in layer:
            if self._adminize_feature(feature, index):
                matched += 1

        self._logger.log(
            f"[Adminizer] '{self._param_name}' 속성 부여 완료: {matched}/{len(layer)}개 피처 일치",
            level="INFO",
        )
        return layer

    def _adminize_feature(self, feature: Feature, index: SpatialIndex) -> bool:
        """피처 지오메트리를 순서대로 검사하여 가장 높은 우선순위의 교차 엔트리 값을 기록합니다."""
        best: Optional[RegionEntry] = None

        for geom in feature.geometries:
            engine_geom = to_engine_geometry(geom)
            if engine_geom is None:
                continue

            for entry_id in index.query(engine_geom.bounds):
                entry = index.entry(entry_id)
                if best is not None and entry.index >= best.index:
                    continue
                # 인덱스는 경계 상자만 비교하므로 정밀 교차 판정을 다시 수행
                if any_part_intersects(engine_geom, entry.polygon):
                    best = entry

            if best is not None and best.index == 0:
                break

        if best is None:
            return False

        feature.put(self._param_name, best.value)
        return True

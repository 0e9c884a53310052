"""
Service/post_process/union/diagnostics.py

병합 결과 선형 네트워크의 연결 구조와 길이 분포를 분석하여 로그로 출력하는 진단 모듈입니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import geopandas as gpd
import momepy
import networkx as nx
import pandas as pd
from shapely.geometry import LineString

from Common.log import Log
from Service.post_process.feature import Feature


@dataclass(frozen=True)
class UnionDiagnosticsPolicy:
    """진단 시 샘플링 제한 값입니다."""
    max_edges: int = 50000
    top_n_longest: int = 5


class UnionDiagnostics:
    """
    병합 이후 선형 피처로 그래프를 만들어 차수별 노드 수, 연결 그룹 수, 간선 길이 분포를 보고합니다.
    """

    def __init__(self, logger: Log, policy: Optional[UnionDiagnosticsPolicy] = None):
        self._logger = logger
        self._policy = policy or UnionDiagnosticsPolicy()

    def report(self, layer: Sequence[Feature]) -> None:
        edges_gdf = self._build_edges(layer)
        if edges_gdf.empty:
            self._logger.log("[Unionizer:Diag] 분석할 선형 피처가 없습니다.", level="INFO")
            return

        if len(edges_gdf) > self._policy.max_edges:
            self._logger.log(
                f"[Unionizer:Diag] 데이터 과다로 진단 중단 (최대 {self._policy.max_edges}개 허용)",
                level="WARNING",
            )
            return

        graph = momepy.gdf_to_nx(edges_gdf, approach="primal")
        self._log_graph_summary(graph)
        self._log_length_summary(edges_gdf)

    def _build_edges(self, layer: Sequence[Feature]) -> gpd.GeoDataFrame:
        rows: List[dict] = []
        for feature in layer:
            for geom in feature.geometries:
                if isinstance(geom, LineString) and not geom.is_empty and geom.length > 0:
                    rows.append({"feature_id": feature.id, "geometry": geom})
        if not rows:
            return gpd.GeoDataFrame(columns=["feature_id", "geometry"], geometry="geometry")
        return gpd.GeoDataFrame(rows, geometry="geometry")

    def _log_graph_summary(self, graph: nx.Graph) -> None:
        degrees = [d for _, d in graph.degree()]
        d1 = degrees.count(1)
        d2 = degrees.count(2)
        d3p = sum(1 for d in degrees if d >= 3)
        components = nx.number_connected_components(graph) if graph.number_of_nodes() else 0

        self._logger.log(
            f"[Unionizer:Diag][Graph] 노드={graph.number_of_nodes()} 간선={graph.number_of_edges()} "
            f"그룹={components} 단말(D1)={d1} 통과(D2)={d2} 교차(D3+)={d3p}",
            level="INFO",
        )
        if d2:
            # 차수 2 노드는 태그나 방향 조건 때문에 병합되지 않은 연결점
            self._logger.log(f"[Unionizer:Diag][Graph] 미병합 연결점(D2) {d2}개", level="DEBUG")

    def _log_length_summary(self, edges_gdf: gpd.GeoDataFrame) -> None:
        lengths: pd.Series = edges_gdf.geometry.length
        desc = lengths.describe(percentiles=[0.05, 0.5, 0.95]).to_dict()
        self._logger.log(
            "[Unionizer:Diag][EdgeLen] "
            + " ".join([f"{k}={float(v):.3f}" for k, v in desc.items() if k != "count"]),
            level="INFO",
        )

        longest = edges_gdf.assign(length=lengths).nlargest(self._policy.top_n_longest, "length")
        for _, row in longest.iterrows():
            self._logger.log(
                f"[Unionizer:Diag][Longest] 피처={row['feature_id']} 길이={float(row['length']):.3f}",
                level="DEBUG",
            )

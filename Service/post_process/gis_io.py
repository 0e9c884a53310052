"""
Service/post_process/gis_io.py

벡터 레이어 파일의 입출력과 GeoDataFrame ↔ 피처 레이어 변환, GeoDataFrame 기반 참조 데이터소스를 담당하는 모듈입니다.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator, List

import geopandas as gpd
import numpy as np
import pandas as pd
from pandas.api.types import is_integer_dtype

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.schemas import FileLoadRequest, FileSaveRequest

from .feature import Envelope, Feature
from .geometry_adapter import assemble_geometry, explode_geometry


def _clean_value(value: Any) -> Any:
    """pandas/numpy 결측값과 스칼라를 파이썬 기본 타입으로 정리합니다."""
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    if value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, np.generic):
        value = value.item()
        if isinstance(value, float) and np.isnan(value):
            return None
    return value


def layer_from_frame(gdf: gpd.GeoDataFrame) -> List[Feature]:
    """
    GeoDataFrame의 각 행을 피처로 변환합니다.

    정수 인덱스는 피처 ID로 사용하고, 그 외에는 행 순서를 ID로 사용합니다.
    멀티 지오메트리는 파트별 지오메트리로 분해됩니다.
    """
    geometry_name = gdf.geometry.name
    attribute_columns = [c for c in gdf.columns if c != geometry_name]
    use_index = is_integer_dtype(gdf.index.dtype) and gdf.index.is_unique

    # iterrows 는 행 단위로 dtype 을 통일하므로 컬럼 타입이 보존되는 records 로 변환
    if attribute_columns:
        records = pd.DataFrame(gdf[attribute_columns]).to_dict("records")
    else:
        records = [{} for _ in range(len(gdf))]

    layer: List[Feature] = []
    for position, (idx, geom, record) in enumerate(zip(gdf.index, gdf.geometry, records)):
        feature_id = int(idx) if use_index else position
        attributes = {col: _clean_value(value) for col, value in record.items()}
        layer.append(Feature(id=feature_id, geometries=explode_geometry(geom), attributes=attributes))
    return layer


def frame_from_layer(layer: List[Feature], crs: Any = None) -> gpd.GeoDataFrame:
    """피처 레이어를 피처당 한 행의 GeoDataFrame으로 복원합니다."""
    if not layer:
        return gpd.GeoDataFrame(columns=["geometry"], geometry="geometry", crs=crs)

    rows = []
    for feature in layer:
        row = dict(feature.attributes)
        row["geometry"] = assemble_geometry(feature.geometries)
        rows.append(row)

    index = pd.Index([feature.id for feature in layer], name="fid")
    return gpd.GeoDataFrame(rows, index=index, geometry="geometry", crs=crs)


class GeoDataFrameDatasource:
    """
    GeoDataFrame을 참조 데이터소스로 감싼 구현입니다. 조회 범위와 경계 상자가 겹치는 행을 원본 순서대로 돌려줍니다.
    """

    def __init__(self, gdf: gpd.GeoDataFrame, field_name: str):
        if field_name not in gdf.columns:
            raise ValueError(f"참조 데이터에 '{field_name}' 컬럼이 없습니다. 현재 컬럼: {list(gdf.columns)}")
        self._gdf = gdf
        self._field_name = field_name

    def features(self, envelope: Envelope) -> Iterator[Feature]:
        if self._gdf.empty:
            return
        hits = np.sort(self._gdf.sindex.query(envelope.to_box()))
        subset = self._gdf.iloc[hits]
        for position, (geom, value) in enumerate(zip(subset.geometry, subset[self._field_name])):
            yield Feature(
                id=int(hits[position]),
                geometries=explode_geometry(geom),
                attributes={self._field_name: _clean_value(value)},
            )


class GISIO:
    """
    벡터 파일(SHP, GeoJSON, GPKG)의 로드 및 저장을 처리하며 데이터의 유효성을 검증합니다.
    """

    _TYPE_FAMILIES: Dict[str, str] = {
        "Point": "point",
        "MultiPoint": "point",
        "LineString": "line",
        "MultiLineString": "line",
        "Polygon": "polygon",
        "MultiPolygon": "polygon",
    }

    def __init__(self, logger: Log):
        self._logger = logger

    @safe_run
    @log_execution_time
    def load(self, request: FileLoadRequest) -> gpd.GeoDataFrame:
        """
        벡터 파일을 로드하고 데이터 존재 여부를 검증합니다.

        Args:
            request (FileLoadRequest): 파일 경로를 포함한 로드 요청 객체

        Returns:
            gpd.GeoDataFrame: 로드된 지리 정보 데이터
        """
        kwargs = {}
        if request.layer:
            kwargs["layer"] = request.layer
        if request.driver == "ESRI Shapefile":
            kwargs["encoding"] = request.shapefile_encoding

        gdf = gpd.read_file(request.file_path, **kwargs)

        if gdf.empty:
            raise ValueError(f"로드된 데이터가 비어있습니다: {request.file_path}")

        crs_name = getattr(gdf.crs, "name", None) or "Unknown"
        self._logger.log(
            f"데이터 로드 상세 - 파일: {request.file_path.name}, 객체 수: {len(gdf)}, CRS: {crs_name}",
            level="INFO",
        )
        return gdf

    @safe_run
    @log_execution_time
    def save(self, gdf: gpd.GeoDataFrame, request: FileSaveRequest) -> Path:
        """
        데이터를 지정된 경로에 확장자에 맞는 드라이버로 저장합니다.

        Args:
            gdf (gpd.GeoDataFrame): 저장할 데이터
            request (FileSaveRequest): 저장 경로를 포함한 요청 객체

        Returns:
            Path: 저장된 파일의 경로
        """
        output_path = request.output_path

        if gdf.empty:
            self._logger.log("저장할 데이터가 비어있습니다.", level="WARNING")

        self._validate_geometries(gdf, request.driver)

        output_path.parent.mkdir(parents=True, exist_ok=True)

        kwargs = {"driver": request.driver}
        if request.driver == "ESRI Shapefile":
            kwargs["encoding"] = request.shapefile_encoding
        gdf.to_file(output_path, index=False, **kwargs)

        self._logger.log(f"저장 완료: {output_path}", level="INFO")
        return output_path

    def open_datasource(self, params: dict, default_field: str) -> GeoDataFrameDatasource:
        """adminizer 의 datasource 설정(file, layer, field)으로 참조 데이터소스를 생성합니다."""
        if not params.get("file"):
            raise ValueError("adminizer datasource 설정에 'file' 항목이 필요합니다.")
        request = FileLoadRequest(file_path=Path(params["file"]), layer=params.get("layer"))
        gdf = self.load(request)
        return GeoDataFrameDatasource(gdf, params.get("field", default_field))

    def _validate_geometries(self, gdf: gpd.GeoDataFrame, driver: str) -> None:
        """SHP는 단일 계열 geometry 타입만 저장할 수 있으므로 혼합 타입을 검증합니다."""
        if gdf.empty or driver != "ESRI Shapefile":
            return

        geom_types = set(gdf.geometry.dropna().geom_type.unique())
        if "GeometryCollection" in geom_types:
            raise ValueError("SHP 형식은 GeometryCollection을 저장할 수 없습니다.")

        families = {self._TYPE_FAMILIES[t] for t in geom_types if t in self._TYPE_FAMILIES}
        if len(families) > 1:
            raise ValueError(f"SHP 형식은 혼합 geometry 타입을 저장할 수 없습니다: {sorted(geom_types)}")

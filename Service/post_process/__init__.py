"""
Service/post_process/__init__.py

벡터 타일 레이어 후처리(행정구역 속성 부여, 선형 병합)에 필요한 주요 모듈들을 외부로 노출합니다.
"""
from .feature import Envelope, Feature, ReferenceDatasource, layer_envelope
from .gis_io import GISIO, GeoDataFrameDatasource, frame_from_layer, layer_from_frame
from .admin import AdminProcessor
from .union import UnionDiagnostics, UnionProcessor
from .pipeline import PostProcessPipeline, create_process

__all__ = [
    "Envelope",
    "Feature",
    "ReferenceDatasource",
    "layer_envelope",
    "GISIO",
    "GeoDataFrameDatasource",
    "frame_from_layer",
    "layer_from_frame",
    "AdminProcessor",
    "UnionDiagnostics",
    "UnionProcessor",
    "PostProcessPipeline",
    "create_process",
]

"""
Service/schemas.py

데이터의 구조를 정의하고 입력값의 유효성을 검증하는 스키마 모듈입니다.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# 확장자별 GeoPandas(pyogrio) 드라이버
SUPPORTED_DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
}


def _validate_suffix(v: Path) -> Path:
    if v.suffix.lower() not in SUPPORTED_DRIVERS:
        raise ValueError(
            f"지원하지 않는 파일 형식입니다: '{v.suffix}' (지원: {', '.join(sorted(SUPPORTED_DRIVERS))})"
        )
    return v


class FileLoadRequest(BaseModel):
    """
    레이어 파일 로드 요청을 위한 데이터 모델입니다.
    """
    file_path: Path = Field(..., description="읽어올 벡터 파일 경로")
    layer: Optional[str] = Field(default=None, description="GeoPackage 등 다중 레이어 파일의 레이어명")
    shapefile_encoding: str = Field(default="utf-8", description="SHP 속성 인코딩")

    @field_validator("file_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        return _validate_suffix(v)

    @field_validator("file_path")
    @classmethod
    def validate_existence(cls, v: Path) -> Path:
        resolved_path = v.expanduser().resolve()
        if not resolved_path.exists() or not resolved_path.is_file():
            raise ValueError(f"파일을 찾을 수 없습니다: {resolved_path}")
        return resolved_path

    @property
    def driver(self) -> str:
        return SUPPORTED_DRIVERS[self.file_path.suffix.lower()]


class FileSaveRequest(BaseModel):
    """
    결과 레이어 저장 요청을 위한 데이터 모델입니다.
    """
    output_path: Path = Field(..., description="결과를 저장할 파일 경로")
    shapefile_encoding: str = Field(default="utf-8", description="SHP 속성 인코딩")

    @field_validator("output_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        return _validate_suffix(v).expanduser().resolve()

    @property
    def driver(self) -> str:
        return SUPPORTED_DRIVERS[self.output_path.suffix.lower()]

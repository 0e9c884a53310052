"""
Service/config.py

후처리 파이프라인의 동작을 제어하는 설정 모듈입니다.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UnionHeuristic(str, Enum):
    """병합 후보 쌍의 우선순위를 정하는 휴리스틱입니다."""
    GREEDY = "greedy"
    OBTUSE = "obtuse"
    ACUTE = "acute"


class TagStrategy(str, Enum):
    """병합 시 두 피처의 속성을 조정하는 방식입니다."""
    INTERSECT = "intersect"
    ACCUMULATE = "accumulate"


class AdminizerConfig(BaseModel):
    """
    행정구역 속성 부여(adminizer) 단계 설정입니다.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["adminizer"] = "adminizer"

    param_name: str = Field(
        ...,
        min_length=1,
        description="참조 폴리곤에서 읽어 피처에 기록할 속성명"
    )

    datasource: Dict[str, str] = Field(
        default_factory=dict,
        description="참조 데이터소스 파라미터 (파일 데이터소스는 file 필수, layer/field 선택)"
    )


class UnionizerConfig(BaseModel):
    """
    선형 피처 병합(unionizer) 단계 설정입니다.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["unionizer"] = "unionizer"

    union_heuristic: UnionHeuristic = Field(
        default=UnionHeuristic.GREEDY,
        description="병합 후보 점수 방식 (greedy, obtuse, acute)"
    )

    tag_strategy: TagStrategy = Field(
        default=TagStrategy.INTERSECT,
        description="병합 시 속성 조정 방식 (intersect, accumulate)"
    )

    keep_ids_tag: Optional[str] = Field(
        default=None,
        description="원본 ID 보존용 예약 태그명 (현재 병합 동작에는 반영되지 않음)"
    )

    max_iterations: Optional[int] = Field(
        default=None,
        ge=0,
        description="최대 병합 라운드 수 (None이면 무제한)"
    )

    match_tags: Tuple[str, ...] = Field(
        default=(),
        description="병합 전 값이 일치해야 하는 태그 목록 (비어 있으면 모두 허용)"
    )

    preserve_direction_tags: Tuple[str, ...] = Field(
        default=(),
        description="존재 시 선형 방향을 유지해야 하는 태그 목록"
    )

    angle_union_sample_ratio: float = Field(
        default=0.1,
        gt=0.0,
        le=0.5,
        description="각도 휴리스틱의 방향 샘플링 거리 (지도 범위 대비 비율)"
    )

    @field_validator("match_tags", "preserve_direction_tags", mode="before")
    @classmethod
    def normalize_tag_set(cls, v):
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        return tuple(sorted(set(v)))


ProcessConfig = Annotated[Union[AdminizerConfig, UnionizerConfig], Field(discriminator="type")]


class PipelineConfig(BaseModel):
    """레이어에 순서대로 적용할 후처리 단계 목록입니다."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    processes: List[ProcessConfig] = Field(default_factory=list)


def load_pipeline_config(path: Union[str, Path]) -> PipelineConfig:
    """JSON 파이프라인 정의 파일을 읽어 검증된 설정 객체로 변환합니다."""
    text = Path(path).expanduser().read_text(encoding="utf-8")
    return PipelineConfig.model_validate_json(text)


class AppConfig(BaseSettings):
    """
    애플리케이션 실행 환경을 정의하는 설정 클래스입니다.
    """

    log_dir: str = Field(
        default="Log",
        description="로그 파일 저장 폴더명"
    )

    output_dir_name: str = Field(
        default="Result",
        description="결과물 저장 폴더명 (실행 경로 기준)"
    )

    diagnostics_enabled: bool = Field(
        default=True,
        description="병합 이후 선형 네트워크 진단 로그 출력 여부"
    )

    pipeline_file: Optional[Path] = Field(
        default=None,
        description="후처리 파이프라인 JSON 파일 경로"
    )

    model_config = SettingsConfigDict(
        env_prefix="POSTPROC_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

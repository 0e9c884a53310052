"""
Service/post_process/pipeline.py

설정에 정의된 후처리 단계(adminizer, unionizer)를 생성하고 하나의 레이어에 순서대로 적용하는 모듈입니다.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Sequence

from Common.log import Log
from Service.config import AdminizerConfig, PipelineConfig, ProcessConfig, UnionizerConfig

from .admin import AdminProcessor
from .feature import Envelope, Feature, ReferenceDatasource
from .union import UnionProcessor

DatasourceFactory = Callable[[AdminizerConfig], ReferenceDatasource]


class LayerProcess(Protocol):
    def process(self, layer: List[Feature], extent: Optional[Envelope] = None) -> List[Feature]:
        ...


def create_process(
        logger: Log,
        config: ProcessConfig,
        datasource_factory: DatasourceFactory,
) -> LayerProcess:
    """단계 설정의 type 에 맞는 처리기를 생성합니다."""
    if isinstance(config, AdminizerConfig):
        return AdminProcessor(logger, config, datasource_factory(config))
    if isinstance(config, UnionizerConfig):
        return UnionProcessor(logger, config)
    raise ValueError(f"지원하지 않는 후처리 단계입니다: {config!r}")


class PostProcessPipeline:
    """
    레이어 하나에 후처리 단계들을 설정 순서대로 적용합니다.
    """

    def __init__(self, logger: Log, processes: Sequence[LayerProcess]):
        self._logger = logger
        self._processes = list(processes)

    @classmethod
    def from_config(
            cls,
            logger: Log,
            config: PipelineConfig,
            datasource_factory: DatasourceFactory,
    ) -> "PostProcessPipeline":
        processes = [create_process(logger, step, datasource_factory) for step in config.processes]
        return cls(logger, processes)

    def __len__(self) -> int:
        return len(self._processes)

    def run(self, layer: List[Feature], extent: Optional[Envelope] = None) -> List[Feature]:
        if not self._processes:
            self._logger.log("[Pipeline] 설정된 후처리 단계가 없어 레이어를 그대로 반환합니다.", level="WARNING")
            return layer

        for step, process in enumerate(self._processes, start=1):
            self._logger.log(
                f"[Pipeline] {step}/{len(self._processes)} 단계 실행: {type(process).__name__}",
                level="INFO",
            )
            layer = process.process(layer, extent)
        return layer

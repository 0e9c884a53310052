"""
Service/post_process_service.py

레이어 파일 로드부터 후처리 파이프라인 실행, 진단, 저장까지의 전체 공정을 제어하는 서비스 모듈입니다.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from Common.log import Log
from Function.utils import get_runtime_base_path
from Function.decorators import log_execution_time, safe_run
from Service.config import AdminizerConfig, AppConfig, PipelineConfig, UnionizerConfig
from Service.schemas import FileLoadRequest, FileSaveRequest
from Service.post_process import (
    GISIO,
    Envelope,
    Feature,
    PostProcessPipeline,
    UnionDiagnostics,
    frame_from_layer,
    layer_from_frame,
)


class PostProcessService:
    """
    후처리 파이프라인의 실행을 관리하는 메인 서비스 클래스입니다.
    """

    def __init__(
        self,
        logger: Log,
        gis_io: GISIO,
        diagnostics: UnionDiagnostics,
        config: AppConfig,
    ):
        self._logger = logger
        self._gis_io = gis_io
        self._diagnostics = diagnostics
        self._config = config

    @safe_run
    @log_execution_time
    def run_pipeline(
        self,
        input_path: str,
        pipeline_config: PipelineConfig,
        output_path: Optional[str] = None,
        extent: Optional[Envelope] = None,
    ) -> str:
        """
        입력 레이어를 로드하여 설정된 후처리 단계를 적용하고 결과 파일 경로를 반환합니다.
        """
        target_path = Path(input_path)

        gdf_input = self._gis_io.load(FileLoadRequest(file_path=target_path))
        layer = layer_from_frame(gdf_input)

        # 참조 데이터소스는 호출마다 새로 연다
        pipeline = PostProcessPipeline.from_config(self._logger, pipeline_config, self._open_datasource)
        layer = pipeline.run(layer, extent)

        if self._config.diagnostics_enabled and self._has_unionizer(pipeline_config):
            self._report_diagnostics(layer)

        if output_path is None:
            output_dir = get_runtime_base_path() / self._config.output_dir_name
            final_output = output_dir / f"{target_path.stem}_processed{target_path.suffix}"
        else:
            final_output = Path(output_path)

        gdf_result = frame_from_layer(layer, crs=gdf_input.crs)
        saved_path = self._gis_io.save(gdf_result, FileSaveRequest(output_path=final_output))
        return str(saved_path)

    def _open_datasource(self, config: AdminizerConfig):
        return self._gis_io.open_datasource(config.datasource, config.param_name)

    def _has_unionizer(self, pipeline_config: PipelineConfig) -> bool:
        return any(isinstance(step, UnionizerConfig) for step in pipeline_config.processes)

    def _report_diagnostics(self, layer: List[Feature]) -> None:
        """진단은 결과물에 영향을 주지 않으므로 실패해도 경고만 남깁니다."""
        try:
            self._diagnostics.report(layer)
        except Exception as e:
            self._logger.log(f"[Unionizer:Diag] 진단 로그 출력 실패: {e}", level="WARNING")

"""
Service/container.py

애플리케이션의 모든 객체를 생성하고 의존성을 주입하여 실행 가능한 상태로 조립합니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from Common.log import Log

from Service.config import AppConfig
from Service.post_process import GISIO, UnionDiagnostics
from Service.post_process_service import PostProcessService


@dataclass(frozen=True)
class BuiltApp:
    """조립이 완료된 애플리케이션 서비스 객체 묶음입니다."""
    config: AppConfig
    post_process_service: PostProcessService


def build_app(logger: Log, config: Optional[AppConfig] = None) -> BuiltApp:
    """
    설정 로드 및 모든 내부 모듈의 의존성을 주입하여 BuiltApp 객체를 생성합니다.
    """
    app_config = config or AppConfig()

    gis_io = GISIO(logger)
    diagnostics = UnionDiagnostics(logger)

    post_process_service = PostProcessService(
        logger=logger,
        gis_io=gis_io,
        diagnostics=diagnostics,
        config=app_config,
    )

    return BuiltApp(config=app_config, post_process_service=post_process_service)

"""
main.py

명령행 진입점이며 객체 생성 및 의존성 주입(Composition Root)을 담당합니다.
"""
from __future__ import annotations

import argparse
import sys
import traceback
from typing import List, NoReturn, Optional

from Common.log import Log
from Function.log_cleanup import clean_old_logs
from Service.config import AppConfig, load_pipeline_config
from Service.container import build_app
from Service.post_process import Envelope


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="벡터 타일 레이어 후처리(행정구역 속성 부여, 선형 병합)를 실행합니다.")
    parser.add_argument("input", help="입력 레이어 파일 경로 (SHP/GeoJSON/GPKG)")
    parser.add_argument("--config", required=False, help="후처리 파이프라인 JSON 파일 경로")
    parser.add_argument("--output", required=False, help="결과 파일 경로 (미지정 시 Result 폴더)")
    parser.add_argument(
        "--extent",
        nargs=4,
        type=float,
        metavar=("MINX", "MINY", "MAXX", "MAXY"),
        help="방향 샘플링에 사용할 지도 범위 (미지정 시 레이어 범위)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    args = parse_args(argv)
    app_config = AppConfig()
    logger = Log(log_dir=app_config.log_dir)

    try:
        logger.log("=== 후처리 실행 시작 ===", level="INFO")

        clean_old_logs(logger.log_dir, logger)

        config_path = args.config or app_config.pipeline_file
        if config_path is None:
            raise ValueError("후처리 파이프라인 설정 파일이 필요합니다. (--config 또는 POSTPROC_PIPELINE_FILE)")
        pipeline_config = load_pipeline_config(config_path)

        built = build_app(logger, app_config)
        extent = Envelope(*args.extent) if args.extent else None

        result_path = built.post_process_service.run_pipeline(
            args.input, pipeline_config, output_path=args.output, extent=extent
        )

        logger.log(f"=== 후처리 완료: {result_path} ===", level="INFO")
        sys.exit(0)

    except Exception:
        error_msg = traceback.format_exc()
        logger.log(f"후처리 중 치명적 오류 발생:\n{error_msg}", level="ERROR")
        logger.log(f"상세 로그 파일: {logger.get_log_paths()}", level="INFO")
        sys.exit(1)


if __name__ == "__main__":
    main()

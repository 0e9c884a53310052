"""
Function/utils.py

프로그램 실행 환경에 따른 결과물 경로 연산을 처리하는 유틸리티 모듈입니다.
"""
from pathlib import Path
import sys


def get_runtime_base_path() -> Path:
    """
    실행 파일(번들형) 또는 현재 작업 디렉토리(스크립트형)를 결과물 기준 경로로 반환합니다.

    Returns:
        Path: 결과물 저장 기준 디렉토리 경로
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path.cwd()

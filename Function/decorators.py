"""
Function/decorators.py

후처리 단계의 실행 시간 측정 및 예외 기록을 위한 데코레이터 모듈입니다.
"""
from __future__ import annotations

import functools
import logging
import time
import traceback
from typing import Any, Callable, ParamSpec, TypeVar, Optional

P = ParamSpec("P")
R = TypeVar("R")


def _resolve_custom_logger(instance: Any) -> Optional[Any]:
    """
    인스턴스가 `_logger` 속성으로 Log 객체를 보유하고 있으면 반환합니다.

    Args:
        instance (Any): 클래스 인스턴스(self)

    Returns:
        Optional[Any]: 로거 인스턴스 또는 None
    """
    custom_logger = getattr(instance, "_logger", None)
    if custom_logger is not None and hasattr(custom_logger, "log"):
        return custom_logger
    return None


def _emit(custom_logger: Optional[Any], msg: str, level: str) -> None:
    if custom_logger:
        custom_logger.log(msg, level=level)
    else:
        logging.getLogger("postproc").log(logging.getLevelName(level), msg)


def log_execution_time(func: Callable[P, R]) -> Callable[P, R]:
    """
    메서드의 시작과 종료를 기록하고 소요 시간을 측정하는 데코레이터입니다.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        custom_logger = _resolve_custom_logger(args[0] if args else None)
        func_name = func.__qualname__

        _emit(custom_logger, f"▶ [시작] {func_name}", "DEBUG")
        started = time.perf_counter()

        result = func(*args, **kwargs)

        elapsed = time.perf_counter() - started
        _emit(custom_logger, f"◀ [완료] {func_name} (소요 시간: {elapsed:.4f}초)", "DEBUG")
        return result

    return wrapper


def safe_run(func: Callable[P, R]) -> Callable[P, R]:
    """
    실행 중 발생한 예외의 Traceback을 ERROR 레벨로 기록한 뒤 그대로 재전파합니다.

    Raises:
        Exception: 원본 함수에서 발생한 예외
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except Exception:
            custom_logger = _resolve_custom_logger(args[0] if args else None)
            _emit(
                custom_logger,
                f"'{func.__qualname__}' 실행 중 오류 발생\n[Traceback]\n{traceback.format_exc()}",
                "ERROR",
            )
            raise

    return wrapper

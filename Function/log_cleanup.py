"""
Function/log_cleanup.py

보관 기간이 지난 'Log_YYYYMMDD.log' 파일을 자동으로 삭제하는 모듈입니다.
"""
import datetime
from pathlib import Path

RETENTION_DAYS = 3


def clean_old_logs(log_dir, logger, retention_days=RETENTION_DAYS, now=None):
    """
    로그 디렉토리에서 보관 기간이 만료된 로그 파일을 삭제하고 삭제한 파일 수를 반환합니다.

    Args:
        log_dir (str | Path): 로그 파일이 저장된 디렉토리 경로
        logger (Log): 로그 기록을 위한 로거 인스턴스
        retention_days (int): 보관 일수
        now (datetime.datetime | None): 기준 시각 (기본값: 현재 시각)
    """
    log_path = Path(log_dir)
    if not log_path.is_dir():
        logger.log(f"로그 디렉토리 없음: {log_path} (삭제 과정 생략)", level="WARNING")
        return 0

    now = now or datetime.datetime.now()
    removed = 0

    for file_path in log_path.glob("Log_*.log"):
        date_part = file_path.stem[4:12]
        try:
            file_date = datetime.datetime.strptime(date_part, "%Y%m%d")
        except ValueError:
            logger.log(f"잘못된 로그 파일 형식 (삭제 스킵): {file_path.name}", level="WARNING")
            continue

        if (now - file_date).days > retention_days:
            try:
                file_path.unlink()
            except OSError as e:
                logger.log(f"로그 파일 삭제 실패: {file_path.name} - {e}", level="WARNING")
                continue
            removed += 1
            logger.log(f"오래된 로그 파일 삭제: {file_path.name}", level="INFO")

    return removed

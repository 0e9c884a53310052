import logging
import datetime
import os
import sys


class Log:
    def __init__(self, log_dir="Log", name="postproc", console=True):
        # 프로그램 실행 폴더 (번들 실행 시 실행 파일 위치)
        if getattr(sys, 'frozen', False):
            program_dir = os.path.dirname(os.path.abspath(sys.executable))
        else:
            program_dir = os.getcwd()

        self.log_dir = log_dir if os.path.isabs(log_dir) else os.path.join(program_dir, log_dir)
        os.makedirs(self.log_dir, exist_ok=True)

        # 로그 파일명은 'Log_YYYYMMDD.log' 형식 (clean_old_logs 가 이 형식을 전제로 함)
        self.log_file = os.path.join(self.log_dir, f'Log_{self._current_date_str()}.log')

        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        # 같은 이름으로 여러 번 생성돼도 핸들러가 중복되지 않도록 교체
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s', datefmt='%Y/%m/%d %H:%M:%S'
        ))
        self._logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self._logger.addHandler(console_handler)

    def _current_date_str(self):
        return datetime.datetime.now().strftime("%Y%m%d")

    def log(self, msg, level='DEBUG'):
        """지정된 로그 레벨로 메시지를 기록합니다."""
        level_no = logging.getLevelName(level.upper())
        if not isinstance(level_no, int):
            self._logger.warning(f"알 수 없는 로그 레벨({level}): {msg}")
            return
        self._logger.log(level_no, msg)

    def get_log_paths(self):
        """현재 로그 파일 경로를 반환하는 메서드."""
        return self.log_file

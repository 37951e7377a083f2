import logging
import json
import os
from logging.handlers import TimedRotatingFileHandler

from app.core.context import get_trace_id


class TraceIdFilter(logging.Filter):
    """현재 요청의 Trace ID를 로그 레코드에 주입합니다."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        # 메시지가 dict면 그대로 기반으로 삼고, 아니면 기본 구조 생성
        base_message = record.msg if isinstance(record.msg, dict) else {
            "message": record.getMessage()
        }

        log = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            **base_message,
        }

        trace_id = getattr(record, "trace_id", None)
        if trace_id:
            log["trace_id"] = trace_id

        if record.exc_info:
            log["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log, ensure_ascii=False, default=str)


_HANDLER_MARK = "_studio_check_handler"


def setup_logging(log_dir: str = "logs"):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # 집계 서버와 위임 서버가 같은 프로세스에서 import될 수 있으므로 중복 등록 방지
    if any(getattr(h, _HANDLER_MARK, False) for h in root_logger.handlers):
        return

    os.makedirs(log_dir, exist_ok=True)

    json_formatter = JsonFormatter()
    trace_filter = TraceIdFilter()

    # 콘솔 핸들러
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(json_formatter)
    console_handler.addFilter(trace_filter)
    setattr(console_handler, _HANDLER_MARK, True)
    root_logger.addHandler(console_handler)

    # 일자별 파일 로테이션 핸들러 (자정 기준, 7일 보관)
    file_handler = TimedRotatingFileHandler(
        filename=os.path.join(log_dir, "app.log"),
        when="midnight",
        backupCount=7,
        encoding="utf-8",
        utc=False,
    )
    file_handler.setFormatter(json_formatter)
    file_handler.addFilter(trace_filter)
    setattr(file_handler, _HANDLER_MARK, True)
    root_logger.addHandler(file_handler)

import contextvars
import uuid
from typing import Optional

# 요청 단위 Trace ID. 로그 필터가 여기서 읽어 모든 로그 라인에 붙입니다.
# 위임 서버 호출 시에도 같은 값을 X-Trace-ID 헤더로 전달합니다.
_trace_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("trace_id", default=None)


def get_trace_id() -> Optional[str]:
    return _trace_id.get()


def set_trace_id(trace_id: str) -> contextvars.Token:
    return _trace_id.set(trace_id)


def reset_trace_id(token: contextvars.Token) -> None:
    _trace_id.reset(token)


def new_trace_id() -> str:
    return str(uuid.uuid4())

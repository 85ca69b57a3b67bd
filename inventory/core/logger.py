import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from core.config import settings

# 요청 단위 추적 ID (RequestLogMiddleware가 설정)
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

# 모든 앱 로거의 부모. 핸들러는 여기 한 곳에만 붙는다
ROOT_LOGGER = "inventory"

_RESERVED = {"timestamp", "level", "message", "logger", "request_id"}


class JsonFormatter(logging.Formatter):
    """
    한 줄 JSON 로그

    {"timestamp": "...", "level": "WARNING", "logger": "inventory.auth",
     "message": "Login failed", "request_id": "1f2e3d4c", "reason": "User not found"}

    extra={"extra_data": {...}}로 넘긴 필드는 최상위 키로 펼친다.
    예외가 붙은 레코드는 traceback 문자열을 exc_info 키로 남긴다.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(),
        }

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            entry.update({k: v for k, v in extra_data.items() if k not in _RESERVED})

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.setLevel(settings.log_level.upper())
        # uvicorn 루트 로거로 중복 출력되지 않도록
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """inventory.<name> 로거. 최초 호출 시 JSON 핸들러를 한 번만 설치"""
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]

from contextvars import ContextVar
from datetime import datetime
from enum import StrEnum
import logging
import os
import re
import sys
from typing import TYPE_CHECKING, Any
import zoneinfo

from loguru import logger as loguru_logger


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger, Record

from src.platform.config.core_setting import settings
from src.platform.logging.service_context import get_service_context
from src.platform.observability.tracing import current_trace_id


LOG_DIR = os.environ.get('TEST_LOG_DIR') or settings.LOG_DIR

# Keys whose values never reach a log line: payment signatures, webhook
# secrets, bearer tokens and admission QR tokens
SENSITIVE_KEYWORDS = {
    'password',
    'signature',
    'secret',
    'token',
    'qr_token',
    'authorization',
}
DEPTH_LINE = '│'

chain_start_time_var: ContextVar[float] = ContextVar('chain_start_time_var', default=0)
call_depth_var: ContextVar[int] = ContextVar('call_depth_var', default=0)


class ExtraField(StrEnum):
    SERVICE_CONTEXT = 'service_context'
    TRACE_ID = 'trace_id'
    CHAIN_START_TIME = 'chain_start_time'
    CALL_TARGET = 'call_target'


# stdlib loggers whose DEBUG output is dropped before it reaches loguru
_QUIET_DEBUG_LOGGERS = ('aiosqlite', 'asyncio', 'httpcore', 'hpack', 'multipart')

# '127.0.0.1:5432 - "POST /api/payment/verify HTTP/1.1" 409' (uvicorn)
# '127.0.0.1 - "POST /api/payment/verify HTTP/1.1" - 409 - 8ms' (granian)
_ACCESS_LOG_STATUS = re.compile(r'" (?:- )?(\d{3})\b')


def access_log_level(message: str) -> str | None:
    """Map an HTTP access-log line to a level by its status class."""
    if ' HTTP/' not in message or not (match := _ACCESS_LOG_STATUS.search(message)):
        return None
    status_code = int(match.group(1))
    if status_code >= 500:
        return 'CRITICAL'
    if status_code >= 400:
        return 'ERROR'
    if status_code >= 300:
        return 'WARNING'
    return 'SUCCESS'


def _stamp_trace_id(record: 'Record') -> None:
    record['extra'][ExtraField.TRACE_ID] = current_trace_id() or '-'


def _default_extra() -> dict[str, Any]:
    return {
        ExtraField.SERVICE_CONTEXT: get_service_context(),
        ExtraField.CHAIN_START_TIME: '',
        ExtraField.CALL_TARGET: '',
    }


class InterceptHandler(logging.Handler):
    """Route stdlib logging (uvicorn, sqlalchemy, httpx) into loguru."""

    _bound: 'LoguruLogger | None' = None

    @classmethod
    def bound_logger(cls) -> 'LoguruLogger':
        if cls._bound is None:
            cls._bound = loguru_logger.bind(**_default_extra())
        return cls._bound

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno <= logging.DEBUG and record.name.startswith(_QUIET_DEBUG_LOGGERS):
            return

        message = record.getMessage()
        level: str | int | None = access_log_level(message)
        if level is None:
            try:
                level = loguru_logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore
            depth += 1

        self.bound_logger().opt(depth=depth, exception=record.exc_info).log(level, message)


io_log_format = ' | '.join(
    (
        f'<c>{{extra[{ExtraField.SERVICE_CONTEXT}]}}</>',
        f'<m>{{extra[{ExtraField.TRACE_ID}]}}</>',
        '<lvl>{level:<8}</>',
        f'<c>{{file}}::{{function}}:{{line}}</>=><y>{{extra[{ExtraField.CALL_TARGET}]}}</>',
        '{message}',
        '<lk>{elapsed}</>',
        f'<lk>{{extra[{ExtraField.CHAIN_START_TIME}]:<18}}</>',
    )
)

min_log_level = 'DEBUG' if settings.DEBUG else 'INFO'


def _log_file_path() -> str:
    now_local = datetime.now(zoneinfo.ZoneInfo(settings.LOG_TIMEZONE))
    prefix = 'test_' if os.environ.get('TEST_LOG_DIR') else ''
    return f'{LOG_DIR}/{prefix}{now_local.strftime("%Y-%m-%d_%H")}.log'


def _build_sinks() -> list[dict[str, Any]]:
    sinks: list[dict[str, Any]] = [
        {'sink': sys.stdout, 'format': io_log_format, 'level': min_log_level, 'enqueue': True}
    ]
    # Production ships stdout to the log collector; files are a local convenience
    if settings.DEBUG:
        sinks.append(
            {
                'sink': _log_file_path(),
                'format': io_log_format,
                'level': min_log_level,
                'rotation': '1 hour',
                'retention': '7 days',
                'compression': 'gz',
                'enqueue': True,
            }
        )
    return sinks


loguru_logger.configure(handlers=_build_sinks(), patcher=_stamp_trace_id)
custom_logger = loguru_logger.bind(**_default_extra())

logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

"""
Logging setup for the client.

Production console output is one JSON object per line. Development console
output, and log files in every environment, use a column layout (coloured on
the console only):

    2024-01-01 12:00:00 | INFO    | BinanceClient ready | binance_client.client:create:92
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pythonjsonlogger import jsonlogger

JSON_FIELDS = "%(timestamp)s %(level)s %(name)s %(message)s"

# Libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("aiohttp", "asyncio")


def resolve_timezone(name: str) -> tzinfo:
    """IANA zone by name, UTC when the name is unknown"""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def _record_time(record: logging.LogRecord, tz: tzinfo) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone(tz)


class JsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines with timestamp, level and source location"""

    def __init__(self, *args, local_tz: Optional[tzinfo] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.local_tz = local_tz or timezone.utc

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record.setdefault("timestamp", None)
        if not log_record["timestamp"]:
            log_record["timestamp"] = _record_time(record, self.local_tz).isoformat()
        log_record["level"] = record.levelname
        log_record["location"] = f"{record.module}:{record.funcName}:{record.lineno}"

    def json_dumps(self, obj):
        return json.dumps(obj, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """time | level | message | logger:function:line"""

    def __init__(self, *args, local_tz: Optional[tzinfo] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.local_tz = local_tz or timezone.utc

    def _level(self, record: logging.LogRecord) -> str:
        return f"{record.levelname:<7}"

    def format(self, record: logging.LogRecord) -> str:
        stamp = _record_time(record, self.local_tz).strftime("%Y-%m-%d %H:%M:%S")
        location = f"{record.name}:{record.funcName}:{record.lineno}"
        return f"{stamp} | {self._level(record)} | {super().format(record)} | {location}"


class ColoredFormatter(PlainFormatter):
    """PlainFormatter with ANSI colours on the level column"""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def _level(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno)
        if color is None:
            return super()._level(record)
        return f"{color}{super()._level(record)}{self.RESET}"


def _console_formatter(environment: str, local_tz: tzinfo) -> logging.Formatter:
    if environment == "prod":
        return JsonFormatter(JSON_FIELDS, local_tz=local_tz)
    return ColoredFormatter("%(message)s", local_tz=local_tz)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    environment: str = "dev",
    timezone_name: str = "UTC"
) -> None:
    """
    Configure the root logger.

    Replaces any existing root handlers with a stdout handler and, when
    ``log_file`` is given, a plain-text file handler rotated at midnight UTC
    (client.log, client.log.2024-01-01, ...).

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_file: Optional log file path; parent directories are created
        environment: "prod" selects JSON console output, anything else colored text
        timezone_name: Zone used for timestamps, e.g. Europe/London
    """
    local_tz = resolve_timezone(timezone_name)
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(_console_formatter(environment, local_tz))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            utc=True,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setFormatter(PlainFormatter("%(message)s", local_tz=local_tz))
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Module logger, e.g. ``logger = get_logger(__name__)``.

    Handlers live on the root logger only, so records propagate there.
    """
    return logging.getLogger(name)


class LoggerContext:
    """
    Temporarily change one logger's level.

    Example:
        with LoggerContext("binance_client.services.rate_limiter", logging.DEBUG):
            await client.get_prices()  # admission waits are logged
    """

    def __init__(self, logger_name: str, level: int):
        self.logger = logging.getLogger(logger_name)
        self.level = level
        self._saved: Optional[int] = None

    def __enter__(self) -> logging.Logger:
        self._saved = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self._saved)


def init_logging_from_config() -> None:
    """Configure logging from the environment-driven Config"""
    from binance_client.core.config import get_config

    config = get_config()
    setup_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        environment=config.environment,
        timezone_name=config.timezone,
    )
    get_logger(__name__).info(
        f"Logging initialized: level={config.log_level}, "
        f"environment={config.environment}, timezone={config.timezone}"
    )

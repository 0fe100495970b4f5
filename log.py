"""
Logging setup using loguru.

Development runs get colored human-readable lines; with ``LOG_JSON=true``
every record is emitted as one JSON object that also carries the current
``request_id`` (set per HTTP request by the middleware in ``main.py``).
"""

import json
import sys
import traceback
from contextvars import ContextVar
from typing import Any, Dict, Optional

from loguru import logger as loguru_logger

from config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def serialize(record: Dict[str, Any]) -> str:
    subset = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["module"],
        "function": record["function"],
        "line": record["line"],
    }
    if request_id := request_id_var.get():
        subset["request_id"] = request_id
    subset.update(record["extra"])

    if exc := record["exception"]:
        subset["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value),
            "traceback": traceback.format_exception(exc.type, exc.value, exc.traceback),
        }
    return json.dumps(subset, default=str)


def patching(record: Dict[str, Any]) -> None:
    record["extra"]["serialized"] = serialize(record)


def setup_logging(level: str = "INFO", json_logs: bool = False, colorize: bool = True):
    """Replace loguru's default handler with the app's stdout handler."""
    loguru_logger.remove()
    configured = loguru_logger.patch(patching) if json_logs else loguru_logger

    if json_logs:
        configured.add(sys.stdout, level=level, format="{extra[serialized]}")
    else:
        configured.add(
            sys.stdout,
            level=level,
            format=(
                "<green>{time:HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            ),
            colorize=colorize,
        )
    return configured


logger = setup_logging(level=settings.log_level, json_logs=settings.log_json)

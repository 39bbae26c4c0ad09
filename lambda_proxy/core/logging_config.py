"""
Logging Configuration

Provides:
- CustomJsonFormatter: one JSON object per record, with trace/request ids
- setup_logging: YAML dictConfig loader with environment substitution
"""

import json
import logging
import logging.config
import os
import string
from datetime import datetime, timezone
from typing import Optional

import yaml

from .request_context import get_request_id, get_trace_id

_STANDARD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class CustomJsonFormatter(logging.Formatter):
    """
    JSON formatter.

    Fields:
      - _time: ISO8601 timestamp (millisecond precision)
      - level: Log level
      - logger: Logger name (e.g. lambda_proxy.access)
      - message: Log message
      - trace_id: X-Amzn-Trace-Id of the request being handled
      - aws_request_id: Request id generated by the proxy
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "_time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = getattr(record, "trace_id", None) or get_trace_id()
        if trace_id:
            log_data["trace_id"] = trace_id
        request_id = getattr(record, "aws_request_id", None) or get_request_id()
        if request_id:
            log_data["aws_request_id"] = request_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data.setdefault(key, value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config_path: Optional[str] = None, level: str = "INFO"):
    """
    Load the YAML config, substitute environment variables, and initialize logging.

    Without a config file, fall back to basicConfig at the given level.
    """
    if not config_path or not os.path.exists(config_path):
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        return

    with open(config_path, "r", encoding="utf-8") as f:
        # Supports ${LOG_LEVEL} format.
        template = string.Template(f.read())

    mapping = os.environ.copy()
    mapping.setdefault("LOG_LEVEL", level.upper())

    content = template.safe_substitute(mapping)
    logging.config.dictConfig(yaml.safe_load(content))

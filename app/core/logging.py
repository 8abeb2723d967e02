"""Logging setup for the API process.

Everything goes to stdout, either as plain text or as one JSON object per
line. Options come straight from the environment because the engine reads
Settings at import time, before the app (and this module's caller) exists.

Env vars:
- LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
- LOG_JSON: emit JSON lines (default: false)
- LOG_REQUESTS: per-request access lines from our middleware (default: true)
- LOG_UVICORN_ACCESS: uvicorn's own access log; defaults to the opposite of
  LOG_REQUESTS so each request is logged once
- SQL_LOG_LEVEL: level for sqlalchemy.engine (default: WARNING)
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

# Only these record attributes reach JSON output
LOG_EXTRA_KEYS = (
    "request_id",
    "method",
    "path",
    "query",
    "status_code",
    "duration_ms",
    "client_ip",
    "user_agent",
    "error_type",
    "user_id",
    "role",
    "signup_request_id",
)

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def env_bool(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class LoggingOptions:
    level: str = "INFO"
    json: bool = False
    request_lines: bool = True
    uvicorn_access: bool = False
    sql_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> LoggingOptions:
        request_lines = env_bool("LOG_REQUESTS", default=True)
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            json=env_bool("LOG_JSON", default=False),
            request_lines=request_lines,
            uvicorn_access=env_bool("LOG_UVICORN_ACCESS", default=not request_lines),
            sql_level=os.getenv("SQL_LOG_LEVEL", "WARNING").upper(),
        )


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with whitelisted extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key in LOG_EXTRA_KEYS:
            if key not in record.__dict__:
                continue
            value = record.__dict__[key]
            # user ids and roles arrive as UUIDs and enums
            payload[key] = value if isinstance(value, (int, float)) else str(value)

        return json.dumps(payload, ensure_ascii=False)


def build_logging_config(options: LoggingOptions) -> dict[str, Any]:
    """dictConfig payload routing app, uvicorn and library loggers to stdout."""

    def routed(level: str) -> dict[str, Any]:
        return {"level": level, "propagate": True}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "text": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            },
            "json": {"()": "app.core.logging.JsonFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": options.level,
                "formatter": "json" if options.json else "text",
                "stream": sys.stdout,
            }
        },
        "root": {"handlers": ["console"], "level": options.level},
        "loggers": {
            "uvicorn": routed(options.level),
            "uvicorn.error": routed(options.level),
            "uvicorn.access": routed("INFO" if options.uvicorn_access else "WARNING"),
            "sqlalchemy.engine": routed(options.sql_level),
            # Resend's HTTP client
            "urllib3": routed("WARNING"),
        },
    }


def configure_logging(options: LoggingOptions | None = None) -> None:
    logging.config.dictConfig(build_logging_config(options or LoggingOptions.from_env()))

"""
Route Validator Logging Module
==============================
Structured JSON logging for the validation middleware.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

# LogRecord attributes that are never copied into the JSON payload
RESERVED_RECORD_FIELDS = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
    ]
)


class ValidatorJSONFormatter(logging.Formatter):
    """JSON formatter for validation events"""

    def __init__(
        self,
        service_name: str = "route_validator",
        exclude_fields: Optional[List[str]] = None,
    ):
        super().__init__()
        self.service_name = service_name
        self.exclude_fields = exclude_fields or []

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in RESERVED_RECORD_FIELDS or key in self.exclude_fields:
                continue
            log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_validator_logging(
    service_name: str = "route_validator",
    log_level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
    exclude_fields: Optional[List[str]] = None,
) -> logging.Logger:
    """
    Setup logging for the validation middleware.

    Child loggers obtained through ``get_logger`` propagate to the logger
    configured here.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers to avoid duplication
    logger.handlers.clear()

    json_formatter = ValidatorJSONFormatter(
        service_name=service_name, exclude_fields=exclude_fields
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(json_formatter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir_path = Path.cwd() / "logs"
        else:
            log_dir_path = Path(log_dir)

        log_dir_path.mkdir(parents=True, exist_ok=True)

        log_file = log_dir_path / f"{service_name}.log"
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_file_size, backupCount=backup_count
        )
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(json_formatter)
        logger.addHandler(file_handler)

        error_log_file = log_dir_path / f"{service_name}_errors.log"
        error_handler = RotatingFileHandler(
            error_log_file, maxBytes=max_file_size, backupCount=backup_count
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(json_formatter)
        logger.addHandler(error_handler)

    logger.info(
        "Route validator logging configured",
        extra={
            "log_level": log_level,
            "file_logging": enable_file_logging,
            "handlers": len(logger.handlers),
        },
    )

    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger nested under the ``route_validator`` namespace"""
    if name.startswith("route_validator"):
        return logging.getLogger(name)
    return logging.getLogger(f"route_validator.{name}")

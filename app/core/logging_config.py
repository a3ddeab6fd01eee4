"""
Logging configuration for the Record Schema Service.
Console and rotating file handlers, process metrics and structured helpers.
"""

import logging
import logging.handlers
import sys
import os
from pathlib import Path
from typing import Any, Dict, Optional
import psutil

from app.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - [%(levelname)s] - [PID:%(pid)s] - %(message)s%(record_context)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 10 * 1024 * 1024


class PerformanceLogger:
    """Reports memory and CPU usage of the service process."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.process = psutil.Process()

    def snapshot(self, interval: float = 0.1) -> Dict[str, float]:
        """Current RSS memory (MB), memory share and CPU usage of the process."""
        memory_info = self.process.memory_info()
        return {
            "memory_mb": round(memory_info.rss / 1024 / 1024, 2),
            "memory_percent": round(self.process.memory_percent(), 2),
            "cpu_percent": round(self.process.cpu_percent(interval=interval), 2)
        }

    def log_performance_snapshot(self, context: str = "") -> Dict[str, float]:
        metrics = self.snapshot()
        self.logger.info(
            f"PERF - {context}: {metrics['memory_mb']:.2f} MB ({metrics['memory_percent']:.2f}%), "
            f"CPU {metrics['cpu_percent']:.2f}%",
            extra={"metric_type": "performance", "context": context, **metrics}
        )
        return metrics


class ContextFilter(logging.Filter):
    """Add the process id and any tenant / record-type context to log records."""

    def filter(self, record):
        record.pid = os.getpid()

        context = []
        for key in ("tenant_id", "record_type"):
            value = getattr(record, key, None)
            if value:
                context.append(f"{key}={value}")
        record.record_context = f" [{', '.join(context)}]" if context else ""

        return True


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m'
    }

    def format(self, record):
        if sys.stdout.isatty():
            levelname = record.levelname
            record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def _rotating_handler(path: str, level: int, formatter: logging.Formatter, backup_count: int = 5):
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=backup_count)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    enable_file_logging: Optional[bool] = None
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (default: settings.LOG_DIR)
        enable_file_logging: Write rotating app/error/performance logs
            (default: settings.ENABLE_FILE_LOGGING)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    log_dir = log_dir or settings.LOG_DIR
    if enable_file_logging is None:
        enable_file_logging = settings.ENABLE_FILE_LOGGING

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ColoredFormatter(
        '%(asctime)s - %(name)s - [%(levelname)s] - %(message)s%(record_context)s',
        datefmt=DATE_FORMAT
    ))
    console_handler.addFilter(ContextFilter())
    root_logger.addHandler(console_handler)

    if enable_file_logging:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        root_logger.addHandler(_rotating_handler(
            os.path.join(log_dir, 'app.log'),
            numeric_level,
            logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        ))

        # Errors carry their source location
        root_logger.addHandler(_rotating_handler(
            os.path.join(log_dir, 'error.log'),
            logging.ERROR,
            logging.Formatter(
                LOG_FORMAT + '\nLocation: %(pathname)s:%(lineno)d\nFunction: %(funcName)s\n',
                datefmt=DATE_FORMAT
            )
        ))

        perf_handler = _rotating_handler(
            os.path.join(log_dir, 'performance.log'),
            logging.INFO,
            logging.Formatter('%(asctime)s - [PERF] - %(message)s', datefmt=DATE_FORMAT),
            backup_count=3
        )
        perf_handler.addFilter(lambda record: hasattr(record, 'metric_type'))
        root_logger.addHandler(perf_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.info(f"Logging initialized - Level: {log_level}, File Logging: {enable_file_logging}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with an attached `perf` PerformanceLogger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not hasattr(logger, 'perf'):
        logger.perf = PerformanceLogger(logger)
    return logger


def log_operation_start(logger: logging.Logger, operation: str, **kwargs: Any):
    """Log the start of an operation with context."""
    logger.info(
        f"Starting operation: {operation}",
        extra={"operation": operation, "phase": "start", **kwargs}
    )


def log_operation_end(logger: logging.Logger, operation: str, success: bool = True, **kwargs: Any):
    """Log the end of an operation with context."""
    status = "completed" if success else "failed"
    level = logging.INFO if success else logging.ERROR
    logger.log(
        level,
        f"Operation {status}: {operation}",
        extra={"operation": operation, "phase": "end", "success": success, **kwargs}
    )


def log_api_request(logger: logging.Logger, method: str, path: str, status_code: int, duration_ms: float):
    logger.info(
        f"API {method} {path} - {status_code} - {duration_ms:.2f}ms",
        extra={
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms
        }
    )

"""
Logging utilities for WindWatch-NG.
"""

import logging
import logging.handlers
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable
import structlog
from structlog.stdlib import LoggerFactory

from ..core.config import LoggingConfig

_RECORD_ATTRIBUTES = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info'
}


class WindWatchFormatter(logging.Formatter):
    """JSON formatter for WindWatch-NG logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured data."""
        extra_data = {
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if extra_data:
            log_entry['data'] = extra_data

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, default=str)


class PerformanceLogger:
    """Logger for performance metrics."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._metrics: Dict[str, Any] = {}

    def start_timer(self, operation: str) -> str:
        """Start timing an operation."""
        timer_id = f"{operation}_{datetime.now(timezone.utc).timestamp()}"
        self._metrics[timer_id] = {
            'operation': operation,
            'start_time': datetime.now(timezone.utc),
        }
        return timer_id

    def end_timer(self, timer_id: str, success: bool = True, **extra_data) -> None:
        """End timing an operation and log the result."""
        metric = self._metrics.pop(timer_id, None)
        if metric is None:
            self.logger.warning(f"Timer {timer_id} not found")
            return

        duration_ms = (datetime.now(timezone.utc) - metric['start_time']).total_seconds() * 1000
        self.logger.info(
            f"Operation completed: {metric['operation']}",
            extra={
                'operation': metric['operation'],
                'duration_ms': round(duration_ms, 2),
                'success': success,
                **extra_data
            }
        )


class AlertLogger:
    """Structured events for the alert poll cycle."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def log_alert_enriched(self, alert_id: str, event: str, stations: Iterable[str], **extra_data) -> None:
        """Log an alert that has qualifying stations."""
        stations = list(stations)
        self.logger.info(
            f"Alert enriched: {event}",
            extra={
                'event_type': 'alert_enriched',
                'alert_id': alert_id,
                'alert_event': event,
                'station_count': len(stations),
                'stations': stations,
                **extra_data
            }
        )

    def log_alerts_stored(self, count: int, **extra_data) -> None:
        """Log a successful upsert batch."""
        self.logger.info(
            f"Stored {count} alerts",
            extra={
                'event_type': 'alerts_stored',
                'alert_count': count,
                **extra_data
            }
        )

    def log_feed_unavailable(self, error: str, **extra_data) -> None:
        """Log that the alert feed could not be read this cycle."""
        self.logger.warning(
            "Alert feed unavailable",
            extra={
                'event_type': 'feed_unavailable',
                'error': error,
                **extra_data
            }
        )


def setup_logging(config: LoggingConfig) -> tuple[logging.Logger, PerformanceLogger, AlertLogger]:
    """
    Setup logging for WindWatch-NG.

    Args:
        config: Logging configuration

    Returns:
        Tuple of (main_logger, performance_logger, alert_logger)
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = logging.getLogger('windwatch_ng')
    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    logger.handlers.clear()

    if config.format == 'json':
        formatter = WindWatchFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    performance_logger = PerformanceLogger(logger)
    alert_logger = AlertLogger(logger)

    logger.info("Logging system initialized", extra={
        'log_level': config.level,
        'log_format': config.format,
        'log_file': str(config.file) if config.file else None
    })

    return logger, performance_logger, alert_logger

"""
Logging utilities for the web crawler system.
"""

import logging
import logging.handlers
import json
import platform
import sys
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime, timezone

import psutil


# Attributes every LogRecord has; anything else was passed through ``extra``
_STANDARD_RECORD_FIELDS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in vars(record).items():
            if key not in _STANDARD_RECORD_FIELDS and key not in log_entry:
                log_entry[key] = value

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class CrawlerLogAdapter(logging.LoggerAdapter):
    """Logger adapter that adds crawler-specific context."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Add extra context to log messages."""
        if 'extra' not in kwargs:
            kwargs['extra'] = {}

        # Add adapter extra fields
        kwargs['extra'].update(self.extra)

        return msg, kwargs

    def log_url_event(self, level: int, url: str, message: str, **kwargs):
        """Log URL-specific events."""
        if not self.isEnabledFor(level):
            return
        extra = kwargs.get('extra', {})
        extra['url'] = url
        extra['event_type'] = 'url_event'
        kwargs['extra'] = extra
        self.log(level, message, **kwargs)


class NoiseFilter(logging.Filter):
    """Filter to suppress noisy third-party logs."""

    def __init__(self, suppress_modules: Optional[list] = None):
        super().__init__()
        self.suppress_modules = suppress_modules or [
            'aiohttp.access',
            'urllib3.connectionpool',
        ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out noisy log records."""
        return not any(record.name.startswith(module) for module in self.suppress_modules)


def setup_logging(config: Dict[str, Any],
                  enable_json: bool = False,
                  enable_noise_filtering: bool = True) -> logging.Logger:
    """
    Setup logging for the crawler.

    Args:
        config: Logging configuration dictionary (level, file, format)
        enable_json: Enable JSON formatted logging
        enable_noise_filtering: Enable filtering of noisy third-party logs

    Returns:
        Configured root logger
    """
    # Create logs directory
    log_file = Path(config.get('file') or 'logs/crawler.log')
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.get('level', 'INFO').upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    # Choose formatter
    if enable_json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            config.get('format') or '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # Console handler; stdout carries the crawl result, so logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler with rotation
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=50 * 1024 * 1024,  # 50MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    # Error file handler
    error_log_file = log_file.parent / 'errors.log'
    error_handler = logging.handlers.RotatingFileHandler(
        error_log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=3,
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)

    if enable_noise_filtering:
        for handler in root_logger.handlers:
            handler.addFilter(NoiseFilter())

    # Configure third-party loggers
    third_party_loggers = {
        'aiohttp': logging.WARNING,
        'urllib3': logging.WARNING,
        'asyncio': logging.WARNING,
    }

    for logger_name, level in third_party_loggers.items():
        logging.getLogger(logger_name).setLevel(level)

    root_logger.info("Logging system initialized")
    root_logger.info(f"Log file: {log_file}")
    root_logger.info(f"Error log file: {error_log_file}")
    root_logger.info(f"Log level: {config.get('level', 'INFO')}")
    root_logger.info(f"JSON formatting: {enable_json}")

    return root_logger


def get_crawler_logger(name: str, **extra_context) -> CrawlerLogAdapter:
    """
    Get a crawler-specific logger with additional context.

    Args:
        name: Logger name
        **extra_context: Additional context fields to include in all log messages

    Returns:
        CrawlerLogAdapter instance
    """
    logger = logging.getLogger(name)
    return CrawlerLogAdapter(logger, extra_context)


def log_system_info():
    """Log system and environment information."""
    logger = logging.getLogger(__name__)

    logger.info("=== SYSTEM INFORMATION ===")
    logger.info(f"Platform: {platform.platform()}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"CPU cores: {psutil.cpu_count()}")
    logger.info(f"Memory: {psutil.virtual_memory().total / 1024**3:.1f} GB")

"""
Logging setup for the search index.

Workers log from many threads at once, so every format includes the thread
name. Events about a single file or URL carry it in a `location` field.
"""

import logging
import logging.handlers
import json
import sys
from pathlib import Path
from typing import Dict, Any, Iterable, Optional
from datetime import datetime, timezone


DEFAULT_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"

NOISY_LOGGERS = ('aiohttp', 'asyncio', 'urllib3')

MAX_LOG_BYTES = 50 * 1024 * 1024
LOG_BACKUPS = 5


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    CONTEXT_FIELDS = ('location', 'event_type', 'component')

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
            'source': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for key in self.CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


class IndexLogAdapter(logging.LoggerAdapter):
    """Adds fixed context, such as the component name, to every record."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs

    def log_location_event(self, level: int, location: str, message: str, **kwargs):
        """Log a message about one indexed file or crawled URL."""
        extra = dict(kwargs.pop('extra', {}))
        extra.update(location=location, event_type='location_event')
        self.log(level, message, extra=extra, **kwargs)


class PerformanceFilter(logging.Filter):
    """Drops records from chatty HTTP client loggers."""

    def __init__(self, suppress_modules: Optional[Iterable[str]] = None):
        super().__init__()
        self.suppress_modules = tuple(suppress_modules or (
            'aiohttp.access',
            'aiohttp.client',
            'urllib3.connectionpool',
        ))

    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(self.suppress_modules)


def _attach(root: logging.Logger, handler: logging.Handler, level: int,
            formatter: logging.Formatter, filtered: bool):
    handler.setLevel(level)
    handler.setFormatter(formatter)
    if filtered:
        handler.addFilter(PerformanceFilter())
    root.addHandler(handler)


def setup_logging(config: Dict[str, Any],
                  enable_json: bool = False,
                  enable_performance_filtering: bool = True) -> logging.Logger:
    """
    Replace the root logger's handlers with a console handler and, when
    config names a file, a size-rotated file handler.

    Args:
        config: logging section of the configuration (level, file, format)
        enable_json: write JSONFormatter records instead of plain lines
        enable_performance_filtering: drop HTTP client noise

    Returns:
        the root logger
    """
    level = config.get('level', 'INFO').upper()
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    formatter = JSONFormatter() if enable_json else logging.Formatter(config.get('format') or DEFAULT_FORMAT)

    _attach(root, logging.StreamHandler(sys.stdout), logging.INFO, formatter, enable_performance_filtering)

    log_file = config.get('file')
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding='utf-8'
        )
        _attach(root, handler, logging.DEBUG, formatter, enable_performance_filtering)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Logging at {level}" + (f" to {log_file}" if log_file else ""))
    return root


def get_index_logger(name: str, **extra_context) -> IndexLogAdapter:
    return IndexLogAdapter(logging.getLogger(name), extra_context)


def log_system_info():
    """Log the platform, interpreter and resources available to the workers."""
    import platform
    import psutil

    logger = logging.getLogger(__name__)
    memory = psutil.virtual_memory()

    logger.info(f"Platform: {platform.platform()}")
    logger.info(f"Python: {platform.python_version()} ({platform.python_implementation()})")
    logger.info(f"CPU cores: {psutil.cpu_count()} logical, {psutil.cpu_count(logical=False)} physical")
    logger.info(f"Memory: {memory.available / 1024**3:.1f} of {memory.total / 1024**3:.1f} GB available")

"""
Logging layer for solrbridge.

Features:
- Extra TRACE level below DEBUG for per-document output
- Colored console output, optional rotating text file and JSON file
- Context enrichment (session id, core, batch number...)
- Operation timing with slow operation detection

Usage:
    from solrbridge.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Session started")

    with logger.context(core="articles"):
        logger.debug("Flushing batch")

    with logger.timer("solr_update"):
        client.execute(update)
"""

import logging
import logging.handlers
import json
import os
import sys
import time
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

ROOT_LOGGER_NAME = "solrbridge"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class ColoredFormatter(logging.Formatter):
    """Console formatter coloring the level name."""

    COLORS = {
        'TRACE': '\033[36m',
        'DEBUG': '\033[34m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        if not sys.stdout.isatty():
            return super().format(record)

        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname:8}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc)
            .strftime('%Y-%m-%dT%H:%M:%S.%fZ'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }

        if hasattr(record, 'context'):
            payload['context'] = record.context
        if hasattr(record, 'duration_ms'):
            payload['duration_ms'] = record.duration_ms

        if record.exc_info:
            payload['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        return json.dumps(payload, default=str)


class ContextEnrichedLogger(logging.LoggerAdapter):
    """Logger adapter attaching the active context to every record."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})
        self._context_stack = []
        self._lock = Lock()

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if self._context_stack:
            merged = {}
            for ctx in self._context_stack:
                merged.update(ctx)
            kwargs.setdefault('extra', {})['context'] = merged
        return msg, kwargs

    @contextmanager
    def context(self, **kwargs):
        """Add key/value pairs to every record logged inside the block."""
        with self._lock:
            self._context_stack.append(kwargs)
        try:
            yield
        finally:
            with self._lock:
                self._context_stack.pop()

    @contextmanager
    def timer(self, operation: str, slow_threshold_ms: Optional[float] = None):
        """
        Time the enclosed block.

        Args:
            operation: Name of the operation being timed
            slow_threshold_ms: Log a warning above this duration; defaults to
                SOLRBRIDGE_SLOW_THRESHOLD (1000ms)
        """
        if slow_threshold_ms is None:
            slow_threshold_ms = float(os.getenv('SOLRBRIDGE_SLOW_THRESHOLD', '1000'))

        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            extra = {'duration_ms': duration_ms, 'operation': operation}
            if duration_ms >= slow_threshold_ms:
                self.warning(f"Slow operation: {operation} ({duration_ms:.0f}ms)", extra=extra)
            else:
                self.debug(f"Completed: {operation} ({duration_ms:.1f}ms)", extra=extra)

    def trace(self, msg: str, *args, **kwargs):
        """Log with TRACE level."""
        self.log(TRACE_LEVEL, msg, *args, **kwargs)


class LoggerManager:
    """
    Process-wide owner of the ``solrbridge`` handler setup.

    Settings come from environment variables so logging works before any
    configuration file is loaded; ``reconfigure`` applies the loaded config.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self._loggers: Dict[str, ContextEnrichedLogger] = {}
        self._settings: Dict[str, Any] = {}
        self._load_settings()
        self._setup_root_logger()

    def _load_settings(self, **overrides):
        settings = {
            'level': os.getenv('SOLRBRIDGE_LOG_LEVEL', 'INFO').upper(),
            'console': _env_flag('SOLRBRIDGE_LOG_CONSOLE', 'true'),
            'colored': _env_flag('SOLRBRIDGE_LOG_COLORED', 'true'),
            'file': _env_flag('SOLRBRIDGE_LOG_FILE', 'false'),
            'json': _env_flag('SOLRBRIDGE_LOG_JSON', 'false'),
            'log_dir': os.getenv('SOLRBRIDGE_LOG_DIR', 'logs'),
            'backup_count': 7,
            'suppress': _env_flag('SOLRBRIDGE_SUPPRESS_LOGS', 'false'),
            'format': '[{asctime}] {levelname:8} {name:32} {message}',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        }
        settings.update({k: v for k, v in overrides.items() if v is not None})
        self._settings = settings

    def _level_value(self, level: str) -> int:
        if level.upper() == 'TRACE':
            return TRACE_LEVEL
        return getattr(logging, level.upper(), logging.INFO)

    def _setup_root_logger(self):
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)

        root_logger.setLevel(TRACE_LEVEL)
        if self._settings['suppress']:
            root_logger.addHandler(logging.NullHandler())
            return

        text_fmt = self._settings['format']
        datefmt = self._settings['datefmt']
        level = self._level_value(self._settings['level'])

        if self._settings['console']:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            formatter_cls = ColoredFormatter if self._settings['colored'] else logging.Formatter
            console_handler.setFormatter(formatter_cls(fmt=text_fmt, datefmt=datefmt, style='{'))
            root_logger.addHandler(console_handler)

        if self._settings['file'] or self._settings['json']:
            log_dir = Path(self._settings['log_dir']).expanduser().resolve()
            log_dir.mkdir(parents=True, exist_ok=True)

            if self._settings['file']:
                file_handler = logging.handlers.TimedRotatingFileHandler(
                    filename=log_dir / "solrbridge.log",
                    when='midnight',
                    interval=1,
                    backupCount=self._settings['backup_count'],
                    encoding='utf-8'
                )
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter(fmt=text_fmt, datefmt=datefmt, style='{'))
                root_logger.addHandler(file_handler)

            if self._settings['json']:
                json_handler = logging.FileHandler(log_dir / "solrbridge.json", encoding='utf-8')
                json_handler.setLevel(logging.DEBUG)
                json_handler.setFormatter(JSONFormatter())
                root_logger.addHandler(json_handler)

    def get_logger(self, name: str) -> ContextEnrichedLogger:
        """
        Get or create a logger namespaced under ``solrbridge``.

        Args:
            name: Logger name (typically __name__ of calling module)
        """
        if not name.startswith(ROOT_LOGGER_NAME):
            name = f'{ROOT_LOGGER_NAME}.{name}'

        if name not in self._loggers:
            self._loggers[name] = ContextEnrichedLogger(logging.getLogger(name))
        return self._loggers[name]

    def set_level(self, level: str, module: Optional[str] = None):
        """Set the level of the whole tree or of one module logger."""
        if module:
            if not module.startswith(ROOT_LOGGER_NAME):
                module = f'{ROOT_LOGGER_NAME}.{module}'
            logging.getLogger(module).setLevel(self._level_value(level))
        else:
            logging.getLogger(ROOT_LOGGER_NAME).setLevel(self._level_value(level))

    def reconfigure(self, **settings):
        """Rebuild handlers, e.g. from a loaded ``LoggingConfig``."""
        self._load_settings(**settings)
        self._setup_root_logger()
        self.get_logger(__name__).debug(f"Logging reconfigured (level={self._settings['level']})")


_manager = LoggerManager()


def get_logger(name: str = __name__) -> ContextEnrichedLogger:
    """
    Get a logger instance for the given name.

    Example:
        >>> from solrbridge.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> with logger.timer("flush"):
        ...     session.flush()
    """
    return _manager.get_logger(name)


def set_level(level: str, module: Optional[str] = None):
    """
    Set global or module-specific log level.

    Example:
        >>> set_level('DEBUG')
        >>> set_level('TRACE', 'solrbridge.indexing.session')
    """
    _manager.set_level(level, module)


def reconfigure_logger(
    level: Optional[str] = None,
    console: Optional[bool] = None,
    file: Optional[bool] = None,
    json_file: Optional[bool] = None,
    log_dir: Optional[str] = None,
    backup_count: Optional[int] = None,
):
    """Reconfigure handlers after the configuration file is loaded."""
    _manager.reconfigure(
        level=level.upper() if level else None,
        console=console,
        file=file,
        json=json_file,
        log_dir=log_dir,
        backup_count=backup_count,
    )

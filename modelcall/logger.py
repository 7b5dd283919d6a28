import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "modelcall"

STRUCTURED_FIELDS = (
    'component',
    'trace_id',
    'model',
    'attempt',
    'max_retries',
    'status_code',
    'timeout',
    'body_bytes',
    'delay_seconds',
    'duration_seconds',
    'kind',
    'error',
)


LOG_KWARGS = ('exc_info', 'stack_info', 'stacklevel', 'extra')


class FlushingFileHandler(logging.FileHandler):
    """Flushes each record so a running call can be followed with tail -f."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class CallLogger:
    """Structured logger for model calls.

    Accepts keyword fields (trace_id=..., attempt=...) on every call and
    attaches them to the LogRecord. With a log_dir, records go to a single
    append-only JSONL file created lazily on the first message. Without
    log_dir or console output no handlers are attached and records
    propagate to the caller's logging configuration.
    """
    def __init__(
        self,
        component: str,
        log_dir: Optional[Path] = None,
        console_output: bool = False,
        json_output: bool = True,
        level: str = "INFO",
        filename: str = None
    ):
        self.component = component
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.console_output = console_output
        self.json_output = json_output and self.log_dir is not None
        self.level = level
        self.filename = filename or f"{component}.jsonl"

        # Lazy initialization - handlers created on first log
        self._logger = None
        self._initialized = False
        self.log_file = None

    @property
    def owns_handlers(self) -> bool:
        return self.console_output or self.json_output

    def _ensure_initialized(self):
        """Initialize logger and handlers on first use."""
        if self._initialized:
            return

        if not self.owns_handlers:
            self._logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{self.component}")
            self._initialized = True
            return

        logger_name = f"{ROOT_LOGGER_NAME}.{self.component}.{id(self)}"
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(getattr(logging, self.level.upper()))
        self._logger.propagate = False

        if self.console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
            self._logger.addHandler(console_handler)

        if self.json_output:
            # Create log directory only when we actually need to write
            self.log_dir.mkdir(parents=True, exist_ok=True)
            json_file = self.log_dir / self.filename
            json_handler = FlushingFileHandler(json_file, mode='a')
            json_handler.setFormatter(JSONFormatter())
            self._logger.addHandler(json_handler)
            self.log_file = json_file

        self._initialized = True

    @property
    def logger(self) -> logging.Logger:
        """Get the underlying logger, initializing if needed."""
        self._ensure_initialized()
        return self._logger

    def _log(self, level: int, message: str, **fields):
        # exc_info and friends go to Logger.log, everything else becomes a record attribute
        log_kwargs = {name: fields.pop(name) for name in LOG_KWARGS if name in fields}
        extra = {'component': self.component, **fields, **log_kwargs.pop('extra', {})}
        self.logger.log(level, message, extra=extra, **log_kwargs)

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)

    def close(self):
        # Shared hierarchy loggers belong to the caller; only close our own handlers
        if self._initialized and self._logger and self.owns_handlers:
            for handler in self._logger.handlers[:]:
                handler.close()
                self._logger.removeHandler(handler)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(component: str, **kwargs) -> CallLogger:
    return CallLogger(component, **kwargs)

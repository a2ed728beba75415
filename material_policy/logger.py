import json
import logging
import os
import threading
from pathlib import Path

ROOT_LOGGER_NAME = "material_policy"

# JSON key -> LogRecord attribute
RECORD_FIELDS = {
    "time": "asctime",
    "level": "levelname",
    "logger": "name",
    "module": "module",
    "function": "funcName",
    "line": "lineno",
    "message": "message",
}

# Context passed through `extra=` that is copied into the JSON line when present
CONTEXT_FIELDS = ("material_id", "warehouse_id", "request_id", "attempt")

# (filename or None for console, level); files are truncated on each run
HANDLERS = (
    ("material_policy.log", logging.INFO),
    ("errors.log", logging.ERROR),
    (None, logging.DEBUG),
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, keyed by RECORD_FIELDS plus any CONTEXT_FIELDS set on the record"""

    def __init__(self, fields=None):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")
        self.fields = fields if fields is not None else RECORD_FIELDS

    def usesTime(self) -> bool:
        return "asctime" in self.fields.values()

    def format(self, record) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        payload = {key: getattr(record, attribute, None) for key, attribute in self.fields.items()}
        for name in CONTEXT_FIELDS:
            if name in record.__dict__:
                payload[name] = record.__dict__[name]

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str)


class SingletonLogger:
    """
    Process-wide owner of the "material_policy" logger.

    Handlers are attached once, on first use; every module logger is a child
    of it so records keep their dotted name but share the handlers.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._logger = None
        return cls._instance

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._configure()
        prefix = ROOT_LOGGER_NAME + "."
        if name and name.startswith(prefix):
            return self._logger.getChild(name[len(prefix):])
        return self._logger

    @staticmethod
    def _configure() -> logging.Logger:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.handlers.clear()
        logger.propagate = False

        logs_dir = Path(os.environ.get("LOG_DIR", "logs"))
        logs_dir.mkdir(parents=True, exist_ok=True)

        formatter = JsonFormatter()
        for filename, level in HANDLERS:
            if filename is None:
                handler = logging.StreamHandler()
            else:
                handler = logging.FileHandler(logs_dir / filename, mode='w', encoding='utf-8')
            handler.setLevel(level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get the shared logger, or a child of it for a dotted "material_policy.*" name.

    Args:
        name (str): e.g. "material_policy.buisness.approval"

    Returns:
        logging.Logger
    """
    return SingletonLogger().get_logger(name)

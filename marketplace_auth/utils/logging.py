"""Logging setup shared by the whole service.

Plain standard-library logging with a single-line structured formatter on
stdout. Modules get their logger through :func:`get_logger`.
"""

import logging
import sys
from datetime import UTC, datetime

_ROOT = "marketplace_auth"


class StructuredFormatter(logging.Formatter):
    """Render records as ``timestamp | level | logger:func:line | message``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat()
        entry = (
            f"{timestamp} | {record.levelname:<8} | "
            f"{record.name}:{record.funcName}:{record.lineno} | "
            f"{record.getMessage()}"
        )
        if record.exc_info and record.exc_info[1]:
            entry += f" | EXCEPTION: {self.formatException(record.exc_info)}"
        return entry


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once; repeated calls only adjust the level."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_marketplace_auth", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        handler._marketplace_auth = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiokafka").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the service root logger."""
    if name == _ROOT or name.startswith(f"{_ROOT}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")

"""Logging setup for hosts that do not configure logging themselves.

Console output always goes straight to stderr. When a log file is configured,
both sinks move behind one ``QueueListener`` so render-thread callers only pay
for an enqueue.
"""

from __future__ import annotations

import json
import logging
import queue
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from quadrend.api.logging import QuadrendLoggingConfig
from quadrend.runtime.config import load_config

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# LogRecord attributes that never count as caller-supplied ``extra`` fields.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}

_listener: QueueListener | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` keys are nested under ``fields``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        fields = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(config: QuadrendLoggingConfig) -> None:
    """Replace root handlers according to ``config``."""
    shutdown_logging()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, config.level_name.upper(), logging.INFO))

    sinks = _build_sinks(config)
    if len(sinks) == 1:
        root.addHandler(sinks[0])
        return
    _start_listener(root, sinks)


def shutdown_logging() -> None:
    """Flush and stop the file streaming listener, if any."""
    global _listener

    listener, _listener = _listener, None
    if listener is not None:
        listener.stop()


def setup_logging() -> None:
    """Configure logging from ``QUADREND_*`` env vars unless the host already did."""
    if logging.getLogger().handlers:
        return
    configure_logging(load_config().logging)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _build_sinks(config: QuadrendLoggingConfig) -> list[logging.Handler]:
    console = logging.StreamHandler()
    console.setFormatter(_formatter_for(config.console_format))
    sinks: list[logging.Handler] = [console]
    if config.file_path:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_sink = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
        file_sink.setFormatter(_formatter_for(config.file_format))
        sinks.append(file_sink)
    return sinks


def _start_listener(root: logging.Logger, sinks: list[logging.Handler]) -> None:
    global _listener

    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(records))
    _listener = QueueListener(records, *sinks, respect_handler_level=True)
    _listener.start()


def _formatter_for(kind: str) -> logging.Formatter:
    if kind.strip().lower() == "json":
        return JsonFormatter()
    return logging.Formatter(_TEXT_FORMAT)

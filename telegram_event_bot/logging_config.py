from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
AUDIT_FORMAT = "%(asctime)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 50 * 1024 * 1024

ROOT_LOGGER = "telegram_event_bot"
AUDIT_LOGGER = "telegram_event_bot.audit"


class SizeAndTimeRotatingFileHandler(TimedRotatingFileHandler):
    """Rotate logs daily or when size limit exceeded."""

    def __init__(self, filename: Path, backup_count: int, max_bytes: int = MAX_BYTES) -> None:
        filename.parent.mkdir(parents=True, exist_ok=True)
        self.max_bytes = max_bytes
        super().__init__(filename, when="midnight", interval=1, backupCount=backup_count, encoding="utf-8")

    def shouldRollover(self, record: logging.LogRecord) -> int:  # noqa: N802 - signature from base class
        if super().shouldRollover(record):
            return 1
        if self.stream is None:
            self.stream = self._open()
        if self.stream.tell() + len(self.format(record).encode("utf-8")) >= self.max_bytes:
            return 1
        return 0


@dataclass(frozen=True)
class LogStream:
    name: str
    logger: str
    backup_count: int
    level: int = logging.INFO
    fmt: str = LOG_FORMAT


LOG_STREAMS = (
    LogStream("app", ROOT_LOGGER, backup_count=14),
    LogStream("error", ROOT_LOGGER, backup_count=30, level=logging.WARNING),
    LogStream("audit", AUDIT_LOGGER, backup_count=14, fmt=AUDIT_FORMAT),
)


def setup_logging(base_dir: Path) -> dict[str, Path]:
    """Attach the rotating file handlers under ``base_dir``.

    Calling it again does not add handlers twice. Audit records go to their own
    file only.
    """

    base_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=DATE_FORMAT)

    paths: dict[str, Path] = {}
    for stream in LOG_STREAMS:
        path = base_dir / stream.name / f"{stream.name}.log"
        paths[stream.name] = path
        logger = logging.getLogger(stream.logger)
        logger.setLevel(logging.INFO)
        handler_name = f"{ROOT_LOGGER}:{stream.name}"
        if any(handler.get_name() == handler_name for handler in logger.handlers):
            continue
        handler = SizeAndTimeRotatingFileHandler(path, backup_count=stream.backup_count)
        handler.set_name(handler_name)
        handler.setLevel(stream.level)
        handler.setFormatter(logging.Formatter(stream.fmt, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    audit_logger = logging.getLogger(AUDIT_LOGGER)
    audit_logger.propagate = False

    logging.getLogger("apscheduler").setLevel(logging.INFO)
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)
    return paths


def audit(event: str, **fields: Any) -> None:
    """Write one JSON line to the audit log."""

    logging.getLogger(AUDIT_LOGGER).info(json.dumps({"event": event, **fields}, ensure_ascii=False, default=str))

"""
Logging setup for apkfeed runs.

Everything logs under the "apkfeed" logger tree. Console output goes through
rich; the run log is written next to the run output, one JSON object per
line by default.

Pipeline stages emit structured events with `log_event`. The `event` field
names the stage and the remaining keyword fields become top-level keys of
the JSONL record:

    discover_start      url, max_pages
    discover_page       url, page, new_links
    discover_stop       url, page, reason
    item_extracted      url, slug, title_strategy, body_chars
    item_failed         url, error
    image_rehosted      src, durable_url
    image_skipped       src, error (WARNING)
    scrape_start        url, count
    scrape_complete     stats
    auto_link_item      item_id, links_inserted, targets
    auto_link_complete  items, linked, links_inserted

Field names must not collide with LogRecord attributes ("created", "name",
"msg" and so on); `logging` rejects such extras.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

from .config import LoggingConfig

# Attributes every LogRecord carries, plus the ones formatters add
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}


def setup_logging(cfg: LoggingConfig, run_output_dir: Path | None) -> logging.Logger:
    """Configure the "apkfeed" logger for one run.

    Existing handlers are replaced, so calling this twice in a process does
    not duplicate output. The file handler is only attached when a run
    directory is given.
    """
    level = _level_from_string(cfg.level)
    logger = logging.getLogger("apkfeed")
    logger.setLevel(level)
    logger.handlers = []
    logger.propagate = False

    if cfg.console:
        logger.addHandler(_console_handler(level))
    if cfg.file and run_output_dir is not None:
        logger.addHandler(_file_handler(run_output_dir / cfg.filename, cfg.format, level))
    return logger


def log_event(
    logger: logging.Logger | None,
    message: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    if logger is None:
        return
    logger.log(level, message, extra=fields)


class JsonlFormatter(logging.Formatter):
    """One JSON object per record, with event fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS
        )
        return json.dumps(payload, ensure_ascii=True, default=str)


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(path: Path, fmt: str, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    if fmt == "jsonl":
        handler.setFormatter(JsonlFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    return handler


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)

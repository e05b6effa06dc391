"""Structured JSON logging and simulation run context."""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from pvsim.config import settings

run_id_var: ContextVar[str] = ContextVar("run_id", default="")

_EXTRA_FIELDS = ("stage", "month", "duration_ms", "energy_kwh", "irr")


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter with run ID injection."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = run_id_var.get("")
        if rid:
            log_entry["run_id"] = rid

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry)


@contextmanager
def simulation_run(run_id: str | None = None) -> Iterator[str]:
    """Tag every log record emitted inside the block with a run ID."""
    rid = run_id or str(uuid.uuid4())[:8]
    token = run_id_var.set(rid)
    try:
        yield rid
    finally:
        run_id_var.reset(token)


def setup_logging(json_format: bool | None = None, level: str | None = None) -> None:
    """Configure root logger. Use json_format=True for production."""
    if json_format is None:
        json_format = settings.json_logs
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()
    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("numpy").setLevel(logging.WARNING)

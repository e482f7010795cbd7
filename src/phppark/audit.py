"""Audit trail of site, DNS and settings changes.

Every event is appended to ``logs/audit.jsonl`` and inserted into the
``events`` table of ``logs/audit.db``. A failed write raises StorageError,
except while another error is already propagating: then the audit failure is
only logged so the original error reaches the user.
"""

from __future__ import annotations

import getpass
import logging
import os
import sqlite3
import time
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Iterator

from phppark_common import AuditEvent, PhparkConfig

from phppark.config import get_config
from phppark.errors import StorageError

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    actor TEXT NOT NULL,
    action TEXT NOT NULL,
    target TEXT NOT NULL DEFAULT '',
    params TEXT NOT NULL DEFAULT '{}',
    result TEXT NOT NULL,
    error TEXT,
    duration_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_events_target ON events(target);
"""


def current_actor() -> str:
    return os.environ.get("PHPARK_ACTOR") or getpass.getuser()


def _append_jsonl(path: Path, event: AuditEvent) -> None:
    with open(path, "a") as f:
        f.write(event.to_jsonl() + "\n")


def _insert_row(db_path: Path, event: AuditEvent) -> None:
    with closing(sqlite3.connect(str(db_path))) as conn:
        conn.executescript(_SCHEMA)
        with conn:
            conn.execute(
                "INSERT INTO events (timestamp, actor, action, target, params, result, error, duration_ms)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    event.timestamp.isoformat(),
                    event.actor,
                    event.action,
                    event.target,
                    event.model_dump_json(include={"params"}),
                    event.result,
                    event.error,
                    event.duration_ms,
                ),
            )


def record(event: AuditEvent, cfg: PhparkConfig | None = None) -> None:
    """Persist one event to both the JSONL file and the SQLite database."""
    cfg = cfg or get_config()
    try:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
        _append_jsonl(cfg.audit_jsonl_path, event)
        _insert_row(cfg.audit_db_path, event)
    except (OSError, sqlite3.Error) as exc:
        raise StorageError(f"Failed to write audit log in {cfg.log_dir}: {exc}") from exc


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


@contextmanager
def audit(action: str, target: str = "", **params: Any) -> Iterator[AuditEvent]:
    """Record the wrapped operation as success or failure, with its duration."""
    cfg = get_config()
    event = AuditEvent(actor=current_actor(), action=action, target=target, params=params)
    start = time.monotonic()
    try:
        yield event
    except Exception as exc:
        event.result = "failure"
        event.error = str(exc)
        event.duration_ms = _elapsed_ms(start)
        try:
            record(event, cfg)
        except StorageError as audit_exc:
            log.warning("audit event %s not recorded: %s", action, audit_exc)
        raise
    event.result = "success"
    event.duration_ms = _elapsed_ms(start)
    record(event, cfg)

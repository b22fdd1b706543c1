"""Append-only persistence for score records.

Two backends share one contract: ``append`` stamps and persists a record or
raises :class:`StoreWriteError`; ``read_all`` returns every record in append
order and falls back to an empty list when the medium cannot be read.
"""
import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from typing import List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from reflexboard import db


class StoreWriteError(RuntimeError):
    """The record could not be persisted; the submission must fail."""


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class ScoreStore:
    def __init__(self):
        # Single writer per process; also guards the playedAt watermark
        self._lock = threading.Lock()
        self._last_stamp = ''

    def append(self, record: dict) -> dict:
        with self._lock:
            self._ensure_locked()
            stamp = max(utc_timestamp(), self._last_stamp)
            stored = dict(record, playedAt=stamp)
            self._append_locked(stored)
            self._last_stamp = stamp
            return stored

    def read_all(self) -> List[dict]:
        raise NotImplementedError

    def ensure(self) -> None:
        with self._lock:
            self._ensure_locked()

    def _ensure_locked(self) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def _append_locked(self, record: dict) -> None:
        raise NotImplementedError


class JsonFileScoreStore(ScoreStore):
    """The whole collection lives in one JSON list, rewritten atomically."""

    def __init__(self, path):
        super().__init__()
        self.path = os.path.abspath(path)

    def describe(self):
        return f"json file {self.path}"

    def _ensure_locked(self):
        directory = os.path.dirname(self.path)
        try:
            os.makedirs(directory, exist_ok=True)
            if not os.path.exists(self.path):
                self._replace([])
        except OSError as exc:
            raise StoreWriteError(f"cannot initialize {self.path}: {exc}") from exc

    def read_all(self):
        # Reads never create or rewrite the file; a missing file is an empty board
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            current_app.logger.warning(f"[store-read-failed] {self.path}: {exc}")
            return []
        if not isinstance(data, list):
            current_app.logger.warning(f"[store-read-failed] {self.path}: expected a list, got {type(data).__name__}")
            return []
        return [row for row in data if isinstance(row, dict)]

    def _append_locked(self, record):
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            # Never replace a collection we could not read
            raise StoreWriteError(f"cannot read {self.path} before append: {exc}") from exc
        if not isinstance(data, list):
            raise StoreWriteError(f"{self.path} does not hold a list")
        data.append(record)
        try:
            self._replace(data)
        except OSError as exc:
            raise StoreWriteError(f"cannot write {self.path}: {exc}") from exc

    def _replace(self, rows):
        directory = os.path.dirname(self.path)
        fd, tmp_path = tempfile.mkstemp(prefix='.leaderboard-', suffix='.tmp', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(rows, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SqlScoreStore(ScoreStore):
    """Records as rows of ``score_record``; needs an application context."""

    def __init__(self):
        super().__init__()
        self._ready = False

    def describe(self):
        return f"sql table score_record at {db.engine.url!r}"

    def _ensure_locked(self):
        if self._ready:
            return
        from reflexboard.models import ScoreEntry
        try:
            ScoreEntry.__table__.create(bind=db.engine, checkfirst=True)
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"cannot create score_record: {exc}") from exc
        self._ready = True

    def read_all(self):
        from reflexboard.models import ScoreEntry
        try:
            if not self._ready:
                self.ensure()
            rows = ScoreEntry.query.order_by(ScoreEntry.id).all()
        except (SQLAlchemyError, StoreWriteError) as exc:
            db.session.rollback()
            current_app.logger.warning(f"[store-read-failed] score_record: {exc}")
            return []
        return [row.to_dict() for row in rows]

    def _append_locked(self, record):
        from reflexboard.models import ScoreEntry
        try:
            db.session.add(ScoreEntry.from_dict(record))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StoreWriteError(f"cannot insert into score_record: {exc}") from exc


def create_store(app) -> ScoreStore:
    backend = app.config.get('SCORE_STORE_BACKEND', 'json')
    if backend == 'json':
        return JsonFileScoreStore(app.config['SCORE_STORE_PATH'])
    if backend == 'sql':
        return SqlScoreStore()
    raise ValueError(f"Unknown SCORE_STORE_BACKEND: {backend!r}")


def get_store() -> ScoreStore:
    return current_app.extensions['score_store']

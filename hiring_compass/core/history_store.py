from __future__ import annotations

import json
import os
import secrets
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Protocol

from hiring_compass.core.config import settings
from hiring_compass.schemas.history import HistoryItem, HistoryStatistics

RESUME_PREVIEW_CHARS = 100


class HistoryRepository(Protocol):
    def save(
        self,
        *,
        job_role: str,
        company: str,
        resume_text: str,
        analysis_result: dict[str, Any] | None = None,
    ) -> HistoryItem: ...

    def list(self) -> list[HistoryItem]: ...

    def get(self, item_id: str) -> HistoryItem | None: ...

    def delete(self, item_id: str) -> bool: ...

    def clear(self) -> None: ...

    def search(self, query: str) -> list[HistoryItem]: ...

    def statistics(self) -> HistoryStatistics: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def _score_from_result(analysis_result: dict[str, Any]) -> int | None:
    value = analysis_result.get("overallScore")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return max(0, min(100, int(round(value))))


def build_history_item(
    *,
    job_role: str,
    company: str,
    resume_text: str,
    analysis_result: dict[str, Any] | None,
) -> HistoryItem:
    timestamp = _now_ms()
    payload = dict(analysis_result or {})
    return HistoryItem(
        id=f"{timestamp}-{secrets.token_hex(5)}",
        timestamp=timestamp,
        job_role=job_role,
        company=company,
        overall_score=_score_from_result(payload),
        resume_preview=(resume_text or "")[:RESUME_PREVIEW_CHARS],
        full_data=payload,
    )


class _HistoryQueries(ABC):
    """Search and statistics shared by every backend, computed from ``list()``."""

    @abstractmethod
    def list(self) -> list[HistoryItem]: ...

    def search(self, query: str) -> list[HistoryItem]:
        needle = (query or "").strip().lower()
        items = self.list()
        if not needle:
            return items
        return [item for item in items if needle in item.job_role.lower() or needle in item.company.lower()]

    def statistics(self) -> HistoryStatistics:
        items = self.list()
        scores = [item.overall_score for item in items if item.overall_score is not None]
        return HistoryStatistics(
            total_items=len(items),
            oldest_analysis=items[-1].timestamp if items else None,
            newest_analysis=items[0].timestamp if items else None,
            average_score=round(sum(scores) / len(scores)) if scores else 0,
            companies_analyzed=len({item.company for item in items}),
            roles_analyzed=len({item.job_role for item in items}),
        )


class InMemoryHistoryRepository(_HistoryQueries):
    def __init__(self, max_items: int = 50):
        self._max_items = max(1, max_items)
        self._items: list[HistoryItem] = []
        self._lock = threading.Lock()

    def save(
        self,
        *,
        job_role: str,
        company: str,
        resume_text: str,
        analysis_result: dict[str, Any] | None = None,
    ) -> HistoryItem:
        item = build_history_item(
            job_role=job_role,
            company=company,
            resume_text=resume_text,
            analysis_result=analysis_result,
        )
        with self._lock:
            self._items = [item, *self._items][: self._max_items]
        return item

    def list(self) -> list[HistoryItem]:
        with self._lock:
            return [item.model_copy(deep=True) for item in self._items]

    def get(self, item_id: str) -> HistoryItem | None:
        with self._lock:
            for item in self._items:
                if item.id == item_id:
                    return item.model_copy(deep=True)
        return None

    def delete(self, item_id: str) -> bool:
        with self._lock:
            remaining = [item for item in self._items if item.id != item_id]
            deleted = len(remaining) != len(self._items)
            self._items = remaining
        return deleted

    def clear(self) -> None:
        with self._lock:
            self._items = []


class SqliteHistoryRepository(_HistoryQueries):
    def __init__(self, db_path: str, max_items: int = 50):
        self._db_path = db_path
        self._max_items = max(1, max_items)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is not None:
                return self._conn

            directory = os.path.dirname(self._db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            conn = sqlite3.connect(
                self._db_path,
                check_same_thread=False,
                timeout=5,
                isolation_level=None,
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS history_items (
                    id TEXT PRIMARY KEY,
                    created_at INTEGER NOT NULL,
                    job_role TEXT NOT NULL,
                    company TEXT NOT NULL,
                    overall_score INTEGER,
                    resume_preview TEXT NOT NULL,
                    full_data_json TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_history_items_created
                ON history_items (created_at);
                """
            )
            self._conn = conn
            return conn

    @staticmethod
    def _row_to_item(row: tuple[Any, ...]) -> HistoryItem:
        return HistoryItem(
            id=row[0],
            timestamp=row[1],
            job_role=row[2],
            company=row[3],
            overall_score=row[4],
            resume_preview=row[5],
            full_data=json.loads(row[6]) if row[6] else {},
        )

    def save(
        self,
        *,
        job_role: str,
        company: str,
        resume_text: str,
        analysis_result: dict[str, Any] | None = None,
    ) -> HistoryItem:
        item = build_history_item(
            job_role=job_role,
            company=company,
            resume_text=resume_text,
            analysis_result=analysis_result,
        )
        conn = self._get_connection()
        with self._lock:
            conn.execute(
                """
                INSERT INTO history_items (
                    id, created_at, job_role, company, overall_score, resume_preview, full_data_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.id,
                    item.timestamp,
                    item.job_role,
                    item.company,
                    item.overall_score,
                    item.resume_preview,
                    json.dumps(item.full_data, ensure_ascii=False),
                ),
            )
            conn.execute(
                """
                DELETE FROM history_items
                WHERE id NOT IN (
                    SELECT id FROM history_items ORDER BY created_at DESC, rowid DESC LIMIT ?
                )
                """,
                (self._max_items,),
            )
        return item

    def list(self) -> list[HistoryItem]:
        conn = self._get_connection()
        with self._lock:
            rows = conn.execute(
                """
                SELECT id, created_at, job_role, company, overall_score, resume_preview, full_data_json
                FROM history_items
                ORDER BY created_at DESC, rowid DESC
                """
            ).fetchall()
        return [self._row_to_item(row) for row in rows]

    def get(self, item_id: str) -> HistoryItem | None:
        conn = self._get_connection()
        with self._lock:
            row = conn.execute(
                """
                SELECT id, created_at, job_role, company, overall_score, resume_preview, full_data_json
                FROM history_items
                WHERE id = ?
                """,
                (item_id,),
            ).fetchone()
        return self._row_to_item(row) if row else None

    def delete(self, item_id: str) -> bool:
        conn = self._get_connection()
        with self._lock:
            cursor = conn.execute("DELETE FROM history_items WHERE id = ?", (item_id,))
        return cursor.rowcount > 0

    def clear(self) -> None:
        conn = self._get_connection()
        with self._lock:
            conn.execute("DELETE FROM history_items")

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


@lru_cache(maxsize=1)
def get_history_repository() -> HistoryRepository:
    if settings.history_backend == "sqlite":
        return SqliteHistoryRepository(settings.history_db_path, max_items=settings.history_max_items)
    return InMemoryHistoryRepository(max_items=settings.history_max_items)

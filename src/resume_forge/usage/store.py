"""SQLite-backed ledger, allow-list and subscription storage."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

from resume_forge.usage.models import LedgerStats, Subscription, UsageRecord, utcnow

DEFAULT_DB_PATH = Path.home() / ".resume-forge" / "usage.db"


class LedgerStore:
    """SQLite store with WAL mode. Calls are blocking; async callers use ``asyncio.to_thread``."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS usage_records (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    input_type TEXT NOT NULL,
                    text_character_count INTEGER NOT NULL DEFAULT 0,
                    pdf_size_bytes INTEGER,
                    template_id TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_usage_records_email ON usage_records (email)"
            )
            conn.execute("""
                CREATE TABLE IF NOT EXISTS email_list (
                    email TEXT NOT NULL,
                    submission_type TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (email, submission_type)
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    email TEXT PRIMARY KEY,
                    plan_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    # -- ledger --

    def append(self, record: UsageRecord) -> None:
        """Append one usage record."""
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO usage_records
                   (id, email, created_at, input_type, text_character_count,
                    pdf_size_bytes, template_id)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.id,
                    record.email,
                    record.created_at.isoformat(),
                    record.input_type,
                    record.text_character_count,
                    record.pdf_size_bytes,
                    record.template_id,
                ),
            )

    def count_records(self, email: str) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM usage_records WHERE email = ?", (email,)
            ).fetchone()
        return row[0]

    def list_records(self, email: str | None = None, limit: int = 50) -> list[UsageRecord]:
        """Most recent records first, optionally for one email."""
        with self._connect() as conn:
            if email is not None:
                rows = conn.execute(
                    "SELECT * FROM usage_records WHERE email = ? ORDER BY created_at DESC LIMIT ?",
                    (email, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM usage_records ORDER BY created_at DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_stats(self, now: datetime | None = None) -> LedgerStats:
        """Aggregate counters across the whole ledger."""
        now = now or utcnow()
        week_ago = (now - timedelta(days=7)).isoformat()
        month_ago = (now - timedelta(days=30)).isoformat()
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*),
                       SUM(CASE WHEN input_type = 'text' THEN 1 ELSE 0 END),
                       SUM(CASE WHEN input_type = 'pdf' THEN 1 ELSE 0 END),
                       SUM(text_character_count),
                       SUM(COALESCE(pdf_size_bytes, 0)),
                       SUM(CASE WHEN created_at >= ? THEN 1 ELSE 0 END),
                       SUM(CASE WHEN created_at >= ? THEN 1 ELSE 0 END),
                       MIN(created_at),
                       MAX(created_at)
                   FROM usage_records""",
                (week_ago, month_ago),
            ).fetchone()
        return LedgerStats(
            total_generations=row[0] or 0,
            text_count=row[1] or 0,
            pdf_count=row[2] or 0,
            total_text_characters=row[3] or 0,
            total_pdf_bytes=row[4] or 0,
            last_7_days=row[5] or 0,
            last_30_days=row[6] or 0,
            first_generation_at=datetime.fromisoformat(row[7]) if row[7] else None,
            last_generation_at=datetime.fromisoformat(row[8]) if row[8] else None,
        )

    # -- allow-list --

    def add_to_list(self, email: str, submission_type: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO email_list (email, submission_type, created_at) VALUES (?, ?, ?)",
                (email, submission_type, utcnow().isoformat()),
            )

    def is_on_list(self, email: str, submission_type: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM email_list WHERE email = ? AND submission_type = ?",
                (email, submission_type),
            ).fetchone()
        return row is not None

    # -- subscriptions --

    def find_subscription(self, email: str) -> Subscription | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT email, plan_id, status, updated_at FROM subscriptions WHERE email = ?",
                (email,),
            ).fetchone()
        if row is None:
            return None
        return Subscription(
            email=row[0], plan_id=row[1], status=row[2], updated_at=datetime.fromisoformat(row[3])
        )

    def upsert_subscription(self, subscription: Subscription) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT INTO subscriptions (email, plan_id, status, updated_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(email) DO UPDATE SET
                       plan_id = excluded.plan_id,
                       status = excluded.status,
                       updated_at = excluded.updated_at""",
                (
                    subscription.email,
                    subscription.plan_id,
                    subscription.status,
                    subscription.updated_at.isoformat(),
                ),
            )

    @staticmethod
    def _row_to_record(row: tuple) -> UsageRecord:
        return UsageRecord(
            id=row[0],
            email=row[1],
            created_at=datetime.fromisoformat(row[2]),
            input_type=row[3],
            text_character_count=row[4],
            pdf_size_bytes=row[5],
            template_id=row[6],
        )

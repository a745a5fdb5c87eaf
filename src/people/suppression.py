"""Suppression state: snoozed cards and micro-question markers.

One row per (person id, item id, kind) holding a timestamp. For snoozed
cards the timestamp is the snooze expiry; for question markers it is when
the question was answered, dismissed or shown. Writes are last-write-wins.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog

from db import wal_connect
from shared_types import SuppressionKind

logger = structlog.get_logger()

QUESTION_KINDS = (
    SuppressionKind.QUESTION_ANSWERED,
    SuppressionKind.QUESTION_SNOOZED,
    SuppressionKind.QUESTION_SEEN,
)


@dataclass
class SuppressionState:
    """In-memory snapshot read by the feed filter."""

    marks: dict[tuple[str, str, SuppressionKind], datetime] = field(default_factory=dict)

    def get(self, person_id: str, item_id: str, kind: SuppressionKind) -> Optional[datetime]:
        return self.marks.get((person_id, item_id, kind))

    def set(self, person_id: str, item_id: str, kind: SuppressionKind, at: datetime) -> None:
        self.marks[(person_id, item_id, kind)] = at

    def snoozed_until(self, person_id: str, card_id: str) -> Optional[datetime]:
        return self.get(person_id, card_id, SuppressionKind.CARD_SNOOZED)

    def person_seen_at(self, person_id: str) -> Optional[datetime]:
        return self.get(person_id, "", SuppressionKind.PERSON_SEEN)

    def question_marks(self, person_id: str, question_id: str) -> list[datetime]:
        found = [self.get(person_id, question_id, kind) for kind in QUESTION_KINDS]
        return [at for at in found if at is not None]


class SuppressionStore:
    """SQLite persistence for suppression markers."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with wal_connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS suppression (
                    person_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    at TIMESTAMP NOT NULL,
                    PRIMARY KEY (person_id, item_id, kind)
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_suppression_person ON suppression(person_id)")

    def set(self, person_id: str, item_id: str, kind: SuppressionKind, at: Optional[datetime] = None) -> None:
        at = at or datetime.now()
        with wal_connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO suppression (person_id, item_id, kind, at) VALUES (?, ?, ?, ?)",
                (person_id, item_id, str(kind), at.isoformat()),
            )

    def get(self, person_id: str, item_id: str, kind: SuppressionKind) -> Optional[datetime]:
        with wal_connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT at FROM suppression WHERE person_id = ? AND item_id = ? AND kind = ?",
                (person_id, item_id, str(kind)),
            ).fetchone()
        return self._parse_at(row[0]) if row else None

    def snooze_card(self, person_id: str, card_id: str, until: datetime) -> None:
        self.set(person_id, card_id, SuppressionKind.CARD_SNOOZED, until)

    def mark_question(
        self,
        person_id: str,
        question_id: str,
        kind: SuppressionKind,
        at: Optional[datetime] = None,
    ) -> None:
        """Record a question marker and touch the person-level seen marker."""
        if kind not in QUESTION_KINDS:
            raise ValueError(f"Not a question marker: {kind}")
        at = at or datetime.now()
        self.set(person_id, question_id, kind, at)
        self.mark_person_seen(person_id, at)

    def mark_person_seen(self, person_id: str, at: Optional[datetime] = None) -> None:
        self.set(person_id, "", SuppressionKind.PERSON_SEEN, at)

    def clear_person(self, person_id: str) -> int:
        with wal_connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM suppression WHERE person_id = ?", (person_id,))
            return cursor.rowcount

    def snapshot(self) -> SuppressionState:
        state = SuppressionState()
        with wal_connect(self.db_path) as conn:
            rows = conn.execute("SELECT person_id, item_id, kind, at FROM suppression").fetchall()
        for person_id, item_id, kind, at in rows:
            parsed = self._parse_at(at)
            try:
                kind = SuppressionKind(kind)
            except ValueError:
                logger.debug("suppression_unknown_kind", kind=kind)
                continue
            if parsed is not None:
                state.set(person_id, item_id, kind, parsed)
        return state

    @staticmethod
    def _parse_at(value: str) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(value)
        except (TypeError, ValueError):
            return None

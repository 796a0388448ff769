"""
History store for finished calculations: Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from sqlalchemy import Column, Float, String, create_engine, delete, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

DEFAULT_HISTORY_LIMIT = 50


class HistoryStore(Protocol):
    """Interface for calculation history persistence."""

    def append(
        self, expression: str, result: str, *, created_at: Optional[float] = None
    ) -> "HistoryEntry":
        ...

    def list(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list["HistoryEntry"]:
        ...

    def get(self, entry_id: str) -> Optional["HistoryEntry"]:
        ...

    def remove(self, entry_id: str) -> bool:
        ...

    def clear(self) -> int:
        ...


@dataclass
class HistoryEntry:
    id: str
    expression: str
    result: str
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "expression": self.expression,
            "result": self.result,
            "created_at": self.created_at,
        }


class InMemoryHistoryStore:
    """Simple in-memory history for development and tests."""

    def __init__(self):
        self.entries: Dict[str, HistoryEntry] = {}

    def append(
        self, expression: str, result: str, *, created_at: Optional[float] = None
    ) -> HistoryEntry:
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            expression=expression,
            result=result,
            created_at=created_at if created_at is not None else time.time(),
        )
        self.entries[entry.id] = entry
        return entry

    def list(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        # Dicts keep insertion order, so reversing first keeps ties newest-first.
        newest_first = sorted(
            reversed(self.entries.values()),
            key=lambda entry: entry.created_at,
            reverse=True,
        )
        return newest_first[:limit]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        return self.entries.get(entry_id)

    def remove(self, entry_id: str) -> bool:
        return self.entries.pop(entry_id, None) is not None

    def clear(self) -> int:
        removed = len(self.entries)
        self.entries.clear()
        return removed

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.entries.clear()


class PostgresHistoryStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresHistoryStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_entry(self, row: "HistoryRow") -> HistoryEntry:
        return HistoryEntry(
            id=row.id,
            expression=row.expression,
            result=row.result,
            created_at=row.created_at,
        )

    def append(
        self, expression: str, result: str, *, created_at: Optional[float] = None
    ) -> HistoryEntry:
        with self.Session() as session:
            row = HistoryRow(
                id=uuid.uuid4().hex,
                expression=expression,
                result=result,
                created_at=created_at if created_at is not None else time.time(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_entry(row)

    def list(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[HistoryEntry]:
        with self.Session() as session:
            stmt = (
                select(HistoryRow)
                .order_by(HistoryRow.created_at.desc())
                .limit(limit)
            )
            return [self._to_entry(row) for row in session.execute(stmt).scalars()]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        with self.Session() as session:
            row = session.get(HistoryRow, entry_id)
            if not row:
                return None
            return self._to_entry(row)

    def remove(self, entry_id: str) -> bool:
        with self.Session() as session:
            row = session.get(HistoryRow, entry_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def clear(self) -> int:
        with self.Session() as session:
            removed = session.execute(delete(HistoryRow)).rowcount
            session.commit()
            return removed or 0


Base = declarative_base()


class HistoryRow(Base):
    __tablename__ = "calculation_history"

    id = Column(String, primary_key=True)
    expression = Column(String, nullable=False)
    result = Column(String, nullable=False)
    created_at = Column(Float, nullable=False, index=True)

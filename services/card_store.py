"""Card record storage.

The upstream pipeline writes cards; the export path reads them and writes
back repaired copies. Stores hand out copies so that a caller mutating a
record never changes stored state behind the store's back.
"""
import copy
import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional

from models.card import CardRecord

logger = logging.getLogger(__name__)


class CardRecordStore(ABC):
    """Key-value interface over card records."""

    @abstractmethod
    def get(self, card_id: str) -> Optional[CardRecord]:
        ...

    @abstractmethod
    def set(self, card: CardRecord) -> None:
        ...

    @abstractmethod
    def compare_and_swap(self, card_id: str, expected: CardRecord, new: CardRecord) -> bool:
        """Replace the stored record only if it still equals `expected`."""
        ...


class InMemoryCardStore(CardRecordStore):
    """Process-wide dict store guarded by a lock."""

    def __init__(self):
        self._cards: Dict[str, CardRecord] = {}
        self._lock = threading.Lock()

    def get(self, card_id: str) -> Optional[CardRecord]:
        with self._lock:
            card = self._cards.get(card_id)
            return copy.deepcopy(card) if card is not None else None

    def set(self, card: CardRecord) -> None:
        with self._lock:
            self._cards[card.id] = copy.deepcopy(card)

    def compare_and_swap(self, card_id: str, expected: CardRecord, new: CardRecord) -> bool:
        with self._lock:
            if self._cards.get(card_id) != expected:
                return False
            self._cards[card_id] = copy.deepcopy(new)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._cards)


class SqliteCardStore(CardRecordStore):
    """Durable store keeping one JSON document per card."""

    def __init__(self, db_path: str = "cards.db"):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        if str(self.db_path.parent) != ".":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cards (
                    id TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    @contextmanager
    def _get_connection(self):
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _dump(card: CardRecord) -> str:
        return json.dumps(card.to_dict(), sort_keys=True, ensure_ascii=False)

    def get(self, card_id: str) -> Optional[CardRecord]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT payload FROM cards WHERE id = ?", (card_id,)).fetchone()
        if row is None:
            return None
        return CardRecord.from_dict(json.loads(row["payload"]))

    def set(self, card: CardRecord) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO cards (id, payload, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(id) DO UPDATE SET payload = excluded.payload,
                                              updated_at = CURRENT_TIMESTAMP
                """,
                (card.id, self._dump(card)),
            )
            conn.commit()

    def compare_and_swap(self, card_id: str, expected: CardRecord, new: CardRecord) -> bool:
        with self._get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT payload FROM cards WHERE id = ?", (card_id,)).fetchone()
            if row is None or CardRecord.from_dict(json.loads(row["payload"])) != expected:
                conn.rollback()
                logger.debug(f"compare_and_swap lost for card {card_id}")
                return False
            conn.execute(
                "UPDATE cards SET payload = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (self._dump(new), card_id),
            )
            conn.commit()
            return True

    def count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM cards").fetchone()[0]

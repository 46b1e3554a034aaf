from __future__ import annotations

import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

from scoreboard.config import validate_table_name
from scoreboard.errors import StoreError


@dataclass(frozen=True)
class ScoreRecord:
    id: int
    name: str
    time: int
    date: str


class ScoreStore:
    def __init__(self, db_path: str | Path, table_name: str = "scores") -> None:
        self.db_path = Path(db_path)
        self.table_name = validate_table_name(table_name)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        table = self.table_name
        try:
            with closing(self._connect()) as conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name VARCHAR(30) NOT NULL,
                        time INTEGER NOT NULL,
                        date TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
                    )
                    """
                )
                conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{table}_time ON {table}(time ASC)")
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"schema bootstrap failed for {self.db_path}: {exc}") from exc

    def insert(self, name: str, time: int) -> int:
        try:
            with closing(self._connect()) as conn:
                cursor = conn.execute(
                    f"INSERT INTO {self.table_name} (name, time) VALUES (?, ?)",
                    (name, time),
                )
                conn.commit()
                return int(cursor.lastrowid)
        except sqlite3.Error as exc:
            raise StoreError(f"insert failed: {exc}") from exc

    def top_scores(self, limit: int) -> list[ScoreRecord]:
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(
                    f"""
                    SELECT id, name, time, date
                    FROM {self.table_name}
                    ORDER BY time ASC, id ASC
                    LIMIT ?
                    """,
                    (limit,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"top scores query failed: {exc}") from exc
        return [
            ScoreRecord(id=row["id"], name=row["name"], time=row["time"], date=row["date"])
            for row in rows
        ]

    def delete_by_id(self, score_id: int) -> bool:
        try:
            with closing(self._connect()) as conn:
                cursor = conn.execute(f"DELETE FROM {self.table_name} WHERE id = ?", (score_id,))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as exc:
            raise StoreError(f"delete failed: {exc}") from exc

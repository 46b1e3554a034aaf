from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv(override=False)


DEFAULT_DATABASE_URL = "sqlite:///leaderboard.db"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)
TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def parse_database_url(url: str) -> Path:
    """Resolve a sqlite connection string (or bare path) to a database file path."""

    if url.startswith("sqlite:///"):
        return Path(url[len("sqlite:///") :])
    if "://" in url:
        raise RuntimeError(f"Unsupported DATABASE_URL scheme: {url.split('://', 1)[0]}")
    return Path(url)


def validate_table_name(name: str) -> str:
    if not TABLE_NAME_PATTERN.match(name):
        raise RuntimeError(f"Invalid table name: {name!r}")
    return name


@dataclass(frozen=True)
class Settings:
    db_path: Path = Path("leaderboard.db")
    table_name: str = "scores"
    admin_key: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: tuple = DEFAULT_CORS_ORIGINS
    max_body_bytes: int = 16 * 1024
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        validate_table_name(self.table_name)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = _split_csv(os.getenv("CORS_ORIGINS")) or list(DEFAULT_CORS_ORIGINS)
        return cls(
            db_path=parse_database_url(os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL),
            table_name=os.getenv("SCORES_TABLE") or "scores",
            admin_key=os.getenv("ADMIN_KEY", ""),
            host=os.getenv("HOST") or "0.0.0.0",
            port=_env_int("PORT", 3000),
            cors_origins=tuple(origins),
            max_body_bytes=_env_int("MAX_BODY_BYTES", 16 * 1024),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )

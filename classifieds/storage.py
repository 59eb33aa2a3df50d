"""
Seen-listing storage backed by SQLite.

Supports:
- One partition per source (ksl, facebookMarketplace, craigslist)
- Append-only records: a URL once stored is never removed or changed
- Every append commits on its own, so partial progress survives an abort
"""

import logging
import os
import sqlite3
from datetime import datetime
from typing import Dict, List, Set

from .errors import PersistenceError
from .models import ALL_SOURCES, Listing

logger = logging.getLogger(__name__)


class ListingStorage:
    """已記錄刊登的儲存服務"""

    # Valid source identifiers
    VALID_SOURCES = set(ALL_SOURCES)

    def __init__(self, db_path: str = "data/listings.db"):
        self.db_path = db_path
        self._ensure_db_exists()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=30.0)

    def _ensure_db_exists(self) -> None:
        """確保資料庫檔案和資料表存在"""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open database {self.db_path}: {e}") from e

        try:
            conn.execute("PRAGMA journal_mode=WAL")
            cursor = conn.cursor()

            # 不對 url 加唯一限制：重複寫入允許產生重複紀錄
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS listings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source TEXT NOT NULL,
                    title TEXT,
                    price TEXT,
                    url TEXT NOT NULL,
                    first_seen TEXT
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_listings_source_url
                ON listings(source, url)
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot initialize database {self.db_path}: {e}") from e
        finally:
            conn.close()

    def _validate_source(self, source: str) -> None:
        """驗證來源名稱"""
        if source not in self.VALID_SOURCES:
            raise ValueError(
                f"Invalid source: {source}. Must be one of {sorted(self.VALID_SOURCES)}"
            )

    def get_seen_urls(self, source: str) -> Set[str]:
        """
        取得來源的全部已記錄 url

        Args:
            source: 來源名稱

        Returns:
            url 集合，可能為空

        Raises:
            PersistenceError: 資料庫無法讀取時
        """
        self._validate_source(source)

        try:
            conn = self._connect()
            try:
                cursor = conn.execute(
                    "SELECT DISTINCT url FROM listings WHERE source = ?",
                    (source,)
                )
                urls = {row[0] for row in cursor.fetchall()}
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to read seen urls for {source}: {e}", source=source
            ) from e

        logger.debug("Loaded %d seen urls for %s", len(urls), source)
        return urls

    def record_seen(self, source: str, listing: Listing) -> None:
        """
        寫入一筆刊登

        每次呼叫獨立 commit。不保證冪等，重複呼叫會產生重複紀錄。

        Raises:
            PersistenceError: 寫入失敗時
        """
        self._validate_source(source)

        now = datetime.now().isoformat()
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """INSERT INTO listings (source, title, price, url, first_seen)
                       VALUES (?, ?, ?, ?, ?)""",
                    (source, listing.title, listing.price, listing.url, now)
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to record {listing.url} for {source}: {e}", source=source
            ) from e

    def get_listings(self, source: str) -> List[Dict]:
        """取得來源的全部紀錄（依寫入順序）"""
        self._validate_source(source)

        try:
            conn = self._connect()
            try:
                cursor = conn.execute(
                    """SELECT title, price, url, first_seen FROM listings
                       WHERE source = ? ORDER BY id ASC""",
                    (source,)
                )
                columns = [desc[0] for desc in cursor.description]
                rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to read listings for {source}: {e}", source=source
            ) from e
        return rows

    def get_listing_count(self, source: str) -> int:
        """取得指定來源的紀錄數量"""
        self._validate_source(source)

        try:
            conn = self._connect()
            try:
                cursor = conn.execute(
                    "SELECT COUNT(*) FROM listings WHERE source = ?",
                    (source,)
                )
                count = cursor.fetchone()[0]
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to count listings for {source}: {e}", source=source
            ) from e
        return count

"""Data Access Layer for the rate backup store.

Responsibilities
----------------
- Create the schema lazily the first time the store is touched.
- Upsert the latest rate mapping per base currency (replace, never append).
- Load the stored snapshot back, treating corrupted payloads as failures.
- Expose async, outcome-returning wrappers so the rate service can branch on
  ok / absent / failed without catching storage exceptions itself.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
import json
import logging
import sqlite3
import threading
from typing import Dict, Iterator, Optional

from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from app.models import RateSnapshot
from .schema import BASIC_UTC_NOW, init_db

logger = logging.getLogger("app.store")


class StoreError(Exception):
    """Raised by Database on I/O or (de)serialization faults."""


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        self._ensure_schema()
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success, rolls back on error and always closes."""
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._schema_lock:
            if not self._schema_ready:
                init_db(self.db_path)
                self._schema_ready = True

    # ------------------------------------------------------------------
    # Exchange rates
    def save_rates(self, base_currency: str, rates: Dict[str, float]) -> None:
        try:
            payload = json.dumps(rates, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StoreError(f"cannot serialize rates for {base_currency}: {e}") from e
        try:
            with self._session() as conn:
                conn.execute(
                    f"""
                    INSERT INTO exchange_rates (base_currency, rates, last_updated)
                    VALUES (?, ?, ({BASIC_UTC_NOW}))
                    ON CONFLICT(base_currency) DO UPDATE SET
                        rates = excluded.rates,
                        last_updated = excluded.last_updated
                    """,
                    (base_currency, payload),
                )
        except sqlite3.Error as e:
            raise StoreError(f"cannot save rates for {base_currency}: {e}") from e

    def load_rates(self, base_currency: str) -> Optional[RateSnapshot]:
        try:
            with self._session() as conn:
                cur = conn.cursor()
                cur.execute(
                    "SELECT base_currency, rates, last_updated FROM exchange_rates WHERE base_currency = ?",
                    (base_currency,),
                )
                row = cur.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"cannot load rates for {base_currency}: {e}") from e
        if row is None:
            return None
        try:
            rates = json.loads(row["rates"])
            return RateSnapshot(
                base_currency=row["base_currency"],
                rates=rates,
                last_updated=row["last_updated"],
            )
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError subclasses ValueError
            raise StoreError(f"corrupted rates row for {base_currency}: {e}") from e


class StoreStatus(str, Enum):
    OK = "ok"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass(frozen=True)
class StoreResult:
    status: StoreStatus
    snapshot: Optional[RateSnapshot] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK


class RateStore:
    """Async facade over Database returning StoreResult instead of raising."""

    def __init__(self, db: Database):
        self._db = db

    @classmethod
    def from_path(cls, db_path: Path) -> "RateStore":
        return cls(Database(db_path))

    async def put(self, base_currency: str, rates: Dict[str, float]) -> StoreResult:
        try:
            await run_in_threadpool(self._db.save_rates, base_currency, rates)
        except StoreError as e:
            logger.error("error saving rates to store", extra={"error": str(e)})
            return StoreResult(StoreStatus.FAILED, error=str(e))
        logger.info(
            "exchange rates saved to store",
            extra={"base_currency": base_currency, "count": len(rates)},
        )
        return StoreResult(StoreStatus.OK)

    async def get(self, base_currency: str) -> StoreResult:
        try:
            snapshot = await run_in_threadpool(self._db.load_rates, base_currency)
        except StoreError as e:
            logger.error("error loading rates from store", extra={"error": str(e)})
            return StoreResult(StoreStatus.FAILED, error=str(e))
        if snapshot is None:
            return StoreResult(StoreStatus.ABSENT)
        return StoreResult(StoreStatus.OK, snapshot=snapshot)

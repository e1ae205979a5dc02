import asyncio
import sqlite3

from app.db.dal import Database, RateStore, StoreStatus


def _rows(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(
            "SELECT base_currency, rates, last_updated FROM exchange_rates"
        ).fetchall()
    finally:
        conn.close()


def test_get_on_empty_store_is_absent_and_creates_schema(store, db_path):
    result = asyncio.run(store.get("USD"))
    assert result.status is StoreStatus.ABSENT
    assert result.snapshot is None
    assert db_path.exists()
    assert _rows(db_path) == []


def test_put_then_get_roundtrip(store):
    put = asyncio.run(store.put("USD", {"EUR": 0.9, "JPY": 150.0}))
    assert put.ok

    got = asyncio.run(store.get("USD"))
    assert got.status is StoreStatus.OK
    assert got.snapshot.base_currency == "USD"
    assert got.snapshot.rates == {"EUR": 0.9, "JPY": 150.0}
    assert got.snapshot.last_updated.endswith("Z")


def test_put_replaces_existing_row(store, db_path):
    asyncio.run(store.put("USD", {"EUR": 0.9}))
    asyncio.run(store.put("USD", {"EUR": 0.95, "GBP": 0.8}))

    rows = _rows(db_path)
    assert len(rows) == 1
    assert asyncio.run(store.get("USD")).snapshot.rates == {"EUR": 0.95, "GBP": 0.8}


def test_rows_are_keyed_by_base_currency(store):
    asyncio.run(store.put("USD", {"EUR": 0.9}))
    asyncio.run(store.put("EUR", {"USD": 1.1}))
    assert asyncio.run(store.get("USD")).snapshot.rates == {"EUR": 0.9}
    assert asyncio.run(store.get("EUR")).snapshot.rates == {"USD": 1.1}
    assert asyncio.run(store.get("GBP")).status is StoreStatus.ABSENT


def _insert_raw(db_path, payload):
    Database(db_path).load_rates("USD")  # creates schema
    conn = sqlite3.connect(db_path)
    with conn:
        conn.execute(
            "INSERT INTO exchange_rates (base_currency, rates) VALUES (?, ?)",
            ("USD", payload),
        )
    conn.close()


def test_corrupted_payload_is_a_failure(store, db_path):
    _insert_raw(db_path, "{not json")
    result = asyncio.run(store.get("USD"))
    assert result.status is StoreStatus.FAILED
    assert "corrupted" in result.error


def test_invalid_rates_payload_is_a_failure(store, db_path):
    _insert_raw(db_path, '{"EUR": -3}')
    assert asyncio.run(store.get("USD")).status is StoreStatus.FAILED


def test_unserializable_rates_fail_put(store):
    result = asyncio.run(store.put("USD", {"EUR": float("nan")}))
    assert result.status is StoreStatus.FAILED


def test_unopenable_path_fails_instead_of_raising(tmp_path):
    store = RateStore.from_path(tmp_path)  # a directory, not a file
    assert asyncio.run(store.put("USD", {"EUR": 0.9})).status is StoreStatus.FAILED
    assert asyncio.run(store.get("USD")).status is StoreStatus.FAILED

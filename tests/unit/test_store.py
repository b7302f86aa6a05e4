"""Unit tests for the snapshot stores."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from smartcart.core.exceptions import PersistenceFailure
from smartcart.models import Bill, LineItem, Session, SessionStatus
from smartcart.store import JsonFileStore, MemoryStore, create_store


def _session(session_id: str = "s-1", **kwargs) -> Session:
    return Session(
        session_id=session_id,
        items=[LineItem(name="Milk", quantity=2, unit_price=50)],
        total=100,
        **kwargs,
    )


def _bill(bill_id: str = "A100", session_id: str = "s-1") -> Bill:
    return Bill(
        bill_id=bill_id,
        session_id=session_id,
        items=[LineItem(name="Milk", quantity=2, unit_price=50)],
        total=100,
        gateway_order_id="order_1",
        gateway_payment_id="pay_1",
    )


@pytest.fixture
async def file_store(tmp_path) -> JsonFileStore:
    store = JsonFileStore(tmp_path)
    await store.load()
    return store


@pytest.mark.asyncio
async def test_missing_files_load_empty(tmp_path):
    sessions, bills = await JsonFileStore(tmp_path / "fresh").load()
    assert sessions == {}
    assert bills == []


@pytest.mark.asyncio
async def test_put_session_writes_snapshot(file_store, tmp_path):
    await file_store.put_session(_session(device_address="10.0.0.7"))

    doc = json.loads((tmp_path / "sessions.json").read_text(encoding="utf-8"))
    assert doc["s-1"]["status"] == "pending"
    assert doc["s-1"]["deviceAddress"] == "10.0.0.7"
    assert doc["s-1"]["items"] == [{"name": "Milk", "quantity": 2, "unitPrice": 50.0}]
    assert doc["s-1"]["createdAt"].endswith("Z")


@pytest.mark.asyncio
async def test_round_trip_is_byte_for_byte(file_store, tmp_path):
    await file_store.put_session(_session("s-1"))
    await file_store.put_session(_session("s-2", status=SessionStatus.PAID, bill_id="A100"))
    await file_store.put_bill(_bill("A100", "s-2"))
    sessions_bytes = (tmp_path / "sessions.json").read_bytes()
    bills_bytes = (tmp_path / "bills.json").read_bytes()

    reloaded = JsonFileStore(tmp_path)
    sessions, bills = await reloaded.load()
    assert sessions == file_store._sessions
    assert bills == file_store._bills

    # Rewriting what was loaded reproduces the same files
    await reloaded._write_sessions(sessions)
    await reloaded._write_bills(bills)
    assert (tmp_path / "sessions.json").read_bytes() == sessions_bytes
    assert (tmp_path / "bills.json").read_bytes() == bills_bytes


@pytest.mark.asyncio
async def test_bills_keep_append_order(file_store, tmp_path):
    for bill_id in ("A100", "A101", "A102"):
        await file_store.put_bill(_bill(bill_id))

    _, bills = await JsonFileStore(tmp_path).load()
    assert [b.bill_id for b in bills] == ["A100", "A101", "A102"]


@pytest.mark.asyncio
async def test_session_snapshot_without_id_field_loads(tmp_path):
    (tmp_path / "sessions.json").write_text(
        json.dumps({"abc": {"items": [], "total": 5, "status": "pending", "createdAt": "2026-01-01T00:00:00Z"}}),
        encoding="utf-8",
    )
    sessions, _ = await JsonFileStore(tmp_path).load()
    assert sessions["abc"].session_id == "abc"


@pytest.mark.asyncio
async def test_corrupt_snapshot_fails_load(tmp_path):
    (tmp_path / "bills.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceFailure):
        await JsonFileStore(tmp_path).load()


@pytest.mark.asyncio
async def test_write_failure_raises_and_keeps_previous_state(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(blocker)

    with pytest.raises(PersistenceFailure):
        await store.put_session(_session())
    assert await store.get_session("s-1") is None


@pytest.mark.asyncio
async def test_commit_restores_bills_when_session_write_fails(file_store, tmp_path):
    await file_store.put_session(_session())
    await file_store.put_bill(_bill("A100", "other"))
    bills_before = (tmp_path / "bills.json").read_bytes()

    file_store._write_sessions = AsyncMock(side_effect=PersistenceFailure())
    paid = _session(status=SessionStatus.PAID, bill_id="A101")
    with pytest.raises(PersistenceFailure):
        await file_store.commit(_bill("A101"), paid)

    assert (tmp_path / "bills.json").read_bytes() == bills_before
    assert [b.bill_id for b in await file_store.list_bills()] == ["A100"]
    assert (await file_store.get_session("s-1")).status == SessionStatus.PENDING


@pytest.mark.asyncio
async def test_commit_publishes_bill_and_session_together(file_store, tmp_path):
    await file_store.put_session(_session())
    paid = _session(status=SessionStatus.PAID, bill_id="A100")

    await file_store.commit(_bill("A100"), paid)

    assert (await file_store.get_bill("A100")).session_id == "s-1"
    assert (await file_store.get_session("s-1")).bill_id == "A100"
    on_disk = json.loads((tmp_path / "sessions.json").read_text(encoding="utf-8"))
    assert on_disk["s-1"]["billId"] == "A100"


@pytest.mark.asyncio
async def test_reads_return_copies(store):
    await store.put_session(_session())
    copy = await store.get_session("s-1")
    copy.items.append(LineItem(name="Bread", quantity=1, unit_price=30))

    assert len((await store.get_session("s-1")).items) == 1


@pytest.mark.asyncio
async def test_listed_bills_are_copies(store):
    await store.put_bill(_bill("A100"))
    listed = await store.list_bills()
    listed[0].items.append(LineItem(name="Bread", quantity=1, unit_price=30))
    listed.clear()

    assert len((await store.get_bill("A100")).items) == 1
    assert [b.bill_id for b in await store.list_bills()] == ["A100"]


@pytest.mark.asyncio
async def test_loaded_collections_are_copies():
    store = MemoryStore(sessions={"s-1": _session()}, bills=[_bill()])
    sessions, bills = await store.load()
    sessions["s-1"].items.clear()
    bills[0].items.clear()

    assert len((await store.get_session("s-1")).items) == 1
    assert len((await store.get_bill("A100")).items) == 1


class SlowSessionsStore(JsonFileStore):
    """Sessions writes take long enough to cancel a commit halfway through."""

    async def _write_sessions(self, sessions):
        await asyncio.sleep(0.2)
        await super()._write_sessions(sessions)


@pytest.mark.asyncio
async def test_cancelled_commit_leaves_snapshots_consistent(tmp_path):
    store = SlowSessionsStore(tmp_path)
    await store.load()
    await store.put_session(_session())

    paid = _session(status=SessionStatus.PAID, bill_id="A100")
    task = asyncio.create_task(store.commit(_bill("A100"), paid))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    sessions, bills = await JsonFileStore(tmp_path).load()
    bill_ids = [b.bill_id for b in bills]
    if bill_ids:
        assert bill_ids == ["A100"]
        assert sessions["s-1"].bill_id == "A100"
    else:
        assert sessions["s-1"].status == SessionStatus.PENDING
    assert [b.bill_id for b in await store.list_bills()] == bill_ids

@pytest.mark.asyncio
async def test_unknown_ids_return_none(store):
    assert await store.get_session("nope") is None
    assert await store.get_bill("A999") is None


@pytest.mark.asyncio
async def test_memory_store_seeds():
    store = MemoryStore(sessions={"s-1": _session()}, bills=[_bill()])
    sessions, bills = await store.load()
    assert list(sessions) == ["s-1"]
    assert [b.bill_id for b in bills] == ["A100"]


def test_create_store_honours_backend(tmp_path):
    from smartcart.config import Settings

    memory = create_store(Settings(STORAGE_BACKEND="memory", RAZORPAY_KEY_SECRET="s"))
    assert isinstance(memory, MemoryStore)

    json_store = create_store(
        Settings(STORAGE_BACKEND="json", DATA_DIR=str(tmp_path), RAZORPAY_KEY_SECRET="s")
    )
    assert isinstance(json_store, JsonFileStore)
    assert json_store.bills_path == tmp_path / "bills.json"

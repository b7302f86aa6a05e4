"""Session and Bill Persistence

Two collections are kept: Sessions keyed by session id and Bills as an
append-ordered list. Every mutation rewrites the complete snapshot of the
affected collection before it is published to readers, so readers only ever
see state that is already durable.

``BaseStore.lock`` is the commit critical section: bill-id allocation and the
bill/session commit run under it. Snapshot writes are additionally serialized
by an internal write lock so that session creation never races a commit on
the shared sessions file.
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from smartcart.config import Settings
from smartcart.core.exceptions import PersistenceFailure
from smartcart.core.logging import get_logger
from smartcart.models import Bill, Session, StorageBackend

logger = get_logger(__name__)

Sessions = Dict[str, Session]
Bills = List[Bill]


class BaseStore(ABC):
    """Store contract shared by the file-backed store and the in-memory fake"""

    def __init__(self) -> None:
        self._sessions: Sessions = {}
        self._bills: Bills = []
        self.lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    # -- backend hooks -----------------------------------------------------

    @abstractmethod
    async def _read_sessions(self) -> Sessions:
        ...

    @abstractmethod
    async def _read_bills(self) -> Bills:
        ...

    @abstractmethod
    async def _write_sessions(self, sessions: Sessions) -> None:
        ...

    @abstractmethod
    async def _write_bills(self, bills: Bills) -> None:
        ...

    # -- contract ------------------------------------------------------------

    async def load(self) -> Tuple[Sessions, Bills]:
        """Load both collections; a missing collection starts empty."""
        sessions = await self._read_sessions()
        bills = await self._read_bills()
        self._sessions = sessions
        self._bills = bills
        logger.info(
            "Store loaded",
            extra={"sessions": len(sessions), "bills": len(bills)},
        )
        return (
            {sid: s.model_copy(deep=True) for sid, s in sessions.items()},
            [b.model_copy(deep=True) for b in bills],
        )

    async def put_session(self, session: Session) -> None:
        """Insert or replace a session and persist the sessions snapshot."""
        async with self._write_lock:
            sessions = dict(self._sessions)
            sessions[session.session_id] = session.model_copy(deep=True)
            await self._write_sessions(sessions)
            self._sessions = sessions

    async def put_bill(self, bill: Bill) -> None:
        """Append a bill and persist the bills snapshot."""
        async with self._write_lock:
            bills = self._bills + [bill.model_copy(deep=True)]
            await self._write_bills(bills)
            self._bills = bills

    async def commit(self, bill: Bill, session: Session) -> None:
        """
        Persist a new bill, then the session that produced it.

        Neither change becomes visible until both snapshots are written. If
        the session write fails, the previous bills snapshot is restored so
        no bill exists without its paid session. Cancelling the caller does
        not interrupt the writes: they run to completion before the
        cancellation is re-raised.

        Raises:
            PersistenceFailure: If either write fails
        """
        async with self._write_lock:
            writes = asyncio.ensure_future(self._write_commit(bill, session))
            try:
                await asyncio.shield(writes)
            except asyncio.CancelledError:
                # Keep the write lock until both snapshots agree
                await asyncio.wait({writes})
                if not writes.cancelled() and writes.exception() is not None:
                    logger.error(
                        "Commit failed after cancellation",
                        extra={"bill_id": bill.bill_id},
                    )
                raise

    async def _write_commit(self, bill: Bill, session: Session) -> None:
        previous_bills = self._bills
        bills = previous_bills + [bill.model_copy(deep=True)]
        await self._write_bills(bills)

        sessions = dict(self._sessions)
        sessions[session.session_id] = session.model_copy(deep=True)
        try:
            await self._write_sessions(sessions)
        except PersistenceFailure:
            try:
                await self._write_bills(previous_bills)
            except PersistenceFailure:
                logger.error(
                    "Could not restore bills snapshot",
                    extra={"bill_id": bill.bill_id},
                )
            raise

        self._bills = bills
        self._sessions = sessions

    async def get_session(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def get_bill(self, bill_id: str) -> Optional[Bill]:
        for bill in self._bills:
            if bill.bill_id == bill_id:
                return bill.model_copy(deep=True)
        return None

    async def list_bills(self) -> Bills:
        """All bills in creation order"""
        return [b.model_copy(deep=True) for b in self._bills]

    async def close(self) -> None:
        """Release backend resources (nothing to release by default)"""


class MemoryStore(BaseStore):
    """
    In-memory store implementing the same contract.
    Used by tests and by ``STORAGE_BACKEND=memory``; nothing survives a restart.
    """

    def __init__(
        self,
        sessions: Optional[Sessions] = None,
        bills: Optional[Bills] = None,
    ) -> None:
        super().__init__()
        self._seed_sessions = dict(sessions or {})
        self._seed_bills = list(bills or [])

    async def _read_sessions(self) -> Sessions:
        return dict(self._seed_sessions)

    async def _read_bills(self) -> Bills:
        return list(self._seed_bills)

    async def _write_sessions(self, sessions: Sessions) -> None:
        pass

    async def _write_bills(self, bills: Bills) -> None:
        pass


class JsonFileStore(BaseStore):
    """
    Snapshot files on local disk.

    ``sessions.json`` holds an object keyed by session id, ``bills.json`` a
    list in creation order. Each write goes to a temp file in the same
    directory which then atomically replaces the snapshot.
    """

    def __init__(self, data_dir: Path, sessions_file: str = "sessions.json", bills_file: str = "bills.json") -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.sessions_path = self.data_dir / sessions_file
        self.bills_path = self.data_dir / bills_file

    async def _read_sessions(self) -> Sessions:
        raw = await asyncio.to_thread(self._read_json, self.sessions_path)
        if raw is None:
            logger.info("No existing sessions, starting fresh")
            return {}
        try:
            sessions = {}
            for session_id, doc in raw.items():
                doc.setdefault("sessionId", session_id)
                sessions[session_id] = Session.model_validate(doc)
            return sessions
        except (AttributeError, ValidationError) as e:
            raise PersistenceFailure(f"Corrupt sessions snapshot {self.sessions_path}: {e}") from e

    async def _read_bills(self) -> Bills:
        raw = await asyncio.to_thread(self._read_json, self.bills_path)
        if raw is None:
            logger.info("No existing bills, starting fresh")
            return []
        try:
            return [Bill.model_validate(doc) for doc in raw]
        except (TypeError, ValidationError) as e:
            raise PersistenceFailure(f"Corrupt bills snapshot {self.bills_path}: {e}") from e

    async def _write_sessions(self, sessions: Sessions) -> None:
        documents = {sid: s.to_document() for sid, s in sessions.items()}
        await asyncio.to_thread(self._write_json, self.sessions_path, documents)

    async def _write_bills(self, bills: Bills) -> None:
        documents = [b.to_document() for b in bills]
        await asyncio.to_thread(self._write_json, self.bills_path, documents)

    @staticmethod
    def _read_json(path: Path):
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceFailure(f"Could not read {path}: {e}") from e

    @staticmethod
    def _write_json(path: Path, payload) -> None:
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding="utf-8", dir=str(path.parent), suffix=".tmp"
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(json.dumps(payload, indent=2))
                tmp.flush()
                os.fsync(tmp.fileno())
            tmp_path.replace(path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            logger.error("Snapshot write failed", extra={"path": str(path)}, exc_info=True)
            raise PersistenceFailure(f"Could not write {path.name}") from e


def create_store(settings: Settings) -> BaseStore:
    """Build the store selected by ``STORAGE_BACKEND``"""
    if settings.STORAGE_BACKEND == StorageBackend.MEMORY.value:
        return MemoryStore()
    return JsonFileStore(
        Path(settings.DATA_DIR),
        sessions_file=settings.SESSIONS_FILE,
        bills_file=settings.BILLS_FILE,
    )

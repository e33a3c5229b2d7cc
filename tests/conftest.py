# tests/conftest.py
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest
import pytest_asyncio

from asset_chaincode import new_chaincode
from asset_chaincode.context import KeyModification, TransactionContext
from asset_api.database import build_engine, build_sessionmaker, close_db, init_db
from asset_api.ledger.peer import Peer
from asset_api.services.gateway import Gateway, Identity

CHANNEL = "mychannel"
MSP_ID = "Org1MSP"
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MemoryHistoryIterator:
    """History cursor over a list, optionally failing on the n-th advance."""

    def __init__(self, entries: List[KeyModification], fail_at: Optional[int] = None):
        self._entries = list(entries)
        self._index = 0
        self._fail_at = fail_at
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> KeyModification:
        if self._fail_at is not None and self._index == self._fail_at:
            raise RuntimeError("history stream interrupted")
        if self._index >= len(self._entries):
            raise StopAsyncIteration
        entry = self._entries[self._index]
        self._index += 1
        return entry

    async def close(self) -> None:
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class MemoryStub:
    """
    Dict-backed stub; every write commits immediately as its own transaction.
    Failure flags simulate runtime I/O errors.
    """

    def __init__(self):
        self.state: Dict[str, bytes] = {}
        self.history: Dict[str, List[KeyModification]] = {}
        self.calls: List[tuple] = []
        self.iterators: List[MemoryHistoryIterator] = []
        self.fail_reads = False
        self.fail_writes = False
        self.fail_history_open = False
        self.fail_history_at: Optional[int] = None
        self._tx = 0

    def get_tx_id(self) -> str:
        return f"tx{self._tx:04d}"

    def get_channel_id(self) -> str:
        return CHANNEL

    def get_tx_timestamp(self) -> datetime:
        return BASE_TIME + timedelta(seconds=self._tx)

    def _record(self, key: str, value: bytes, is_delete: bool) -> None:
        self._tx += 1
        self.history.setdefault(key, []).append(
            KeyModification(
                tx_id=self.get_tx_id(),
                value=value,
                timestamp=self.get_tx_timestamp(),
                is_delete=is_delete,
            )
        )

    async def get_state(self, key: str) -> Optional[bytes]:
        self.calls.append(("get_state", key))
        if self.fail_reads:
            raise RuntimeError("state database unavailable")
        return self.state.get(key)

    async def put_state(self, key: str, value: bytes) -> None:
        self.calls.append(("put_state", key))
        if self.fail_writes:
            raise RuntimeError("state database is read-only")
        self.state[key] = value
        self._record(key, value, is_delete=False)

    async def del_state(self, key: str) -> None:
        self.calls.append(("del_state", key))
        self.state.pop(key, None)
        self._record(key, b"", is_delete=True)

    async def get_history_for_key(self, key: str) -> MemoryHistoryIterator:
        self.calls.append(("get_history_for_key", key))
        if self.fail_history_open:
            raise RuntimeError("history database unavailable")
        iterator = MemoryHistoryIterator(self.history.get(key, []), self.fail_history_at)
        self.iterators.append(iterator)
        return iterator


def asset_args(
    dealer_id: str,
    msisdn: str = "555",
    mpin: str = "0000",
    balance: str = "100.0",
    status: str = "A",
    trans_amount: str = "0.0",
    trans_type: str = "INIT",
    remarks: str = "seed",
) -> List[str]:
    """String arguments for CreateAsset / UpdateAsset, as the gateway sends them."""
    return [dealer_id, msisdn, mpin, balance, status, trans_amount, trans_type, remarks]


@pytest.fixture
def stub() -> MemoryStub:
    return MemoryStub()


@pytest.fixture
def ctx(stub: MemoryStub) -> TransactionContext:
    return TransactionContext(stub=stub, creator_msp_id=MSP_ID)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"


@pytest_asyncio.fixture
async def engine(db_url: str):
    engine = build_engine(db_url)
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest_asyncio.fixture
async def peer(engine):
    peer = Peer(build_sessionmaker(engine), {"asset": new_chaincode()})
    yield peer
    await peer.close()


@pytest.fixture
def gateway(peer: Peer) -> Gateway:
    return Gateway(Identity(MSP_ID), peer)


@pytest.fixture
def contract(gateway: Gateway):
    return gateway.get_network(CHANNEL).get_contract("asset")

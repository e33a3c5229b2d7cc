"""Chaincode stub backed by the SQL ledger store"""
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncResult, AsyncSession

from asset_chaincode.context import KeyModification
from asset_api.models import KeyHistory, WorldState


def as_utc(timestamp: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything stored is UTC"""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


def _check_key(key: str) -> None:
    if not key:
        raise ValueError("key must not be an empty string")


class SqlHistoryIterator:
    """Streams committed KeyHistory rows for one key through a server-side cursor"""

    def __init__(self, result: AsyncResult):
        self._result = result
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self):
        return self

    async def __anext__(self) -> KeyModification:
        if self._closed:
            raise StopAsyncIteration

        row = await self._result.fetchone()
        if row is None:
            await self.close()
            raise StopAsyncIteration

        return KeyModification(
            tx_id=row.tx_id,
            value=bytes(row.value) if row.value is not None else b"",
            timestamp=as_utc(row.timestamp),
            is_delete=row.is_delete,
        )

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._result.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class SimulationStub:
    """
    Executes one transaction proposal against committed state

    Writes never reach the database here; they are buffered in `write_set`
    and applied by the peer at commit. Every key read is recorded in
    `read_set` with the version seen (None when absent) for MVCC validation.
    """

    def __init__(self, session: AsyncSession, channel: str, namespace: str, tx_id: str, timestamp: datetime):
        self._session = session
        self._channel = channel
        self._namespace = namespace
        self._tx_id = tx_id
        self._timestamp = timestamp
        self.read_set: Dict[str, Optional[str]] = {}
        self.write_set: Dict[str, Optional[bytes]] = {}

    def get_tx_id(self) -> str:
        return self._tx_id

    def get_channel_id(self) -> str:
        return self._channel

    def get_tx_timestamp(self) -> datetime:
        return self._timestamp

    async def get_state(self, key: str) -> Optional[bytes]:
        _check_key(key)
        # Read-your-writes inside the same invocation
        if key in self.write_set:
            return self.write_set[key]

        stmt = select(WorldState.value, WorldState.version).where(
            WorldState.channel == self._channel,
            WorldState.namespace == self._namespace,
            WorldState.key == key,
        )
        row = (await self._session.execute(stmt)).first()

        self.read_set.setdefault(key, row.version if row else None)
        return bytes(row.value) if row else None

    async def put_state(self, key: str, value: bytes) -> None:
        _check_key(key)
        if not value:
            raise ValueError(f"value for key {key} must not be empty")
        self.write_set[key] = bytes(value)

    async def del_state(self, key: str) -> None:
        _check_key(key)
        self.write_set[key] = None

    async def get_history_for_key(self, key: str) -> SqlHistoryIterator:
        _check_key(key)
        stmt = select(
            KeyHistory.tx_id,
            KeyHistory.value,
            KeyHistory.timestamp,
            KeyHistory.is_delete,
        ).where(
            KeyHistory.channel == self._channel,
            KeyHistory.namespace == self._namespace,
            KeyHistory.key == key,
        ).order_by(KeyHistory.id)

        result = await self._session.stream(stmt)
        return SqlHistoryIterator(result)

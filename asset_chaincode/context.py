"""Interface between the contract and the ledger runtime that hosts it"""
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, Optional, Protocol


@dataclass(frozen=True)
class KeyModification:
    """One committed change to a key, as exposed by the key history"""
    tx_id: str
    value: bytes
    timestamp: datetime
    is_delete: bool


class HistoryQueryIterator(Protocol):
    """Scoped cursor over a key's history, oldest commit first

    Must be closed once the caller is done, whether or not iteration finished.
    """

    def __aiter__(self) -> AsyncIterator[KeyModification]:
        ...

    async def __anext__(self) -> KeyModification:
        ...

    async def close(self) -> None:
        ...

    async def __aenter__(self) -> "HistoryQueryIterator":
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        ...


class ChaincodeStub(Protocol):
    """Key/value and history access scoped to one channel and one transaction"""

    def get_tx_id(self) -> str:
        ...

    def get_channel_id(self) -> str:
        ...

    def get_tx_timestamp(self) -> datetime:
        ...

    async def get_state(self, key: str) -> Optional[bytes]:
        ...

    async def put_state(self, key: str, value: bytes) -> None:
        ...

    async def del_state(self, key: str) -> None:
        ...

    async def get_history_for_key(self, key: str) -> HistoryQueryIterator:
        ...


@dataclass
class TransactionContext:
    """Passed by the runtime to every contract operation"""
    stub: ChaincodeStub
    creator_msp_id: str = ""

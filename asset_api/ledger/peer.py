"""Peer - endorses, orders and commits chaincode transactions

A single process plays every network role: proposals are simulated against
committed world state, ordered in submission sequence, validated (MVCC) and
applied atomically together with their key history rows.
"""
import asyncio
import hashlib
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional, Sequence, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from asset_chaincode.chaincode import Chaincode
from asset_chaincode.context import TransactionContext
from asset_api.ledger.stub import SimulationStub
from asset_api.models import KeyHistory, LedgerTransaction, ValidationCode, WorldState

logger = logging.getLogger(__name__)


class ChaincodeNotInstalledError(Exception):
    """Raised when a proposal targets a chaincode the peer does not host"""
    pass


def new_tx_id(creator: str) -> str:
    """Transaction id: sha256 over a fresh nonce and the creator"""
    nonce = uuid.uuid4().bytes
    return hashlib.sha256(nonce + creator.encode("utf-8")).hexdigest()


@dataclass
class Endorsement:
    """Simulated transaction waiting to be ordered and committed"""
    tx_id: str
    channel: str
    chaincode: str
    function: str
    creator: str
    result: bytes
    read_set: Dict[str, Optional[str]] = field(default_factory=dict)
    write_set: Dict[str, Optional[bytes]] = field(default_factory=dict)


class Peer:
    """In-process endorsing and committing peer"""

    def __init__(self, session_factory: async_sessionmaker, chaincodes: Mapping[str, Chaincode]):
        self._sessions = session_factory
        self._chaincodes = dict(chaincodes)
        # FIFO lock: commits apply in submission order
        self._commit_lock = asyncio.Lock()
        self._last_commit_at: Optional[datetime] = None
        self._pending: Set[asyncio.Task] = set()

    def _get_chaincode(self, name: str) -> Chaincode:
        try:
            return self._chaincodes[name]
        except KeyError:
            raise ChaincodeNotInstalledError(f"chaincode {name} is not installed on this peer") from None

    async def _simulate(
        self,
        channel: str,
        chaincode_name: str,
        function: str,
        args: Sequence[str],
        creator: str,
    ) -> Endorsement:
        chaincode = self._get_chaincode(chaincode_name)
        tx_id = new_tx_id(creator)

        async with self._sessions() as session:
            stub = SimulationStub(session, channel, chaincode_name, tx_id, datetime.now(timezone.utc))
            ctx = TransactionContext(stub=stub, creator_msp_id=creator)
            result = await chaincode.invoke(ctx, function, list(args))

        return Endorsement(
            tx_id=tx_id,
            channel=channel,
            chaincode=chaincode_name,
            function=function,
            creator=creator,
            result=result,
            read_set=dict(stub.read_set),
            write_set=dict(stub.write_set),
        )

    async def evaluate(
        self,
        channel: str,
        chaincode_name: str,
        function: str,
        args: Sequence[str],
        creator: str,
    ) -> bytes:
        """Run a read-only query; anything the chaincode writes is dropped"""
        endorsement = await self._simulate(channel, chaincode_name, function, args, creator)
        return endorsement.result

    async def endorse(
        self,
        channel: str,
        chaincode_name: str,
        function: str,
        args: Sequence[str],
        creator: str,
    ) -> Endorsement:
        endorsement = await self._simulate(channel, chaincode_name, function, args, creator)
        logger.debug(
            f"Endorsed {chaincode_name}.{function} as {endorsement.tx_id} "
            f"(reads={len(endorsement.read_set)}, writes={len(endorsement.write_set)})"
        )
        return endorsement

    async def submit(self, endorsement: Endorsement) -> "asyncio.Task[ValidationCode]":
        """
        Hand an endorsed transaction to ordering
        Returns the commit task; awaiting it yields the validation code
        """
        task = asyncio.create_task(self._commit(endorsement))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _next_commit_time(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_commit_at is not None and now < self._last_commit_at:
            now = self._last_commit_at
        self._last_commit_at = now
        return now

    async def _validate(self, session: AsyncSession, endorsement: Endorsement) -> ValidationCode:
        for key, version_read in endorsement.read_set.items():
            stmt = select(WorldState.version).where(
                WorldState.channel == endorsement.channel,
                WorldState.namespace == endorsement.chaincode,
                WorldState.key == key,
            )
            current = await session.scalar(stmt)
            if current != version_read:
                logger.warning(
                    f"MVCC conflict on {key} for tx {endorsement.tx_id}: read {version_read}, now {current}"
                )
                return ValidationCode.MVCC_READ_CONFLICT
        return ValidationCode.VALID

    async def _apply(self, session: AsyncSession, endorsement: Endorsement, committed_at: datetime) -> None:
        for key, value in endorsement.write_set.items():
            stmt = select(WorldState).where(
                WorldState.channel == endorsement.channel,
                WorldState.namespace == endorsement.chaincode,
                WorldState.key == key,
            )
            row = await session.scalar(stmt)

            if value is None:
                if row is not None:
                    await session.delete(row)
            elif row is None:
                session.add(WorldState(
                    channel=endorsement.channel,
                    namespace=endorsement.chaincode,
                    key=key,
                    value=value,
                    version=endorsement.tx_id,
                    updated_at=committed_at,
                ))
            else:
                row.value = value
                row.version = endorsement.tx_id
                row.updated_at = committed_at

            session.add(KeyHistory(
                channel=endorsement.channel,
                namespace=endorsement.chaincode,
                key=key,
                tx_id=endorsement.tx_id,
                value=value,
                is_delete=value is None,
                timestamp=committed_at,
            ))

    async def _commit(self, endorsement: Endorsement) -> ValidationCode:
        async with self._commit_lock:
            async with self._sessions() as session, session.begin():
                committed_at = self._next_commit_time()
                code = await self._validate(session, endorsement)
                if code == ValidationCode.VALID:
                    await self._apply(session, endorsement, committed_at)

                session.add(LedgerTransaction(
                    tx_id=endorsement.tx_id,
                    channel=endorsement.channel,
                    chaincode=endorsement.chaincode,
                    function=endorsement.function,
                    creator_msp_id=endorsement.creator,
                    validation_code=code,
                    committed_at=committed_at,
                ))

        logger.info(f"Committed tx {endorsement.tx_id} ({endorsement.chaincode}.{endorsement.function}): {code.value}")
        return code

    async def get_transaction_status(self, tx_id: str) -> Optional[ValidationCode]:
        """Validation code of a committed transaction, None if unknown"""
        async with self._sessions() as session:
            stmt = select(LedgerTransaction.validation_code).where(LedgerTransaction.tx_id == tx_id)
            return await session.scalar(stmt)

    async def close(self) -> None:
        """Wait for transactions already handed to ordering"""
        if self._pending:
            logger.info(f"Waiting for {len(self._pending)} in-flight commits...")
            await asyncio.gather(*self._pending, return_exceptions=True)

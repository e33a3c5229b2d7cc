"""Gateway client - the façade's entry point to the ledger network

Evaluate runs a read-only query on the peer. Submit walks a transaction
through endorse, submit (ordering) and commit-status, each phase bounded by
its own deadline.
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from asset_chaincode.errors import ChaincodeError
from asset_api.ledger.peer import Endorsement, Peer
from asset_api.models import ValidationCode

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when a gateway call fails

    `kind` carries the chaincode error kind when the contract rejected the
    call, so callers can distinguish NotFound from AlreadyExists and so on.
    """

    def __init__(self, message: str, kind: Optional[str] = None, tx_id: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.tx_id = tx_id


class EvaluateError(GatewayError):
    """Raised when a query fails or times out"""
    pass


class EndorseError(GatewayError):
    """Raised when transaction simulation fails or times out"""
    pass


class SubmitError(GatewayError):
    """Raised when an endorsed transaction cannot be handed to ordering"""
    pass


class CommitStatusError(GatewayError):
    """Raised when the commit outcome is not known before the deadline"""
    pass


class CommitError(GatewayError):
    """Raised when the transaction was committed as invalid"""

    def __init__(self, message: str, code: ValidationCode, tx_id: str):
        super().__init__(message, kind=code.value, tx_id=tx_id)
        self.code = code


@dataclass(frozen=True)
class Identity:
    """Client identity presented to the network"""
    msp_id: str
    certificate: bytes = b""


def load_identity(msp_id: str, cert_path: Optional[str] = None) -> Identity:
    """Build the client identity, reading the PEM certificate if one is configured"""
    certificate = b""
    if cert_path:
        certificate = Path(cert_path).read_bytes()
        logger.info(f"Loaded certificate for {msp_id} from {cert_path}")
    return Identity(msp_id=msp_id, certificate=certificate)


def _wrap(error_cls, action: str, exc: Exception, tx_id: Optional[str] = None) -> GatewayError:
    if isinstance(exc, ChaincodeError):
        return error_cls(str(exc), kind=exc.kind, tx_id=tx_id)
    return error_cls(f"{action} failed: {exc}", tx_id=tx_id)


class Contract:
    """A chaincode on a channel, as seen through the gateway"""

    def __init__(self, gateway: "Gateway", channel: str, chaincode_name: str):
        self._gateway = gateway
        self.channel = channel
        self.chaincode_name = chaincode_name

    async def evaluate_transaction(self, name: str, *args: str) -> bytes:
        """Execute a read-only query on the peer and return its payload"""
        gateway = self._gateway
        try:
            return await asyncio.wait_for(
                gateway.peer.evaluate(self.channel, self.chaincode_name, name, args, gateway.identity.msp_id),
                timeout=gateway.evaluate_timeout,
            )
        except asyncio.TimeoutError as e:
            raise EvaluateError(f"evaluate {name} timed out after {gateway.evaluate_timeout}s") from e
        except Exception as e:
            raise _wrap(EvaluateError, f"evaluate {name}", e) from e

    async def submit_transaction(self, name: str, *args: str) -> bytes:
        """
        Endorse, order and wait for commit of a transaction
        Returns the chaincode payload once the transaction is committed as VALID
        """
        endorsement = await self._endorse(name, args)
        commit = await self._submit(endorsement)
        code = await self._commit_status(endorsement, commit)

        if code != ValidationCode.VALID:
            raise CommitError(
                f"transaction {endorsement.tx_id} failed to commit with status code {code.value}",
                code=code,
                tx_id=endorsement.tx_id,
            )
        return endorsement.result

    async def _endorse(self, name: str, args) -> Endorsement:
        gateway = self._gateway
        try:
            return await asyncio.wait_for(
                gateway.peer.endorse(self.channel, self.chaincode_name, name, args, gateway.identity.msp_id),
                timeout=gateway.endorse_timeout,
            )
        except asyncio.TimeoutError as e:
            raise EndorseError(f"endorse {name} timed out after {gateway.endorse_timeout}s") from e
        except Exception as e:
            raise _wrap(EndorseError, f"endorse {name}", e) from e

    async def _submit(self, endorsement: Endorsement) -> "asyncio.Task[ValidationCode]":
        gateway = self._gateway
        try:
            return await asyncio.wait_for(gateway.peer.submit(endorsement), timeout=gateway.submit_timeout)
        except asyncio.TimeoutError as e:
            raise SubmitError(
                f"submit timed out after {gateway.submit_timeout}s", tx_id=endorsement.tx_id
            ) from e
        except Exception as e:
            raise _wrap(SubmitError, "submit", e, tx_id=endorsement.tx_id) from e

    async def _commit_status(self, endorsement: Endorsement, commit: "asyncio.Task[ValidationCode]") -> ValidationCode:
        gateway = self._gateway
        try:
            # Shielded: giving up on the status must not abort the commit itself
            return await asyncio.wait_for(asyncio.shield(commit), timeout=gateway.commit_status_timeout)
        except asyncio.TimeoutError as e:
            raise CommitStatusError(
                f"commit status of {endorsement.tx_id} unknown after {gateway.commit_status_timeout}s",
                tx_id=endorsement.tx_id,
            ) from e
        except Exception as e:
            raise _wrap(CommitStatusError, "commit", e, tx_id=endorsement.tx_id) from e


class Network:
    """A channel reachable through the gateway"""

    def __init__(self, gateway: "Gateway", name: str):
        self._gateway = gateway
        self.name = name

    def get_contract(self, chaincode_name: str) -> Contract:
        return Contract(self._gateway, self.name, chaincode_name)

    async def get_commit_status(self, tx_id: str) -> Optional[ValidationCode]:
        """
        Look up the outcome of a submitted transaction
        Returns None while the transaction is not committed yet
        """
        try:
            return await self._gateway.peer.get_transaction_status(tx_id)
        except Exception as e:
            raise CommitStatusError(f"commit status of {tx_id} unavailable: {e}", tx_id=tx_id) from e


class Gateway:
    """Connection to the ledger network on behalf of one identity"""

    def __init__(
        self,
        identity: Identity,
        peer: Peer,
        evaluate_timeout: float = 5.0,
        endorse_timeout: float = 15.0,
        submit_timeout: float = 5.0,
        commit_status_timeout: float = 60.0,
    ):
        self.identity = identity
        self.peer = peer
        self.evaluate_timeout = evaluate_timeout
        self.endorse_timeout = endorse_timeout
        self.submit_timeout = submit_timeout
        self.commit_status_timeout = commit_status_timeout

    def get_network(self, channel: str) -> Network:
        return Network(self, channel)

    async def close(self) -> None:
        await self.peer.close()
        logger.info(f"Gateway for {self.identity.msp_id} closed")

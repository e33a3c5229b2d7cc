"""Asset Contract Operations

Stateless handlers routed by the chaincode dispatch table. Every read, write
and history advance goes through the transaction context's stub; nothing is
cached between invocations.
"""
import logging
from datetime import datetime, timezone
from typing import List

import jcs
from pydantic import ValidationError

from asset_chaincode.asset import Asset
from asset_chaincode.context import KeyModification, TransactionContext
from asset_chaincode.errors import (
    AlreadyExistsError,
    EncodeError,
    HistoryIterationError,
    InvalidArgumentError,
    NotFoundError,
    StateReadError,
    StateWriteError,
)

logger = logging.getLogger(__name__)

DELETED_MARKER = "DELETED"
RFC3339_UTC = "%Y-%m-%dT%H:%M:%SZ"


def _require_dealer_id(dealer_id: str) -> None:
    if not dealer_id:
        raise InvalidArgumentError("dealerID must not be empty")


def _build_asset(
    dealer_id: str,
    msisdn: str,
    mpin: str,
    balance: float,
    status: str,
    trans_amount: float,
    trans_type: str,
    remarks: str,
) -> Asset:
    try:
        return Asset(
            dealer_id=dealer_id,
            msisdn=msisdn,
            mpin=mpin,
            balance=balance,
            status=status,
            trans_amount=trans_amount,
            trans_type=trans_type,
            remarks=remarks,
        )
    except ValidationError as e:
        raise InvalidArgumentError(f"invalid asset {dealer_id}: {e}") from e


async def _put_asset(ctx: TransactionContext, asset: Asset) -> None:
    try:
        asset_json = asset.to_json()
    except Exception as e:
        raise EncodeError(f"failed to encode asset {asset.dealer_id}: {e}") from e

    try:
        await ctx.stub.put_state(asset.dealer_id, asset_json)
    except Exception as e:
        raise StateWriteError(f"failed to write to world state: {e}") from e


async def asset_exists(ctx: TransactionContext, dealer_id: str) -> bool:
    """
    Probe world state for dealer_id
    A missing key is a normal False; only a runtime failure is an error
    """
    _require_dealer_id(dealer_id)
    try:
        asset_json = await ctx.stub.get_state(dealer_id)
    except Exception as e:
        raise StateReadError(f"failed to read from world state: {e}") from e

    return bool(asset_json)


async def create_asset(
    ctx: TransactionContext,
    dealer_id: str,
    msisdn: str,
    mpin: str,
    balance: float,
    status: str,
    trans_amount: float,
    trans_type: str,
    remarks: str,
) -> None:
    """Issue a new asset; fails if dealer_id is already in world state"""
    if await asset_exists(ctx, dealer_id):
        raise AlreadyExistsError(f"the asset {dealer_id} already exists")

    asset = _build_asset(dealer_id, msisdn, mpin, balance, status, trans_amount, trans_type, remarks)
    await _put_asset(ctx, asset)
    logger.debug(f"Asset {dealer_id} created in tx {ctx.stub.get_tx_id()}")


async def update_asset(
    ctx: TransactionContext,
    dealer_id: str,
    msisdn: str,
    mpin: str,
    balance: float,
    status: str,
    trans_amount: float,
    trans_type: str,
    remarks: str,
) -> None:
    """
    Replace an existing asset with a record built from the arguments
    No field is merged from the previous version
    """
    if not await asset_exists(ctx, dealer_id):
        raise NotFoundError(f"the asset {dealer_id} does not exist")

    asset = _build_asset(dealer_id, msisdn, mpin, balance, status, trans_amount, trans_type, remarks)
    await _put_asset(ctx, asset)
    logger.debug(f"Asset {dealer_id} updated in tx {ctx.stub.get_tx_id()}")


async def read_asset(ctx: TransactionContext, dealer_id: str) -> Asset:
    """Return the latest committed version of an asset"""
    _require_dealer_id(dealer_id)
    try:
        asset_json = await ctx.stub.get_state(dealer_id)
    except Exception as e:
        raise StateReadError(f"failed to read from world state: {e}") from e

    if not asset_json:
        raise NotFoundError(f"the asset {dealer_id} does not exist")

    try:
        return Asset.from_json(asset_json)
    except ValidationError as e:
        raise StateReadError(f"failed to decode asset {dealer_id}: {e}") from e


def format_timestamp(timestamp: datetime) -> str:
    """RFC 3339 in UTC; naive timestamps are taken to be UTC already"""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).strftime(RFC3339_UTC)


def _history_entry(modification: KeyModification) -> dict:
    if modification.is_delete:
        value = DELETED_MARKER
    else:
        value = bytes(modification.value).decode("utf-8")

    return {
        "TxId": modification.tx_id,
        "Value": value,
        "Timestamp": format_timestamp(modification.timestamp),
        "IsDelete": modification.is_delete,
    }


async def get_history_for_asset(ctx: TransactionContext, dealer_id: str) -> str:
    """
    Materialize every committed version of dealer_id as a JSON array

    Entries keep the runtime's commit order. Either the whole array is
    returned or the call fails; the iterator is closed on every path.
    """
    _require_dealer_id(dealer_id)
    try:
        iterator = await ctx.stub.get_history_for_key(dealer_id)
    except Exception as e:
        raise HistoryIterationError(f"failed to get history for asset {dealer_id}: {e}") from e

    history: List[dict] = []
    async with iterator:
        try:
            async for modification in iterator:
                history.append(_history_entry(modification))
        except Exception as e:
            raise HistoryIterationError(f"failed to iterate history for asset {dealer_id}: {e}") from e

    try:
        return jcs.canonicalize(history).decode("utf-8")
    except Exception as e:
        raise EncodeError(f"failed to encode history for asset {dealer_id}: {e}") from e

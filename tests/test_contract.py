# tests/test_contract.py
import json
from datetime import datetime, timedelta, timezone

import jcs
import pytest

from asset_chaincode import contract
from asset_chaincode.asset import Asset
from asset_chaincode.context import KeyModification
from asset_chaincode.contract import format_timestamp
from asset_chaincode.errors import (
    AlreadyExistsError,
    EncodeError,
    HistoryIterationError,
    InvalidArgumentError,
    NotFoundError,
    StateReadError,
    StateWriteError,
)


async def create(ctx, dealer_id, balance=100.0, **fields):
    await contract.create_asset(
        ctx,
        dealer_id,
        fields.get("msisdn", "555"),
        fields.get("mpin", "0000"),
        balance,
        fields.get("status", "A"),
        fields.get("trans_amount", 0.0),
        fields.get("trans_type", "INIT"),
        fields.get("remarks", "seed"),
    )


async def update(ctx, dealer_id, balance, **fields):
    await contract.update_asset(
        ctx,
        dealer_id,
        fields.get("msisdn", "555"),
        fields.get("mpin", "0000"),
        balance,
        fields.get("status", "A"),
        fields.get("trans_amount", 0.0),
        fields.get("trans_type", "TOPUP"),
        fields.get("remarks", ""),
    )


@pytest.mark.asyncio
async def test_create_then_read_returns_same_record(ctx):
    await create(ctx, "D1")

    asset = await contract.read_asset(ctx, "D1")
    assert asset == Asset(
        dealer_id="D1",
        msisdn="555",
        mpin="0000",
        balance=100.0,
        status="A",
        trans_amount=0.0,
        trans_type="INIT",
        remarks="seed",
    )


@pytest.mark.asyncio
async def test_create_writes_canonical_json(ctx, stub):
    await create(ctx, "D1")
    assert stub.state["D1"] == (await contract.read_asset(ctx, "D1")).to_json()


@pytest.mark.asyncio
async def test_duplicate_create_fails_and_keeps_first(ctx, stub):
    await create(ctx, "D1", balance=100.0)
    before = dict(stub.state)

    with pytest.raises(AlreadyExistsError, match="the asset D1 already exists"):
        await create(ctx, "D1", balance=999.0)

    assert stub.state == before
    assert (await contract.read_asset(ctx, "D1")).balance == 100.0


@pytest.mark.asyncio
async def test_update_missing_asset_fails(ctx, stub):
    with pytest.raises(NotFoundError, match="the asset D2 does not exist"):
        await update(ctx, "D2", 10.0)

    assert stub.state == {}
    with pytest.raises(NotFoundError):
        await contract.read_asset(ctx, "D2")


@pytest.mark.asyncio
async def test_update_replaces_whole_record(ctx):
    await create(ctx, "D3", balance=50.0, msisdn="555", remarks="seed")
    await update(ctx, "D3", 75.0, msisdn="", remarks="")

    asset = await contract.read_asset(ctx, "D3")
    assert asset.balance == 75.0
    assert asset.msisdn == ""
    assert asset.remarks == ""
    assert asset.trans_type == "TOPUP"


@pytest.mark.asyncio
async def test_asset_exists(ctx):
    assert await contract.asset_exists(ctx, "D1") is False
    await create(ctx, "D1")
    assert await contract.asset_exists(ctx, "D1") is True


@pytest.mark.asyncio
async def test_probe_failure_is_state_read_error(ctx, stub):
    stub.fail_reads = True

    with pytest.raises(StateReadError, match="failed to read from world state"):
        await create(ctx, "D1")
    with pytest.raises(StateReadError):
        await update(ctx, "D1", 1.0)
    with pytest.raises(StateReadError):
        await contract.read_asset(ctx, "D1")

    assert not any(call[0] == "put_state" for call in stub.calls)


@pytest.mark.asyncio
async def test_write_failure_is_state_write_error(ctx, stub):
    stub.fail_writes = True

    with pytest.raises(StateWriteError, match="failed to write to world state"):
        await create(ctx, "D1")
    assert stub.state == {}


@pytest.mark.asyncio
async def test_update_write_failure_keeps_previous_version(ctx, stub):
    await create(ctx, "D1", balance=100.0)
    stub.fail_writes = True

    with pytest.raises(StateWriteError, match="failed to write to world state"):
        await update(ctx, "D1", 5.0)

    stub.fail_writes = False
    assert (await contract.read_asset(ctx, "D1")).balance == 100.0
    assert len(stub.history["D1"]) == 1


@pytest.mark.asyncio
async def test_encode_failure_is_encode_error(ctx, stub, monkeypatch):
    await create(ctx, "D1")

    def broken_canonicalize(obj):
        raise TypeError("cannot canonicalize")

    monkeypatch.setattr(jcs, "canonicalize", broken_canonicalize)

    with pytest.raises(EncodeError, match="failed to encode asset D2"):
        await create(ctx, "D2")
    assert "D2" not in stub.state

    with pytest.raises(EncodeError, match="failed to encode history for asset D1"):
        await contract.get_history_for_asset(ctx, "D1")
    assert stub.iterators[-1].closed


@pytest.mark.asyncio
async def test_corrupt_state_is_state_read_error(ctx, stub):
    stub.state["D1"] = b'{"DEALERID": 12}'

    with pytest.raises(StateReadError, match="failed to decode asset D1"):
        await contract.read_asset(ctx, "D1")


@pytest.mark.asyncio
async def test_empty_dealer_id_rejected_before_state_access(ctx, stub):
    with pytest.raises(InvalidArgumentError):
        await create(ctx, "")
    with pytest.raises(InvalidArgumentError):
        await contract.read_asset(ctx, "")
    with pytest.raises(InvalidArgumentError):
        await contract.get_history_for_asset(ctx, "")

    assert stub.calls == []


@pytest.mark.asyncio
async def test_non_finite_amount_rejected(ctx, stub):
    with pytest.raises(InvalidArgumentError):
        await create(ctx, "D1", balance=float("inf"))
    assert stub.state == {}


@pytest.mark.asyncio
async def test_history_single_entry(ctx, stub):
    await create(ctx, "D1")

    history = json.loads(await contract.get_history_for_asset(ctx, "D1"))
    assert len(history) == 1

    entry = history[0]
    assert set(entry) == {"TxId", "Value", "Timestamp", "IsDelete"}
    assert entry["IsDelete"] is False
    assert entry["TxId"] == "tx0001"
    assert entry["Timestamp"] == "2024-01-01T00:00:01Z"
    assert Asset.from_json(entry["Value"]) == await contract.read_asset(ctx, "D1")


@pytest.mark.asyncio
async def test_history_in_commit_order(ctx):
    await create(ctx, "D3", balance=50.0)
    await update(ctx, "D3", 75.0)
    await update(ctx, "D3", 25.0)

    assert (await contract.read_asset(ctx, "D3")).balance == 25.0

    history = json.loads(await contract.get_history_for_asset(ctx, "D3"))
    assert [Asset.from_json(e["Value"]).balance for e in history] == [50.0, 75.0, 25.0]
    assert len({e["TxId"] for e in history}) == 3

    timestamps = [e["Timestamp"] for e in history]
    assert timestamps == sorted(timestamps)


@pytest.mark.asyncio
async def test_history_of_unknown_key_is_empty_array(ctx):
    assert await contract.get_history_for_asset(ctx, "Dx") == "[]"


@pytest.mark.asyncio
async def test_history_renders_deletions(ctx, stub):
    await create(ctx, "D6", balance=10.0)
    await update(ctx, "D6", 20.0)
    await stub.del_state("D6")

    history = json.loads(await contract.get_history_for_asset(ctx, "D6"))
    assert len(history) == 3

    assert history[-1]["IsDelete"] is True
    assert history[-1]["Value"] == "DELETED"
    assert [Asset.from_json(e["Value"]).balance for e in history[:2]] == [10.0, 20.0]
    assert all(e["IsDelete"] is False for e in history[:2])


@pytest.mark.asyncio
async def test_history_iterator_closed_after_success(ctx, stub):
    await create(ctx, "D1")
    await contract.get_history_for_asset(ctx, "D1")

    assert len(stub.iterators) == 1
    assert stub.iterators[0].closed


@pytest.mark.asyncio
async def test_history_failure_midstream_returns_nothing(ctx, stub):
    await create(ctx, "D1")
    await update(ctx, "D1", 2.0)
    stub.fail_history_at = 1

    with pytest.raises(HistoryIterationError, match="D1"):
        await contract.get_history_for_asset(ctx, "D1")

    assert stub.iterators[0].closed


@pytest.mark.asyncio
async def test_history_open_failure(ctx, stub):
    stub.fail_history_open = True

    with pytest.raises(HistoryIterationError, match="failed to get history for asset D1"):
        await contract.get_history_for_asset(ctx, "D1")


@pytest.mark.asyncio
async def test_history_undecodable_value(ctx, stub):
    await create(ctx, "D1")
    stub.history["D1"][0] = KeyModification(
        tx_id="tx0001",
        value=b"\xff\xfe",
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        is_delete=False,
    )

    with pytest.raises(HistoryIterationError):
        await contract.get_history_for_asset(ctx, "D1")
    assert stub.iterators[0].closed


def test_format_timestamp_is_rfc3339_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    assert format_timestamp(datetime(2024, 3, 1, 17, 30, 0, 123456, tzinfo=ist)) == "2024-03-01T12:00:00Z"
    assert format_timestamp(datetime(2024, 3, 1, 12, 0, 0)) == "2024-03-01T12:00:00Z"

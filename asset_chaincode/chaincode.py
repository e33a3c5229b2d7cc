"""Chaincode bootstrap - routes runtime invocations to contract operations"""
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Sequence, Tuple

from asset_chaincode import contract
from asset_chaincode.asset import Asset
from asset_chaincode.context import TransactionContext
from asset_chaincode.errors import FunctionNotFoundError, InvalidArgumentError

logger = logging.getLogger(__name__)

CHAINCODE_NAME = "asset"

ASSET_PARAMS = (
    "dealerID",
    "msisdn",
    "mpin",
    "balance",
    "status",
    "transAmount",
    "transType",
    "remarks",
)
ASSET_NUMERIC_PARAMS = frozenset({"balance", "transAmount"})

# Signed decimal real, optional exponent; no inf/nan, no underscores, no padding
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

Handler = Callable[..., Awaitable[Any]]


def parse_number(value: str, param: str) -> float:
    """Parse a numeric argument string into a finite double"""
    if not _DECIMAL_RE.fullmatch(value):
        raise InvalidArgumentError(f"{param}: {value!r} is not a decimal number")

    number = float(value)
    if not math.isfinite(number):
        raise InvalidArgumentError(f"{param}: {value!r} is out of range")
    return number


def encode_result(result: Any) -> bytes:
    """Render an operation's return value as the transaction payload"""
    if result is None:
        return b""
    if isinstance(result, Asset):
        return result.to_json()
    if isinstance(result, bool):
        return b"true" if result else b"false"
    if isinstance(result, bytes):
        return result
    return str(result).encode("utf-8")


@dataclass(frozen=True)
class Operation:
    """A registered contract operation and the shape of its arguments"""
    handler: Handler
    params: Tuple[str, ...]
    numeric: FrozenSet[str] = field(default_factory=frozenset)

    def convert(self, args: Sequence[str]) -> List[Any]:
        if len(args) != len(self.params):
            raise InvalidArgumentError(
                f"incorrect number of params. Expected {len(self.params)}, received {len(args)}"
            )
        return [
            parse_number(arg, param) if param in self.numeric else arg
            for param, arg in zip(self.params, args)
        ]


class Chaincode:
    """
    Dispatch table for one contract

    The runtime hands over an operation name and string arguments; the
    matching handler receives the transaction context and converted values.
    """

    def __init__(self, name: str):
        self.name = name
        self._operations: Dict[str, Operation] = {}

    def register(self, name: str, handler: Handler, params: Sequence[str], numeric: Sequence[str] = ()) -> None:
        if name in self._operations:
            raise ValueError(f"operation {name} is already registered on {self.name}")
        self._operations[name] = Operation(handler, tuple(params), frozenset(numeric))

    @property
    def functions(self) -> List[str]:
        return sorted(self._operations)

    async def invoke(self, ctx: TransactionContext, function: str, args: Sequence[str]) -> bytes:
        operation = self._operations.get(function)
        if operation is None:
            raise FunctionNotFoundError(f"Function {function} not found in contract {self.name}")

        # Arguments are checked before the handler touches state
        values = operation.convert(args)

        logger.debug(f"Invoking {self.name}.{function} in tx {ctx.stub.get_tx_id()}")
        result = await operation.handler(ctx, *values)
        return encode_result(result)


def new_chaincode() -> Chaincode:
    """Build the asset chaincode with all operations registered"""
    chaincode = Chaincode(CHAINCODE_NAME)
    chaincode.register("CreateAsset", contract.create_asset, ASSET_PARAMS, ASSET_NUMERIC_PARAMS)
    chaincode.register("UpdateAsset", contract.update_asset, ASSET_PARAMS, ASSET_NUMERIC_PARAMS)
    chaincode.register("ReadAsset", contract.read_asset, ("dealerID",))
    chaincode.register("GetHistoryForAsset", contract.get_history_for_asset, ("dealerID",))
    chaincode.register("AssetExists", contract.asset_exists, ("dealerID",))
    return chaincode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, Response
import logging

from asset_api.schemas.asset import AssetRequest
from asset_api.services.gateway import Contract, GatewayError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Assets"])

# Chaincode error kinds that map to something more specific than a 500
STATUS_BY_KIND = {
    "NotFound": status.HTTP_404_NOT_FOUND,
    "AlreadyExists": status.HTTP_409_CONFLICT,
    "InvalidArgument": status.HTTP_400_BAD_REQUEST,
}


def get_contract(request: Request) -> Contract:
    return request.app.state.contract


def _gateway_http_error(e: GatewayError, action: str, dealer_id: str) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_KIND.get(e.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={
            "error": "Transaction Failed",
            "message": f"failed to {action} transaction: {e}",
            "kind": e.kind or type(e).__name__,
            "dealer_id": dealer_id,
        }
    )


def _require_dealer_id(dealer_id: str) -> None:
    if not dealer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Bad Request",
                "message": "dealerID required",
            }
        )


@router.post("/create", response_class=PlainTextResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    request: AssetRequest,
    contract: Contract = Depends(get_contract)
):
    """
    Create a new asset on the ledger

    The transaction is endorsed, ordered and committed before this returns.

    Example:
    ```
    POST /create
    Body: {
        "DEALERID": "D1",
        "MSISDN": "555",
        "MPIN": "0000",
        "BALANCE": 100.0,
        "STATUS": "A",
        "TRANSAMOUNT": 0.0,
        "TRANSTYPE": "INIT",
        "REMARKS": "seed"
    }
    ```
    """
    try:
        await contract.submit_transaction("CreateAsset", *request.to_args())
    except GatewayError as e:
        logger.error(f"Create {request.dealer_id} failed: {e}", exc_info=True)
        raise _gateway_http_error(e, "submit", request.dealer_id)

    return "Asset created"


@router.post("/update", response_class=PlainTextResponse)
async def update_asset(
    request: AssetRequest,
    contract: Contract = Depends(get_contract)
):
    """
    Replace an existing asset with the record in the body

    Every field is overwritten; there are no partial updates.
    """
    try:
        await contract.submit_transaction("UpdateAsset", *request.to_args())
    except GatewayError as e:
        logger.error(f"Update {request.dealer_id} failed: {e}", exc_info=True)
        raise _gateway_http_error(e, "submit", request.dealer_id)

    return "Asset updated"


@router.get("/read/{dealer_id:path}")
async def read_asset(
    dealer_id: str,
    contract: Contract = Depends(get_contract)
):
    """
    Read the latest committed version of an asset

    Example:
    ```
    GET /read/D1
    ```
    """
    _require_dealer_id(dealer_id)

    try:
        result = await contract.evaluate_transaction("ReadAsset", dealer_id)
    except GatewayError as e:
        logger.error(f"Read {dealer_id} failed: {e}", exc_info=True)
        raise _gateway_http_error(e, "evaluate", dealer_id)

    return Response(content=result, media_type="application/json")


@router.get("/history/{dealer_id:path}")
async def get_asset_history(
    dealer_id: str,
    contract: Contract = Depends(get_contract)
):
    """
    Every committed version of an asset, oldest first

    Example:
    ```
    GET /history/D1
    ```
    """
    _require_dealer_id(dealer_id)

    try:
        result = await contract.evaluate_transaction("GetHistoryForAsset", dealer_id)
    except GatewayError as e:
        logger.error(f"History {dealer_id} failed: {e}", exc_info=True)
        raise _gateway_http_error(e, "evaluate", dealer_id)

    # Already JSON; forwarded as-is
    return Response(content=result, media_type="application/json")

"""Asset Schemas - Request Models"""
from pydantic import BaseModel, Field
from typing import List


def format_amount(value: float) -> str:
    """Shortest decimal string that reads back as the same double"""
    return repr(float(value))


class AssetRequest(BaseModel):
    """Request body for /create and /update
    
    Field names match the on-ledger JSON exactly
    """
    dealer_id: str = Field(..., alias="DEALERID", min_length=1, description="Dealer identifier (asset key)")
    msisdn: str = Field("", alias="MSISDN")
    mpin: str = Field("", alias="MPIN")
    balance: float = Field(0.0, alias="BALANCE", allow_inf_nan=False)
    status: str = Field("", alias="STATUS")
    trans_amount: float = Field(0.0, alias="TRANSAMOUNT", allow_inf_nan=False)
    trans_type: str = Field("", alias="TRANSTYPE")
    remarks: str = Field("", alias="REMARKS")
    
    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "DEALERID": "D1",
                "MSISDN": "555",
                "MPIN": "0000",
                "BALANCE": 100.0,
                "STATUS": "A",
                "TRANSAMOUNT": 0.0,
                "TRANSTYPE": "INIT",
                "REMARKS": "seed",
            }
        }
    
    def to_args(self) -> List[str]:
        """Positional string arguments for CreateAsset / UpdateAsset"""
        return [
            self.dealer_id,
            self.msisdn,
            self.mpin,
            format_amount(self.balance),
            self.status,
            format_amount(self.trans_amount),
            self.trans_type,
            self.remarks,
        ]

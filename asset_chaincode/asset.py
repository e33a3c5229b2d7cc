"""Asset Model - the single record kept in world state, keyed by DEALERID"""
from typing import Union

import jcs
from pydantic import BaseModel, Field


class Asset(BaseModel):
    """Dealer Asset

    Stored on the ledger as canonical JSON with the upper-case field names.
    BALANCE and TRANSAMOUNT are plain IEEE-754 doubles; the contract makes no
    promise of monetary exactness.
    """
    dealer_id: str = Field(..., alias="DEALERID", min_length=1, description="Primary key, never changes")
    msisdn: str = Field("", alias="MSISDN")
    mpin: str = Field("", alias="MPIN", description="Stored verbatim, sensitive to callers")
    balance: float = Field(0.0, alias="BALANCE", allow_inf_nan=False)
    status: str = Field("", alias="STATUS")
    trans_amount: float = Field(0.0, alias="TRANSAMOUNT", allow_inf_nan=False)
    trans_type: str = Field("", alias="TRANSTYPE")
    remarks: str = Field("", alias="REMARKS")

    class Config:
        populate_by_name = True
        frozen = True

    def to_dict(self) -> dict:
        """Field values keyed by their on-ledger names"""
        return self.model_dump(by_alias=True)

    def to_json(self) -> bytes:
        """Canonical UTF-8 JSON (RFC 8785) as written to world state"""
        return jcs.canonicalize(self.to_dict())

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> "Asset":
        return cls.model_validate_json(data)

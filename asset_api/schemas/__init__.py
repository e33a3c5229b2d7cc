"""Pydantic Schemas for Request Validation"""
from asset_api.schemas.asset import AssetRequest, format_amount

__all__ = [
    "AssetRequest",
    "format_amount",
]

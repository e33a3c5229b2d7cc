"""Asset Contract - ledger-resident chaincode for dealer Asset records"""
from asset_chaincode.asset import Asset
from asset_chaincode.chaincode import CHAINCODE_NAME, Chaincode, new_chaincode

__all__ = [
    "Asset",
    "CHAINCODE_NAME",
    "Chaincode",
    "new_chaincode",
]

__version__ = "1.0.0"

"""Database Models"""
from asset_api.models.world_state import WorldState
from asset_api.models.key_history import KeyHistory
from asset_api.models.ledger_transaction import LedgerTransaction, ValidationCode

__all__ = [
    "WorldState",
    "KeyHistory",
    "LedgerTransaction",
    "ValidationCode",
]

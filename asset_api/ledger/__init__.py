"""In-process ledger runtime: simulation, ordering and commit"""
from asset_api.ledger.peer import ChaincodeNotInstalledError, Endorsement, Peer
from asset_api.ledger.stub import SimulationStub, SqlHistoryIterator

__all__ = [
    "ChaincodeNotInstalledError",
    "Endorsement",
    "Peer",
    "SimulationStub",
    "SqlHistoryIterator",
]

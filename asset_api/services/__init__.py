"""Service layer"""
from asset_api.services.gateway import (
    CommitError,
    CommitStatusError,
    Contract,
    EndorseError,
    EvaluateError,
    Gateway,
    GatewayError,
    Identity,
    SubmitError,
    load_identity,
)

__all__ = [
    "CommitError",
    "CommitStatusError",
    "Contract",
    "EndorseError",
    "EvaluateError",
    "Gateway",
    "GatewayError",
    "Identity",
    "SubmitError",
    "load_identity",
]

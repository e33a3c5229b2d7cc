"""Failures surfaced by the asset contract to the ledger runtime"""


class ChaincodeError(Exception):
    """Base class for every error the contract raises

    `kind` is stable across the runtime and gateway so callers can tell
    failures apart without parsing messages.
    """
    kind = "ChaincodeError"


class AlreadyExistsError(ChaincodeError):
    """Raised when creating an asset whose key is already present"""
    kind = "AlreadyExists"


class NotFoundError(ChaincodeError):
    """Raised when updating or reading an asset that does not exist"""
    kind = "NotFound"


class StateReadError(ChaincodeError):
    """Raised when the runtime fails to read world state"""
    kind = "StateReadError"


class StateWriteError(ChaincodeError):
    """Raised when the runtime fails to write world state"""
    kind = "StateWriteError"


class HistoryIterationError(ChaincodeError):
    """Raised when opening, advancing or decoding key history fails"""
    kind = "HistoryIterationError"


class InvalidArgumentError(ChaincodeError):
    """Raised when an invocation argument cannot be accepted"""
    kind = "InvalidArgument"


class EncodeError(ChaincodeError):
    """Raised when an asset or history payload cannot be encoded"""
    kind = "EncodeError"


class FunctionNotFoundError(ChaincodeError):
    """Raised when an invocation names an unregistered operation"""
    kind = "FunctionNotFound"

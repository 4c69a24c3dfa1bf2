"""
Error types raised by the application shell around the settlement engine.

The engine itself never raises for well-formed input; validation of store
records happens before transactions reach it.
"""


class GroupTabError(Exception):
    """Base exception for GroupTab errors."""
    pass


class InvalidTransactionError(GroupTabError, ValueError):
    """Raised when a transaction record cannot be turned into a Transaction."""

    def __init__(self, message, index=None):
        self.index = index
        if index is not None:
            message = f"Transaction {index}: {message}"
        super().__init__(message)


class StoreLoadError(GroupTabError):
    """Raised when the transaction store loader fails."""
    pass

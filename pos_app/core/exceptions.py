"""
Error taxonomy for the POS core.

ValidationError and NotFoundError are deterministic local failures and
always propagate to the caller. SyncError covers remote/auth failures and
is caught at the sync bridge boundary, where it becomes a SyncOutcome.
"""

from typing import Optional


class PosError(Exception):
    """Base class for all POS core errors."""


class ValidationError(PosError):
    """Input rejected before anything is persisted."""


class NotFoundError(PosError):
    """Operation addressed an order, product or cart line that does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class SyncError(PosError):
    """Network, auth or remote API failure during cloud sync."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RemoteNotFoundError(SyncError):
    """The remote store has no record matching the query."""

    def __init__(self, message: str = "Remote record not found"):
        super().__init__(message, status_code=404)

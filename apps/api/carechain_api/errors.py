"""Typed failures raised by the ledger, access control and workflow services.

Routers translate these into HTTP responses; services never retry them.
"""


class CareChainError(Exception):
    """Base exception for all service-level errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class AuthorizationError(CareChainError):
    """Requester is not the owner or granter.

    Also raised when the referenced record does not exist in grant, list and
    view flows, so that non-owners cannot probe which record ids exist.
    """


class NotFoundError(CareChainError):
    """Referenced row does not exist."""


class PermissionNotFoundError(NotFoundError):
    """Access permission does not exist."""


class ResourceNotFoundError(NotFoundError):
    """Prescription, claim or user does not exist."""


class ValidationError(CareChainError):
    """Request arguments are empty or outside the known vocabularies."""


class InvalidStateError(CareChainError):
    """Requested transition is not allowed from the current state."""


class LedgerError(CareChainError):
    """Ledger operation failed; no entry was appended."""


class LedgerValidationError(LedgerError, ValidationError):
    """Append arguments are invalid."""


class ChainForkError(LedgerError):
    """Another append claimed the same tip first."""


class StorageError(LedgerError):
    """Persistence layer rejected the write or is unavailable."""

class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class EmptyReason(ValidationError):
    """Raised when a "Not Available" mark comes without a reason."""


class InvalidTransition(DomainError):
    """Raised when a session lifecycle rule would be violated."""


class SessionNotActive(DomainError):
    """Raised when a mutation or finalize targets a session that is not active."""


class SessionNotFound(DomainError):
    """Raised when no session document exists for the requested date."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks the operator role for an action."""


class TransientStoreError(DomainError):
    """Infrastructure failure. Safe to retry: every core operation is idempotent."""


class RosterUnavailable(TransientStoreError):
    """Raised when the roster provider cannot be read."""


class BatchWriteFailed(TransientStoreError):
    """Raised when the finalize commit could not be written; nothing was persisted."""


class StoreUnavailable(TransientStoreError):
    """Raised when the session store cannot be read or written."""

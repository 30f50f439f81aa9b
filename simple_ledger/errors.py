"""Ledger error types and shared error messages."""


class LedgerError(ValueError):
    """Base class for ledger errors.

    Subclasses give routes a semantic category to map onto an HTTP status
    while staying compatible with plain ValueError handling.
    """

    status_code = 400


class ValidationError(LedgerError):
    """Invalid input, rejected before anything touches the database."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or [message]


class NotFoundError(LedgerError):
    """Requested row does not exist or is owned by another user."""

    status_code = 404


class ConflictError(LedgerError):
    """Uniqueness conflict, such as creating a second profile."""

    status_code = 409


class AuthError(LedgerError):
    """Identity provider rejected or could not complete a login."""

    status_code = 401


class BackendError(LedgerError):
    """A database operation failed and was rolled back."""

    status_code = 500


def entity_not_found(entity_id: int) -> str:
    return f"Entity {entity_id} not found"


def product_not_found(product_id: int) -> str:
    return f"Product {product_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    return f"Transaction {transaction_id} not found"


def unknown_transaction_type(value) -> str:
    return f"Unknown transaction type {value!r} (expected 'sale' or 'purchase')"

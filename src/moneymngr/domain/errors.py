"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidAmount(ValidationError):
    """Amount is missing, non-numeric or not positive. Blocks a commit."""


class ExtractionFailure(DomainError):
    """The extraction oracle failed: transport, timeout or malformed response."""


class DuplicateCommit(ConflictError):
    """A transaction with the same commit key has already been committed."""

    def __init__(self, commit_key: str):
        super().__init__(f"Transaction with commit key '{commit_key}' was already committed")
        self.commit_key = commit_key


class DanglingAccountReference(NotFoundError):
    """A transaction leg points at an account that no longer exists.

    Reported, never raised out of a commit: the leg's balance mutation is
    skipped and the transaction is still recorded.
    """

    def __init__(self, account_id: str, transaction_id: Optional[str] = None):
        super().__init__(account_not_found(account_id))
        self.account_id = account_id
        self.transaction_id = transaction_id


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def invalid_status_transition(transaction_id: str, current: str, target: str) -> str:
    """Return message for a forbidden status change."""
    return f"Cannot move transaction {transaction_id} from {current} to {target}"

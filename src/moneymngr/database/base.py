"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from moneymngr.domain.entities import (
    Account,
    AccountGroup,
    AccountType,
    Category,
    CategoryKind,
    Transaction,
    TransactionKind,
    TransactionStatus,
)

# Entity collections, in restore order
COLLECTIONS = ("account_types", "account_groups", "accounts", "categories", "transactions")


class Database(ABC):
    """Abstract database interface for moneymngr.

    Every write commits immediately unless it runs inside ``unit_of_work()``,
    in which case all writes of the block commit or roll back together.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group writes into one atomic storage transaction."""
        pass

    # Account type and group operations
    @abstractmethod
    def create_account_type(self, owner_id: str, name: str, icon: str, is_liability: bool) -> str:
        """Create an account type. Returns account type ID."""
        pass

    @abstractmethod
    def get_account_type(self, type_id: str) -> Optional[AccountType]:
        """Get account type by ID."""
        pass

    @abstractmethod
    def list_account_types(self, owner_id: Optional[str] = None) -> list[AccountType]:
        """List account types."""
        pass

    @abstractmethod
    def create_account_group(self, owner_id: str, name: str, sort_order: int = 0) -> str:
        """Create an account group. Returns group ID."""
        pass

    @abstractmethod
    def list_account_groups(self, owner_id: Optional[str] = None) -> list[AccountGroup]:
        """List account groups."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        owner_id: str,
        name: str,
        balance: Decimal = Decimal("0"),
        threshold: Decimal = Decimal("0"),
        type_id: Optional[str] = None,
        group_id: Optional[str] = None,
        number_suffix: Optional[str] = None,
        color: str = "#7c3aed",
        icon: str = "🏦",
        sort_order: int = 0,
    ) -> str:
        """Create a new account with ``balance`` as its opening balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, owner_id: Optional[str] = None) -> list[Account]:
        """List accounts ordered by sort order, then name."""
        pass

    @abstractmethod
    def adjust_account_balance(self, account_id: str, delta: Decimal) -> bool:
        """Add ``delta`` to an account balance. Returns False if the account is missing."""
        pass

    @abstractmethod
    def set_account_balance(self, account_id: str, balance: Decimal) -> None:
        """Overwrite an account balance."""
        pass

    @abstractmethod
    def delete_account(self, account_id: str) -> None:
        """Delete an account. Transactions referencing it are kept."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        owner_id: str,
        name: str,
        kind: CategoryKind,
        icon: str,
        color: str,
        sort_order: int,
        parent_id: Optional[str] = None,
    ) -> str:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(
        self, owner_id: Optional[str] = None, kind: Optional[CategoryKind] = None
    ) -> list[Category]:
        """List categories ordered by sort order, then name."""
        pass

    @abstractmethod
    def get_max_category_sort_order(self, owner_id: Optional[str] = None) -> Optional[int]:
        """Highest category sort order, or None when there are no categories."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transaction(self, transaction: Transaction) -> None:
        """Persist a fully populated transaction (id and timestamps set)."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_commit_key(self, commit_key: str) -> Optional[Transaction]:
        """Get transaction by its idempotency key."""
        pass

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> None:
        """Overwrite the stored fields of an existing transaction."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        owner_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[str] = None,
        account_id: Optional[str] = None,
        status: Optional[TransactionStatus] = None,
        kind: Optional[TransactionKind] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            owner_id: Optional owner filter
            start_date: Optional inclusive lower bound on the transaction date
            end_date: Optional inclusive upper bound on the transaction date
            category_id: Optional category ID filter
            account_id: Optional account filter (matches either leg)
            status: Optional status filter
            kind: Optional kind filter
        """
        pass

    # Bulk operations
    @abstractmethod
    def bulk_insert(self, collection: str, entities: Sequence[object]) -> int:
        """Insert domain entities into a collection as-is. Returns count inserted."""
        pass

    @abstractmethod
    def clear(self, collection: str) -> None:
        """Delete every record in a collection."""
        pass

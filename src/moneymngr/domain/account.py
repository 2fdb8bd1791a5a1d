"""Account domain service."""

from decimal import Decimal
from typing import Optional

from moneymngr.database.base import Database
from moneymngr.domain.entities import Account as AccountEntity
from moneymngr.domain.errors import ConflictError, NotFoundError, ValidationError, account_not_found


class AccountService:
    """Service for managing accounts.

    Balances are never written here; only the ledger moves them.
    """

    def __init__(self, db: Database, owner_id: str = "local"):
        """Initialize account service.

        Args:
            db: Database instance
            owner_id: Owner of the accounts handled by this service
        """
        self.db = db
        self.owner_id = owner_id

    def create_account(
        self,
        name: str,
        balance: Decimal = Decimal("0"),
        threshold: Decimal = Decimal("0"),
        type_id: Optional[str] = None,
        group_id: Optional[str] = None,
        number_suffix: Optional[str] = None,
        color: str = "#7c3aed",
        icon: str = "🏦",
    ) -> str:
        """Create a new account.

        Args:
            name: Account name
            balance: Opening balance
            threshold: Safety threshold below which the account is flagged low
            type_id: Optional account type ID
            group_id: Optional account group ID
            number_suffix: Optional masked account number digits (e.g. "1234")
            color: Display color
            icon: Display icon

        Returns:
            Account ID

        Raises:
            ConflictError: If account name already exists
            ValidationError: If the number suffix is not made of digits
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name is required")

        # Check if account with same name exists
        accounts = self.db.list_accounts(owner_id=self.owner_id)
        for acc in accounts:
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        if number_suffix is not None and not number_suffix.isdigit():
            raise ValidationError(f"Account number suffix must be digits, got '{number_suffix}'")

        if type_id is not None and self.db.get_account_type(type_id) is None:
            raise NotFoundError(f"Account type {type_id} not found")

        return self.db.create_account(
            owner_id=self.owner_id,
            name=name,
            balance=balance,
            threshold=threshold,
            type_id=type_id,
            group_id=group_id,
            number_suffix=number_suffix,
            color=color,
            icon=icon,
            sort_order=len(accounts),
        )

    def get_account(self, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: str) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts(owner_id=self.owner_id)

    def find_by_suffix(self, suffix: str) -> Optional[AccountEntity]:
        """Find the account whose masked number ends with ``suffix``."""
        for acc in self.list_accounts():
            if acc.number_suffix and (
                acc.number_suffix.endswith(suffix) or suffix.endswith(acc.number_suffix)
            ):
                return acc
        return None

    def low_balance_accounts(self) -> list[AccountEntity]:
        """Accounts whose balance is below their safety threshold."""
        return [acc for acc in self.list_accounts() if acc.is_low]

    def net_worth(self) -> Decimal:
        """Sum of balances, with liability account types subtracted."""
        liability_type_ids = {
            t.id for t in self.db.list_account_types(owner_id=self.owner_id) if t.is_liability
        }
        total = Decimal("0")
        for acc in self.list_accounts():
            if acc.type_id in liability_type_ids:
                total -= acc.balance
            else:
                total += acc.balance
        return total

    def delete_account(self, account_id: str) -> None:
        """Delete an account.

        Transactions that reference the account are kept; their legs on this
        account become dangling and are skipped by the ledger.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
        """
        self.require_account(account_id)
        self.db.delete_account(account_id)

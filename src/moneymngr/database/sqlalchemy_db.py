"""Generic SQLAlchemy database implementation."""

from contextlib import contextmanager
from datetime import datetime, UTC
from decimal import Decimal
from typing import Iterator, Optional, Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from moneymngr.database.base import COLLECTIONS, Database
from moneymngr.database.models import (
    Account,
    AccountGroup,
    AccountType,
    Category,
    Transaction,
    create_session_factory,
)
from moneymngr.database.mappers import (
    account_group_to_domain,
    account_to_domain,
    account_type_to_domain,
    category_to_domain,
    to_row_values,
    transaction_to_domain,
)
from moneymngr.domain.entities import (
    Account as DomainAccount,
    AccountGroup as DomainAccountGroup,
    AccountType as DomainAccountType,
    Category as DomainCategory,
    CategoryKind,
    Transaction as DomainTransaction,
    TransactionKind,
    TransactionStatus,
)
from moneymngr.domain.errors import NotFoundError, account_not_found, transaction_not_found
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

_COLLECTION_MODELS = {
    "account_types": AccountType,
    "account_groups": AccountGroup,
    "accounts": Account,
    "categories": Category,
    "transactions": Transaction,
}


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None
        self._uow_depth = 0

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _commit(self) -> None:
        """Commit now, or only flush when inside a unit of work."""
        session = self._get_session()
        if self._uow_depth > 0:
            session.flush()
            return
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        """Group writes into one atomic storage transaction.

        Nested blocks join the outermost one.
        """
        session = self._get_session()
        self._uow_depth += 1
        try:
            yield
        except Exception:
            self._uow_depth -= 1
            if self._uow_depth == 0:
                session.rollback()
                log.debug("unit_of_work_rolled_back")
            raise
        self._uow_depth -= 1
        if self._uow_depth == 0:
            session.commit()

    # Account type and group operations
    def create_account_type(self, owner_id: str, name: str, icon: str, is_liability: bool) -> str:
        """Create an account type. Returns account type ID."""
        session = self._get_session()
        account_type = AccountType(owner_id=owner_id, name=name, icon=icon, is_liability=is_liability)
        session.add(account_type)
        self._commit()
        return account_type.id

    def get_account_type(self, type_id: str) -> Optional[DomainAccountType]:
        """Get account type by ID."""
        session = self._get_session()
        account_type = session.query(AccountType).filter(AccountType.id == type_id).first()
        if account_type is None:
            return None
        return account_type_to_domain(account_type)

    def list_account_types(self, owner_id: Optional[str] = None) -> list[DomainAccountType]:
        """List account types."""
        session = self._get_session()
        query = session.query(AccountType)
        if owner_id is not None:
            query = query.filter(AccountType.owner_id == owner_id)
        return [account_type_to_domain(t) for t in query.order_by(AccountType.name).all()]

    def create_account_group(self, owner_id: str, name: str, sort_order: int = 0) -> str:
        """Create an account group. Returns group ID."""
        session = self._get_session()
        group = AccountGroup(owner_id=owner_id, name=name, sort_order=sort_order)
        session.add(group)
        self._commit()
        return group.id

    def list_account_groups(self, owner_id: Optional[str] = None) -> list[DomainAccountGroup]:
        """List account groups."""
        session = self._get_session()
        query = session.query(AccountGroup)
        if owner_id is not None:
            query = query.filter(AccountGroup.owner_id == owner_id)
        groups = query.order_by(AccountGroup.sort_order, AccountGroup.name).all()
        return [account_group_to_domain(g) for g in groups]

    # Account operations
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
        """Create a new account. Returns account ID."""
        session = self._get_session()
        account = Account(
            owner_id=owner_id,
            name=name,
            balance=balance,
            opening_balance=balance,
            threshold=threshold,
            type_id=type_id,
            group_id=group_id,
            number_suffix=number_suffix,
            color=color,
            icon=icon,
            sort_order=sort_order,
        )
        session.add(account)
        self._commit()
        return account.id

    def get_account(self, account_id: str) -> Optional[DomainAccount]:
        """Get account by ID."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            return None
        return account_to_domain(account)

    def list_accounts(self, owner_id: Optional[str] = None) -> list[DomainAccount]:
        """List accounts."""
        session = self._get_session()
        query = session.query(Account)
        if owner_id is not None:
            query = query.filter(Account.owner_id == owner_id)
        accounts = query.order_by(Account.sort_order, Account.name).all()
        return [account_to_domain(acc) for acc in accounts]

    def adjust_account_balance(self, account_id: str, delta: Decimal) -> bool:
        """Add ``delta`` to an account balance. Returns False if the account is missing."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            return False
        account.balance = Decimal(str(account.balance)) + delta
        self._commit()
        return True

    def set_account_balance(self, account_id: str, balance: Decimal) -> None:
        """Overwrite an account balance."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        account.balance = balance
        self._commit()

    def delete_account(self, account_id: str) -> None:
        """Delete an account. Transactions referencing it are kept."""
        session = self._get_session()
        account = session.query(Account).filter(Account.id == account_id).first()
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        session.delete(account)
        self._commit()

    # Category operations
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
        session = self._get_session()
        category = Category(
            owner_id=owner_id,
            name=name,
            kind=CategoryKind(kind).value,
            icon=icon,
            color=color,
            sort_order=sort_order,
            parent_id=parent_id,
        )
        session.add(category)
        self._commit()
        return category.id

    def get_category(self, category_id: str) -> Optional[DomainCategory]:
        """Get category by ID."""
        session = self._get_session()
        cat = session.query(Category).filter(Category.id == category_id).first()
        if cat is None:
            return None
        return category_to_domain(cat)

    def list_categories(
        self, owner_id: Optional[str] = None, kind: Optional[CategoryKind] = None
    ) -> list[DomainCategory]:
        """List categories ordered by sort order, then name."""
        session = self._get_session()
        query = session.query(Category)
        if owner_id is not None:
            query = query.filter(Category.owner_id == owner_id)
        if kind is not None:
            query = query.filter(Category.kind == CategoryKind(kind).value)
        categories = query.order_by(Category.sort_order, Category.name).all()
        return [category_to_domain(cat) for cat in categories]

    def get_max_category_sort_order(self, owner_id: Optional[str] = None) -> Optional[int]:
        """Highest category sort order, or None when there are no categories."""
        session = self._get_session()
        query = session.query(func.max(Category.sort_order))
        if owner_id is not None:
            query = query.filter(Category.owner_id == owner_id)
        return query.scalar()

    # Transaction operations
    def insert_transaction(self, transaction: DomainTransaction) -> None:
        """Persist a fully populated transaction."""
        session = self._get_session()
        session.add(Transaction(**to_row_values(transaction)))
        self._commit()

    def get_transaction(self, transaction_id: str) -> Optional[DomainTransaction]:
        """Get transaction by ID."""
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if txn is None:
            return None
        return transaction_to_domain(txn)

    def get_transaction_by_commit_key(self, commit_key: str) -> Optional[DomainTransaction]:
        """Get transaction by its idempotency key."""
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.commit_key == commit_key).first()
        if txn is None:
            return None
        return transaction_to_domain(txn)

    def update_transaction(self, transaction: DomainTransaction) -> None:
        """Overwrite the stored fields of an existing transaction."""
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.id == transaction.id).first()
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction.id))

        values = to_row_values(transaction)
        values.pop("id")
        values.pop("created_at")
        values["updated_at"] = datetime.now(UTC)
        for column, value in values.items():
            setattr(txn, column, value)
        self._commit()

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction."""
        session = self._get_session()
        txn = session.query(Transaction).filter(Transaction.id == transaction_id).first()
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        session.delete(txn)
        self._commit()

    def list_transactions(
        self,
        owner_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[str] = None,
        account_id: Optional[str] = None,
        status: Optional[TransactionStatus] = None,
        kind: Optional[TransactionKind] = None,
    ) -> list[DomainTransaction]:
        """List transactions with optional filters."""
        session = self._get_session()
        query = session.query(Transaction)

        if owner_id is not None:
            query = query.filter(Transaction.owner_id == owner_id)
        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)
        if category_id is not None:
            query = query.filter(Transaction.category_id == category_id)
        if account_id is not None:
            query = query.filter(
                or_(Transaction.from_account_id == account_id, Transaction.to_account_id == account_id)
            )
        if status is not None:
            query = query.filter(Transaction.status == TransactionStatus(status).value)
        if kind is not None:
            query = query.filter(Transaction.kind == TransactionKind(kind).value)

        transactions = query.order_by(Transaction.date.desc(), Transaction.created_at.desc()).all()
        return [transaction_to_domain(txn) for txn in transactions]

    # Bulk operations
    def _model_for(self, collection: str):
        if collection not in _COLLECTION_MODELS:
            raise ValueError(
                f"Unknown collection '{collection}'. Supported: {', '.join(COLLECTIONS)}"
            )
        return _COLLECTION_MODELS[collection]

    def bulk_insert(self, collection: str, entities: Sequence[object]) -> int:
        """Insert domain entities into a collection as-is. Returns count inserted."""
        model = self._model_for(collection)
        session = self._get_session()
        session.add_all([model(**to_row_values(entity)) for entity in entities])
        self._commit()
        return len(entities)

    def clear(self, collection: str) -> None:
        """Delete every record in a collection."""
        model = self._model_for(collection)
        session = self._get_session()
        session.query(model).delete(synchronize_session=False)
        self._commit()
        # Deleted rows may still sit in the identity map
        session.expunge_all()

"""Domain model entities for moneymngr.

These are pure data classes representing business concepts, independent of
database schema. Enumerations are closed: values coming from outside the
process (the extraction oracle, the CLI) are validated against them at the
boundary.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class TransactionKind(str, Enum):
    """Direction of a transaction relative to the user's accounts."""

    EXPENSE = "EXPENSE"
    INCOME = "INCOME"
    TRANSFER = "TRANSFER"


class TransactionStatus(str, Enum):
    """Lifecycle status of a persisted transaction."""

    CONFIRMED = "CONFIRMED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"


class TransactionSource(str, Enum):
    """Where a transaction's amount and category came from."""

    MANUAL = "MANUAL"
    IMPORTED = "IMPORTED"
    MAGIC = "MAGIC"


class CategoryKind(str, Enum):
    """Categories are never typed TRANSFER."""

    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class DraftProvenance(str, Enum):
    """Which parser produced a draft."""

    HEURISTIC = "HEURISTIC"
    ORACLE = "ORACLE"


@dataclass(frozen=True)
class AccountType:
    """Account type domain entity (Bank, Cash, Credit Card, ...)."""

    id: str
    owner_id: str
    name: str
    icon: str
    is_liability: bool
    created_at: datetime


@dataclass(frozen=True)
class AccountGroup:
    """Account group domain entity."""

    id: str
    owner_id: str
    name: str
    sort_order: int
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Account domain entity.

    ``balance`` is maintained incrementally by the ledger. ``opening_balance``
    is the balance the account was created with and is the starting point for
    reconciliation.
    """

    id: str
    owner_id: str
    name: str
    type_id: Optional[str]
    group_id: Optional[str]
    balance: Decimal
    opening_balance: Decimal
    threshold: Decimal
    number_suffix: Optional[str]
    color: str
    icon: str
    sort_order: int
    created_at: datetime
    updated_at: datetime

    @property
    def is_low(self) -> bool:
        """True when the balance has dropped below the safety threshold."""
        return self.balance < self.threshold

    @property
    def spendable(self) -> Decimal:
        """Amount that can be spent before hitting the threshold."""
        return self.balance - self.threshold


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: str
    owner_id: str
    name: str
    kind: CategoryKind
    icon: str
    color: str
    sort_order: int
    parent_id: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    A transfer is one record carrying both legs: ``from_account_id`` is the
    source and ``to_account_id`` the destination.
    """

    amount: Decimal
    kind: TransactionKind
    id: Optional[str] = None
    owner_id: Optional[str] = None
    date: Optional[datetime] = None
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    category_id: Optional[str] = None
    description: str = ""
    status: TransactionStatus = TransactionStatus.CONFIRMED
    source: TransactionSource = TransactionSource.MANUAL
    currency: Optional[str] = None
    commit_key: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryMatch:
    """An existing category satisfied the hint."""

    category_id: str


@dataclass(frozen=True)
class CategorySuggestion:
    """No category matched; the hint is proposed as a new category."""

    name: str
    kind: CategoryKind


CategoryResolution = Union[CategoryMatch, CategorySuggestion]


@dataclass(frozen=True)
class ParsedDraft:
    """In-memory candidate transaction produced by parsing. Never persisted."""

    amount: Optional[Decimal]
    kind: TransactionKind
    institution: str
    confidence: int
    provenance: DraftProvenance
    merchant: Optional[str] = None
    account_suffix: Optional[str] = None
    category_hint: Optional[str] = None
    resolution: Optional[CategoryResolution] = None

    @property
    def description(self) -> str:
        """Description used when the draft is committed."""
        return f"Magic: {self.institution} {self.merchant or ''}".strip()


@dataclass(frozen=True)
class BalanceDrift:
    """Difference between a stored balance and the one implied by the log."""

    account_id: str
    recorded: Decimal
    expected: Decimal

    @property
    def delta(self) -> Decimal:
        return self.expected - self.recorded

"""Default reference data for a fresh ledger."""

from dataclasses import dataclass, field
from decimal import Decimal

from moneymngr.database.base import Database
from moneymngr.domain.account import AccountService
from moneymngr.domain.category import CategoryService
from moneymngr.domain.entities import CategoryKind

# (name, icon, is_liability)
DEFAULT_ACCOUNT_TYPES = [
    ("Bank", "🏦", False),
    ("Cash", "💵", False),
    ("Wallet", "👛", False),
    ("Credit Card", "💳", True),
]

DEFAULT_GROUP = "Primary"

# (name, kind, icon, color)
DEFAULT_CATEGORIES = [
    ("Food", CategoryKind.EXPENSE, "🍔", "#ef4444"),
    ("Transport", CategoryKind.EXPENSE, "🚗", "#f59e0b"),
    ("Salary", CategoryKind.INCOME, "💰", "#10b981"),
]

DEFAULT_ACCOUNT_NAME = "Main Bank"
DEFAULT_ACCOUNT_BALANCE = Decimal("5000")
DEFAULT_ACCOUNT_THRESHOLD = Decimal("500")


@dataclass
class SeedResult:
    """What ``seed_defaults`` created."""

    account_types: list[str] = field(default_factory=list)
    groups: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    accounts: list[str] = field(default_factory=list)

    @property
    def created_anything(self) -> bool:
        return bool(self.account_types or self.groups or self.categories or self.accounts)


def seed_defaults(db: Database, owner_id: str = "local") -> SeedResult:
    """Create default account types, group, categories and a main account.

    Each collection is only seeded when it is empty for the owner, so running
    this twice is harmless.
    """
    result = SeedResult()
    with db.unit_of_work():
        types = db.list_account_types(owner_id=owner_id)
        if not types:
            for name, icon, is_liability in DEFAULT_ACCOUNT_TYPES:
                result.account_types.append(
                    db.create_account_type(owner_id=owner_id, name=name, icon=icon, is_liability=is_liability)
                )
            types = db.list_account_types(owner_id=owner_id)

        groups = db.list_account_groups(owner_id=owner_id)
        if not groups:
            result.groups.append(db.create_account_group(owner_id=owner_id, name=DEFAULT_GROUP))
            groups = db.list_account_groups(owner_id=owner_id)

        categories = CategoryService(db, owner_id=owner_id)
        if not categories.list_categories():
            for name, kind, icon, color in DEFAULT_CATEGORIES:
                result.categories.append(categories.create_category(name=name, kind=kind, icon=icon, color=color))

        accounts = AccountService(db, owner_id=owner_id)
        if not accounts.list_accounts():
            bank_type = next((t for t in types if t.name == "Bank"), None)
            result.accounts.append(
                accounts.create_account(
                    name=DEFAULT_ACCOUNT_NAME,
                    balance=DEFAULT_ACCOUNT_BALANCE,
                    threshold=DEFAULT_ACCOUNT_THRESHOLD,
                    type_id=bank_type.id if bank_type else None,
                    group_id=groups[0].id if groups else None,
                )
            )
    return result

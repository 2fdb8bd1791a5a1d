"""Mapper functions to convert between domain models and SQLAlchemy models.

Enumerations are stored as their string values and restored to the closed
domain enums here.
"""

from dataclasses import fields
from decimal import Decimal
from enum import Enum

from moneymngr.domain import entities as domain
from moneymngr.database.models import (
    Account as ORMAccount,
    AccountGroup as ORMAccountGroup,
    AccountType as ORMAccountType,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def account_type_to_domain(orm_type: ORMAccountType) -> domain.AccountType:
    """Convert SQLAlchemy AccountType model to domain AccountType entity."""
    return domain.AccountType(
        id=orm_type.id,
        owner_id=orm_type.owner_id,
        name=orm_type.name,
        icon=orm_type.icon,
        is_liability=orm_type.is_liability,
        created_at=orm_type.created_at,
    )


def account_group_to_domain(orm_group: ORMAccountGroup) -> domain.AccountGroup:
    """Convert SQLAlchemy AccountGroup model to domain AccountGroup entity."""
    return domain.AccountGroup(
        id=orm_group.id,
        owner_id=orm_group.owner_id,
        name=orm_group.name,
        sort_order=orm_group.sort_order,
        created_at=orm_group.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        type_id=orm_account.type_id,
        group_id=orm_account.group_id,
        balance=_decimal(orm_account.balance),
        opening_balance=_decimal(orm_account.opening_balance),
        threshold=_decimal(orm_account.threshold),
        number_suffix=orm_account.number_suffix,
        color=orm_account.color,
        icon=orm_account.icon,
        sort_order=orm_account.sort_order,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        kind=domain.CategoryKind(orm_category.kind),
        icon=orm_category.icon,
        color=orm_category.color,
        sort_order=orm_category.sort_order,
        parent_id=orm_category.parent_id,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        date=orm_transaction.date,
        amount=_decimal(orm_transaction.amount),
        currency=orm_transaction.currency,
        kind=domain.TransactionKind(orm_transaction.kind),
        from_account_id=orm_transaction.from_account_id,
        to_account_id=orm_transaction.to_account_id,
        category_id=orm_transaction.category_id,
        description=orm_transaction.description,
        status=domain.TransactionStatus(orm_transaction.status),
        source=domain.TransactionSource(orm_transaction.source),
        commit_key=orm_transaction.commit_key,
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
    )


def to_row_values(entity) -> dict:
    """Column values for a domain entity, with enums flattened to strings."""
    values = {}
    for field in fields(entity):
        value = getattr(entity, field.name)
        values[field.name] = value.value if isinstance(value, Enum) else value
    return values

"""SQLAlchemy models for moneymngr database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    DateTime,
    Numeric,
    Boolean,
    Integer,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class AccountType(Base):
    """Account type model."""

    __tablename__ = "account_types"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=False, default="🏦")
    is_liability = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class AccountGroup(Base):
    """Account group model."""

    __tablename__ = "account_groups"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_now, nullable=False)


class Account(Base):
    """Account model.

    Type and group references are plain ids: records are keyed by id and
    references may go stale without blocking writes.
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    type_id = Column(String(36), nullable=True, index=True)
    group_id = Column(String(36), nullable=True, index=True)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    opening_balance = Column(Numeric(14, 2), nullable=False, default=0)
    threshold = Column(Numeric(14, 2), nullable=False, default=0)
    number_suffix = Column(String, nullable=True)
    color = Column(String, nullable=False, default="#7c3aed")
    icon = Column(String, nullable=False, default="🏦")
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    kind = Column(String(16), nullable=False, index=True)
    icon = Column(String, nullable=False, default="🏷️")
    color = Column(String, nullable=False, default="#7c3aed")
    sort_order = Column(Integer, nullable=False, default=0)
    parent_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime, default=_now, nullable=False)


class Transaction(Base):
    """Transaction model.

    Account references are deliberately not foreign keys: a transaction
    outlives the accounts it mentions.
    """

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(8), nullable=False, default="INR")
    kind = Column(String(16), nullable=False, index=True)
    from_account_id = Column(String(36), nullable=True, index=True)
    to_account_id = Column(String(36), nullable=True, index=True)
    category_id = Column(String(36), nullable=True, index=True)
    description = Column(String, nullable=False, default="")
    status = Column(String(16), nullable=False, index=True)
    source = Column(String(16), nullable=False)
    commit_key = Column(String, nullable=True, unique=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)

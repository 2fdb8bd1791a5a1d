"""Tests for snapshot export and restore."""

from decimal import Decimal

import pytest

from moneymngr.database.base import COLLECTIONS
from moneymngr.domain.backup import BackupService
from moneymngr.domain.entities import Transaction, TransactionKind
from moneymngr.domain.errors import ValidationError
from moneymngr.domain.seed import seed_defaults


@pytest.fixture
def backup_service(temp_db):
    return BackupService(temp_db)


@pytest.fixture
def populated_db(temp_db, ledger_service):
    seed_defaults(temp_db)
    main = temp_db.list_accounts()[0]
    ledger_service.commit(Transaction(amount=Decimal("200"), kind=TransactionKind.EXPENSE, from_account_id=main.id))
    return temp_db


def test_export_has_every_collection(backup_service, populated_db):
    snapshot = backup_service.export_snapshot()

    assert set(snapshot) == set(COLLECTIONS)
    assert len(snapshot["account_types"]) == 4
    assert len(snapshot["categories"]) == 3
    assert len(snapshot["transactions"]) == 1
    assert snapshot["accounts"][0].balance == Decimal("4800")


def test_restore_replaces_contents(backup_service, populated_db, ledger_service):
    snapshot = backup_service.export_snapshot()
    main = populated_db.list_accounts()[0]
    ledger_service.commit(Transaction(amount=Decimal("50"), kind=TransactionKind.EXPENSE, from_account_id=main.id))

    counts = backup_service.restore_snapshot(snapshot)

    assert counts["transactions"] == 1
    assert len(populated_db.list_transactions()) == 1
    assert populated_db.get_account(main.id).balance == Decimal("4800")
    assert len(populated_db.list_account_types()) == 4


def test_restore_leaves_missing_collections(backup_service, populated_db):
    backup_service.restore_snapshot({"transactions": []})

    assert populated_db.list_transactions() == []
    assert len(populated_db.list_accounts()) == 1


def test_restore_rejects_unknown_collection(backup_service, populated_db):
    with pytest.raises(ValidationError):
        backup_service.restore_snapshot({"budgets": []})
    assert len(populated_db.list_transactions()) == 1


def test_seed_defaults_once(temp_db):
    first = seed_defaults(temp_db)
    second = seed_defaults(temp_db)

    assert first.created_anything
    assert not second.created_anything
    account = temp_db.list_accounts()[0]
    assert account.name == "Main Bank"
    assert account.balance == Decimal("5000")
    assert account.threshold == Decimal("500")
    liabilities = [t.name for t in temp_db.list_account_types() if t.is_liability]
    assert liabilities == ["Credit Card"]

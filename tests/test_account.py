"""Tests for accounts: service and commands."""

from decimal import Decimal

import pytest

from moneymngr.cli.main import cli
from moneymngr.domain.errors import ConflictError, NotFoundError, ValidationError
from moneymngr.domain.seed import seed_defaults


class TestAccountService:
    """Tests for AccountService."""

    def test_create_account_sets_opening_balance(self, account_service):
        account_id = account_service.create_account(name="HDFC Savings", balance=Decimal("5000"))
        account = account_service.get_account(account_id)

        assert account.name == "HDFC Savings"
        assert account.balance == Decimal("5000")
        assert account.opening_balance == Decimal("5000")
        assert account.owner_id == "local"

    def test_duplicate_name_conflicts(self, account_service, sample_account):
        with pytest.raises(ConflictError):
            account_service.create_account(name="Main Bank")

    def test_blank_name_rejected(self, account_service):
        with pytest.raises(ValidationError):
            account_service.create_account(name="  ")

    def test_suffix_must_be_digits(self, account_service):
        with pytest.raises(ValidationError):
            account_service.create_account(name="Card", number_suffix="12a4")

    def test_unknown_type_rejected(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.create_account(name="Card", type_id="no-such-type")

    def test_find_by_suffix(self, account_service, sample_account, second_account):
        assert account_service.find_by_suffix("1234").id == sample_account.id
        assert account_service.find_by_suffix("9999") is None

    def test_low_balance_and_spendable(self, account_service):
        account_id = account_service.create_account(
            name="Low", balance=Decimal("400"), threshold=Decimal("500")
        )
        account = account_service.get_account(account_id)

        assert account.is_low
        assert account.spendable == Decimal("-100")
        assert [a.id for a in account_service.low_balance_accounts()] == [account_id]

    def test_net_worth_subtracts_liabilities(self, temp_db, account_service):
        seed_defaults(temp_db)
        card_type = next(t for t in temp_db.list_account_types() if t.is_liability)
        account_service.create_account(name="Card", balance=Decimal("1200"), type_id=card_type.id)

        # Main Bank 5000 minus card 1200
        assert account_service.net_worth() == Decimal("3800")

    def test_delete_keeps_transactions(self, account_service, ledger_service, temp_db, sample_account):
        from moneymngr.domain.entities import Transaction, TransactionKind

        txn = ledger_service.commit(
            Transaction(amount=Decimal("10"), kind=TransactionKind.EXPENSE, from_account_id=sample_account.id)
        )
        account_service.delete_account(sample_account.id)

        assert account_service.get_account(sample_account.id) is None
        assert temp_db.get_transaction(txn.id) is not None

    def test_delete_missing_account(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.delete_account("missing")


def test_account_create_command(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "account", "create", "HDFC Savings", "--balance", "12,000", "--suffix", "1234"],
    )

    assert result.exit_code == 0
    assert "Created account 'HDFC Savings'" in result.output
    assert "ID:" in result.output


def test_account_create_duplicate(cli_runner, temp_db):
    result1 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "create", "Wallet"])
    assert result1.exit_code == 0

    result2 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "create", "Wallet"])

    assert result2.exit_code == 1
    assert "already exists" in result2.output.lower()


def test_account_create_unknown_type(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Card", "--type", "Credit Card"]
    )
    assert result.exit_code == 1
    assert "not found" in result.output


def test_account_list_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_list_flags_low_balance(cli_runner, temp_db, account_service):
    account_service.create_account(name="Savings", balance=Decimal("100"), threshold=Decimal("500"))

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "Savings" in result.output
    assert "LOW" in result.output
    assert "Net worth: 100.00" in result.output


def test_account_show(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "main bank"])

    assert result.exit_code == 0
    assert "Balance: 1,000.00" in result.output
    assert "Spendable: 500.00" in result.output


def test_account_show_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "Nope"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_account_delete(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "Main Bank"], input="y\n"
    )

    assert result.exit_code == 0
    assert "Deleted account 'Main Bank'" in result.output

"""End-to-end tests for the ledger and magic entry commands."""

import re
from decimal import Decimal

import pytest

from moneymngr.cli.main import cli

HDFC_TEXT = "HDFC Bank: Rs.1,250.00 debited from A/c XX1234"


def _invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def _balance(temp_db, name):
    # Drop the fixture's session so rows written by the CLI are re-read
    temp_db.disconnect()
    return next(a for a in temp_db.list_accounts() if a.name == name).balance


def _saved_id(output):
    found = re.search(r"Saved transaction (\S+)", output) or re.search(r"Created transaction (\S+)", output)
    assert found, output
    return found.group(1)


@pytest.fixture
def initialized(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "init")
    assert result.exit_code == 0
    return temp_db


def test_init_seeds_once(cli_runner, temp_db):
    first = _invoke(cli_runner, temp_db, "init")
    assert first.exit_code == 0
    assert "Created 4 account types." in first.output
    assert "Created 3 categories." in first.output

    second = _invoke(cli_runner, temp_db, "init")
    assert "already exists" in second.output


def test_add_expense_moves_balance(cli_runner, initialized):
    result = _invoke(
        cli_runner, initialized, "add", "--amount", "200", "--account", "Main Bank", "--category", "food"
    )

    assert result.exit_code == 0, result.output
    assert "Status: CONFIRMED" in result.output
    assert _balance(initialized, "Main Bank") == Decimal("4800")


def test_add_transfer(cli_runner, initialized):
    _invoke(cli_runner, initialized, "account", "create", "Wallet", "--type", "Wallet")

    result = _invoke(
        cli_runner, initialized, "add", "--kind", "transfer", "--amount", "1000", "--account", "Main Bank", "--to", "Wallet"
    )

    assert result.exit_code == 0, result.output
    assert _balance(initialized, "Main Bank") == Decimal("4000")
    assert _balance(initialized, "Wallet") == Decimal("1000")


def test_add_transfer_needs_destination(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "add", "--kind", "transfer", "--amount", "10", "--account", "Main Bank")
    assert result.exit_code == 1
    assert "--to" in result.output


@pytest.mark.parametrize(
    "amount,message",
    [("abc", "Could not parse"), ("0", "must be positive"), ("0.004", "more than two decimal places")],
)
def test_add_invalid_amount(cli_runner, initialized, amount, message):
    result = _invoke(cli_runner, initialized, "add", "--amount", amount, "--account", "Main Bank")

    assert result.exit_code == 1
    assert message in result.output
    assert _balance(initialized, "Main Bank") == Decimal("5000")


def test_add_pending_then_confirm(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "add", "--amount", "300", "--account", "Main Bank", "--pending")
    txn_id = _saved_id(result.output)
    assert _balance(initialized, "Main Bank") == Decimal("5000")

    confirm = _invoke(cli_runner, initialized, "transaction", "confirm", txn_id[:8])

    assert confirm.exit_code == 0, confirm.output
    assert _balance(initialized, "Main Bank") == Decimal("4700")


def test_magic_local_parse_saves_pending(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "magic", HDFC_TEXT, "--yes")

    assert result.exit_code == 0, result.output
    assert "confidence 100" in result.output
    assert "(pending)" in result.output
    assert "Magic: HDFC" in result.output
    assert _balance(initialized, "Main Bank") == Decimal("5000")

    txn_id = _saved_id(result.output)
    _invoke(cli_runner, initialized, "transaction", "confirm", txn_id)
    assert _balance(initialized, "Main Bank") == Decimal("3750")


def test_magic_reads_stdin(cli_runner, initialized, recwarn):
    result = _invoke(cli_runner, initialized, "magic", "--yes", input=HDFC_TEXT)

    assert result.exit_code == 0, result.output
    assert "Saved transaction" in result.output
    assert not [w for w in recwarn if issubclass(w.category, DeprecationWarning) and "stream" in str(w.message)]


def test_magic_can_be_discarded(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "magic", HDFC_TEXT, input="n\n")

    assert result.exit_code == 0, result.output
    assert "Discarded." in result.output
    initialized.disconnect()
    assert initialized.list_transactions() == []


def test_magic_unparseable(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "magic", "lunch with friends", "--yes")

    assert result.exit_code == 1
    assert "Could not parse" in result.output


def test_magic_ai_needs_api_key(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "magic", "--ai", "paid 450 at swiggy")

    assert result.exit_code == 1
    assert "MONEYMNGR_GEMINI_API_KEY" in result.output


def test_magic_ai_confident_draft_auto_commits(cli_runner, initialized, oracle):
    result = _invoke(cli_runner, initialized, "magic", "--ai", "paid 450 at swiggy", obj={"oracle": oracle})

    assert result.exit_code == 0, result.output
    assert "press Ctrl-C to hold" in result.output
    assert "Saved transaction" in result.output
    assert "Magic: ICICI Swiggy" in result.output

    initialized.disconnect()
    txn = initialized.list_transactions()[0]
    food = next(c for c in initialized.list_categories() if c.name == "Food")
    assert txn.category_id == food.id


def test_magic_ai_failure_falls_back_to_local(cli_runner, initialized, failing_oracle):
    result = _invoke(cli_runner, initialized, "magic", "--ai", HDFC_TEXT, "--yes", obj={"oracle": failing_oracle})

    assert result.exit_code == 0, result.output
    assert "timed out" in result.output
    assert "Saved transaction" in result.output


def test_transaction_list_and_reject(cli_runner, initialized):
    added = _invoke(cli_runner, initialized, "add", "--amount", "99", "--account", "Main Bank", "--pending")
    txn_id = _saved_id(added.output)

    listed = _invoke(cli_runner, initialized, "transaction", "list", "--status", "pending")
    assert "Found 1 transaction(s)" in listed.output
    assert txn_id[:8] in listed.output

    rejected = _invoke(cli_runner, initialized, "transaction", "reject", txn_id)
    assert rejected.exit_code == 0
    again = _invoke(cli_runner, initialized, "transaction", "confirm", txn_id)
    assert again.exit_code == 1
    assert "Cannot move transaction" in again.output


def test_transaction_update_and_delete(cli_runner, initialized):
    added = _invoke(cli_runner, initialized, "add", "--amount", "100", "--account", "Main Bank")
    txn_id = _saved_id(added.output)

    updated = _invoke(cli_runner, initialized, "transaction", "update", txn_id, "--amount", "250")
    assert updated.exit_code == 0, updated.output
    assert _balance(initialized, "Main Bank") == Decimal("4750")

    deleted = _invoke(cli_runner, initialized, "transaction", "delete", txn_id, "--yes")
    assert deleted.exit_code == 0
    assert _balance(initialized, "Main Bank") == Decimal("5000")


def test_transaction_unknown_id(cli_runner, initialized):
    result = _invoke(cli_runner, initialized, "transaction", "confirm", "nope")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_reconcile(cli_runner, initialized):
    _invoke(cli_runner, initialized, "add", "--amount", "200", "--account", "Main Bank")
    clean = _invoke(cli_runner, initialized, "reconcile")
    assert "All balances match" in clean.output

    initialized.disconnect()
    main = initialized.list_accounts()[0]
    initialized.set_account_balance(main.id, Decimal("5000"))

    dry = _invoke(cli_runner, initialized, "reconcile", "--dry-run")
    assert "expected 4,800.00" in dry.output
    assert _balance(initialized, "Main Bank") == Decimal("5000")

    fixed = _invoke(cli_runner, initialized, "reconcile")
    assert "Corrected 1 account(s)." in fixed.output
    assert _balance(initialized, "Main Bank") == Decimal("4800")

"""Shared pytest fixtures for moneymngr tests."""

import os
import tempfile
from decimal import Decimal

import pytest

from moneymngr.config import get_settings
from moneymngr.database.factories import create_sqlite_database
from moneymngr.domain.account import AccountService
from moneymngr.domain.category import CategoryService
from moneymngr.domain.entities import CategoryKind
from moneymngr.domain.errors import ExtractionFailure
from moneymngr.domain.ledger import LedgerService
from moneymngr.oracle.adapter import ExtractionOracle
from moneymngr.oracle.base import ExtractionClient


class FakeExtractionClient(ExtractionClient):
    """In-memory extraction client.

    Returns ``response`` (or raises ``error``). When ``gate`` is set, each
    call waits for it, which keeps a request in flight.
    """

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.gate = None
        self.calls = []

    async def extract(self, text, schema):
        self.calls.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in list(os.environ):
        if name.startswith("MONEYMNGR_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("MONEYMNGR_COUNTDOWN_TICK_SECONDS", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def notifications():
    """Collects errors passed to service notifiers."""
    return []


@pytest.fixture
def ledger_service(temp_db, notifications):
    """Create a LedgerService whose notifications are collected."""
    return LedgerService(temp_db, notifier=notifications.append)


@pytest.fixture
def sample_account(account_service):
    """Bank account with balance 1000, threshold 500 and number suffix 1234."""
    account_id = account_service.create_account(
        name="Main Bank",
        balance=Decimal("1000"),
        threshold=Decimal("500"),
        number_suffix="1234",
    )
    return account_service.get_account(account_id)


@pytest.fixture
def second_account(account_service):
    """Wallet account with balance 300."""
    account_id = account_service.create_account(name="Wallet", balance=Decimal("300"))
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Create a few categories and return their IDs by name."""
    return {
        "Food & Dining": category_service.create_category("Food & Dining", CategoryKind.EXPENSE),
        "Transport": category_service.create_category("Transport", CategoryKind.EXPENSE),
        "Salary": category_service.create_category("Salary", CategoryKind.INCOME),
    }


@pytest.fixture
def fake_client():
    """Extraction client answering with a confident food expense."""
    return FakeExtractionClient(
        response={
            "amount": 450,
            "type": "EXPENSE",
            "bankName": "ICICI",
            "merchant": "Swiggy",
            "category": "food",
            "confidence": 85,
        }
    )


@pytest.fixture
def oracle(fake_client):
    """ExtractionOracle over the fake client."""
    return ExtractionOracle(fake_client)


@pytest.fixture
def failing_oracle():
    """ExtractionOracle whose transport always fails."""
    return ExtractionOracle(FakeExtractionClient(error=ExtractionFailure("timed out")))


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

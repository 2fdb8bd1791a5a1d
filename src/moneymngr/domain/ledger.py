"""Ledger domain service.

The single path by which transactions become durable and account balances
change. Balances are maintained incrementally; ``reconcile_balances`` can
recompute them from the transaction log and correct any drift.

Committing the same transaction twice applies its balance deltas twice.
Callers that may repeat a commit (double submit, retries) must attach a
``commit_key``; a repeated key is rejected with DuplicateCommit.
"""

import uuid
from dataclasses import replace
from datetime import datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from moneymngr.database.base import Database
from moneymngr.domain.entities import (
    BalanceDrift,
    Transaction,
    TransactionKind,
    TransactionStatus,
)
from moneymngr.domain.errors import (
    ConflictError,
    DanglingAccountReference,
    DomainError,
    DuplicateCommit,
    InvalidAmount,
    NotFoundError,
    ValidationError,
    invalid_status_transition,
    transaction_not_found,
)
from moneymngr.utils.amount_parser import require_positive
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

Notifier = Callable[[DomainError], None]


def balance_deltas(transaction: Transaction) -> list[tuple[str, Decimal]]:
    """Signed balance changes a transaction implies, one per leg.

    EXPENSE debits the source, INCOME credits the destination, TRANSFER does
    both from the same record.
    """
    amount = transaction.amount
    legs: list[tuple[str, Decimal]] = []
    if transaction.kind in (TransactionKind.EXPENSE, TransactionKind.TRANSFER):
        if transaction.from_account_id:
            legs.append((transaction.from_account_id, -amount))
    if transaction.kind in (TransactionKind.INCOME, TransactionKind.TRANSFER):
        if transaction.to_account_id:
            legs.append((transaction.to_account_id, amount))
    return legs


def validate_transaction(transaction: Transaction) -> Transaction:
    """Check amount and leg shape before anything is persisted.

    Returns:
        The transaction with its amount normalized to Decimal

    Raises:
        InvalidAmount: If the amount is missing, non-numeric, not positive or
            finer than a cent
        ValidationError: If the legs or category do not fit the kind
    """
    amount = transaction.amount
    if amount is not None and not isinstance(amount, Decimal):
        try:
            amount = Decimal(str(amount))
        except InvalidOperation:
            raise InvalidAmount(f"Amount '{transaction.amount}' is not a number")
    require_positive(amount)

    try:
        kind = TransactionKind(transaction.kind)
    except ValueError:
        raise ValidationError(f"Unknown transaction kind '{transaction.kind}'")

    source, destination = transaction.from_account_id, transaction.to_account_id
    if kind == TransactionKind.EXPENSE and (not source or destination):
        raise ValidationError("An expense needs a source account and no destination account")
    if kind == TransactionKind.INCOME and (not destination or source):
        raise ValidationError("An income needs a destination account and no source account")
    if kind == TransactionKind.TRANSFER:
        if not source or not destination:
            raise ValidationError("A transfer needs both a source and a destination account")
        if source == destination:
            raise ValidationError("A transfer needs two different accounts")
        if transaction.category_id is not None:
            raise ValidationError("Transfers cannot have a category")

    return replace(transaction, amount=amount, kind=kind)


class LedgerService:
    """Service applying transactions to the ledger."""

    def __init__(
        self,
        db: Database,
        owner_id: str = "local",
        currency: str = "INR",
        notifier: Optional[Notifier] = None,
    ):
        """Initialize ledger service.

        Args:
            db: Database instance
            owner_id: Owner assigned to transactions that carry none
            currency: Currency assigned to transactions that carry none
            notifier: Optional callback receiving non-fatal problems
                (dangling account references)
        """
        self.db = db
        self.owner_id = owner_id
        self.currency = currency
        self.notifier = notifier

    def _require_transaction(self, transaction_id: str) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def _apply(self, transaction: Transaction, sign: int = 1) -> list[str]:
        """Apply (or with sign=-1 reverse) balance deltas. Returns skipped account IDs."""
        skipped = []
        for account_id, delta in balance_deltas(transaction):
            if not self.db.adjust_account_balance(account_id, delta * sign):
                skipped.append(account_id)
        return skipped

    def _report_dangling(self, transaction: Transaction, skipped: list[str]) -> None:
        for account_id in skipped:
            log.warning(
                "dangling_account_reference",
                transaction_id=transaction.id,
                account_id=account_id,
            )
            if self.notifier is not None:
                self.notifier(DanglingAccountReference(account_id, transaction.id))

    def apply_balance_deltas(self, transaction: Transaction) -> list[str]:
        """Apply a transaction's balance deltas without recording anything.

        Not idempotent: calling this twice for the same transaction moves the
        balances twice. Ensuring a transaction is applied exactly once is the
        caller's responsibility.

        Returns:
            IDs of accounts that did not exist and were skipped
        """
        skipped = self._apply(transaction)
        self._report_dangling(transaction, skipped)
        return skipped

    def commit(self, transaction: Transaction) -> Transaction:
        """Persist a transaction and apply its balance deltas.

        Steps run in one unit of work: validate, assign id/timestamps, persist,
        then (for CONFIRMED transactions) adjust the referenced accounts. A
        missing account skips only that leg. PENDING transactions are stored
        without touching balances until ``confirm``.

        Args:
            transaction: Transaction to commit; id, owner, date and timestamps
                are filled in when absent

        Returns:
            The persisted transaction

        Raises:
            InvalidAmount: If the amount is not positive (nothing is persisted)
            ValidationError: If legs or category do not fit the kind, or the
                transaction is already REJECTED
            DuplicateCommit: If the commit key was already committed
        """
        transaction = validate_transaction(transaction)
        if transaction.status == TransactionStatus.REJECTED:
            raise ValidationError("Rejected transactions cannot be committed")

        if transaction.commit_key is not None:
            if self.db.get_transaction_by_commit_key(transaction.commit_key) is not None:
                raise DuplicateCommit(transaction.commit_key)

        now = datetime.now(UTC)
        transaction = replace(
            transaction,
            id=transaction.id or str(uuid.uuid4()),
            owner_id=transaction.owner_id or self.owner_id,
            date=transaction.date or now,
            currency=transaction.currency or self.currency,
            created_at=transaction.created_at or now,
            updated_at=now,
        )

        skipped: list[str] = []
        with self.db.unit_of_work():
            self.db.insert_transaction(transaction)
            if transaction.status == TransactionStatus.CONFIRMED:
                skipped = self._apply(transaction)

        log.info(
            "transaction_committed",
            transaction_id=transaction.id,
            kind=transaction.kind.value,
            amount=str(transaction.amount),
            status=transaction.status.value,
            source=transaction.source.value,
        )
        self._report_dangling(transaction, skipped)
        return transaction

    def confirm(self, transaction_id: str) -> Transaction:
        """Move a PENDING transaction to CONFIRMED and apply its balance deltas.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the transaction is not PENDING
        """
        txn = self._require_transaction(transaction_id)
        if txn.status != TransactionStatus.PENDING:
            raise ConflictError(
                invalid_status_transition(transaction_id, txn.status.value, TransactionStatus.CONFIRMED.value)
            )

        confirmed = replace(txn, status=TransactionStatus.CONFIRMED)
        with self.db.unit_of_work():
            self.db.update_transaction(confirmed)
            skipped = self._apply(confirmed)

        log.info("transaction_confirmed", transaction_id=transaction_id)
        self._report_dangling(confirmed, skipped)
        return self._require_transaction(transaction_id)

    def reject(self, transaction_id: str) -> Transaction:
        """Move a PENDING transaction to REJECTED. Balances are untouched.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the transaction is not PENDING
        """
        txn = self._require_transaction(transaction_id)
        if txn.status != TransactionStatus.PENDING:
            raise ConflictError(
                invalid_status_transition(transaction_id, txn.status.value, TransactionStatus.REJECTED.value)
            )

        self.db.update_transaction(replace(txn, status=TransactionStatus.REJECTED))
        log.info("transaction_rejected", transaction_id=transaction_id)
        return self._require_transaction(transaction_id)

    def revise(
        self,
        transaction_id: str,
        amount: Optional[Decimal] = None,
        category_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        """Edit amount, category or description of a transaction.

        For CONFIRMED transactions the old deltas are reversed and the new
        ones applied in the same unit of work.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the transaction is REJECTED
            InvalidAmount: If the new amount is not positive or finer than a cent
            ValidationError: If a category is set on a transfer
        """
        txn = self._require_transaction(transaction_id)
        if txn.status == TransactionStatus.REJECTED:
            raise ConflictError(f"Transaction {transaction_id} is rejected and cannot be changed")

        revised = txn
        if amount is not None:
            revised = replace(revised, amount=amount)
        if category_id is not None:
            revised = replace(revised, category_id=category_id)
        if description is not None:
            revised = replace(revised, description=description)
        revised = validate_transaction(revised)

        skipped: list[str] = []
        with self.db.unit_of_work():
            if txn.status == TransactionStatus.CONFIRMED:
                self._apply(txn, sign=-1)
            self.db.update_transaction(revised)
            if revised.status == TransactionStatus.CONFIRMED:
                skipped = self._apply(revised)

        log.info("transaction_revised", transaction_id=transaction_id)
        self._report_dangling(revised, skipped)
        return self._require_transaction(transaction_id)

    def delete(self, transaction_id: str) -> None:
        """Delete a transaction, reversing its deltas if it was CONFIRMED.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self._require_transaction(transaction_id)
        with self.db.unit_of_work():
            if txn.status == TransactionStatus.CONFIRMED:
                self._apply(txn, sign=-1)
            self.db.delete_transaction(transaction_id)
        log.info("transaction_deleted", transaction_id=transaction_id)

    def expected_balances(self) -> dict[str, Decimal]:
        """Balances implied by opening balances plus every CONFIRMED transaction."""
        expected = {acc.id: acc.opening_balance for acc in self.db.list_accounts(owner_id=self.owner_id)}
        confirmed = self.db.list_transactions(owner_id=self.owner_id, status=TransactionStatus.CONFIRMED)
        for txn in confirmed:
            for account_id, delta in balance_deltas(txn):
                if account_id in expected:
                    expected[account_id] += delta
        return expected

    def reconcile_balances(self, apply: bool = True) -> list[BalanceDrift]:
        """Recompute balances from the transaction log and correct drift.

        Args:
            apply: Write corrected balances; with False only report

        Returns:
            One BalanceDrift per account whose stored balance was wrong
        """
        expected = self.expected_balances()
        drifts = []
        for acc in self.db.list_accounts(owner_id=self.owner_id):
            if acc.balance != expected[acc.id]:
                drifts.append(BalanceDrift(account_id=acc.id, recorded=acc.balance, expected=expected[acc.id]))

        if apply and drifts:
            with self.db.unit_of_work():
                for drift in drifts:
                    self.db.set_account_balance(drift.account_id, drift.expected)
            for drift in drifts:
                log.warning(
                    "balance_drift_corrected",
                    account_id=drift.account_id,
                    recorded=str(drift.recorded),
                    expected=str(drift.expected),
                )
        return drifts

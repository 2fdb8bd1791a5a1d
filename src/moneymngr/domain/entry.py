"""Entry session: one interactive magic-entry flow.

Wires the parse orchestrator, the commit state machine and the ledger
together and collects the user-facing notifications they produce.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional

from moneymngr.domain.account import AccountService
from moneymngr.domain.category import CategoryService
from moneymngr.domain.commit import DEFAULT_COUNTDOWN_TICKS, CommitState, CommitStateMachine
from moneymngr.domain.entities import (
    CategoryMatch,
    CategorySuggestion,
    ParsedDraft,
    Transaction,
    TransactionKind,
    TransactionSource,
    TransactionStatus,
)
from moneymngr.domain.errors import ConflictError, DomainError, ValidationError
from moneymngr.domain.ledger import LedgerService
from moneymngr.domain.parsing import ParseOrchestrator
from moneymngr.oracle.adapter import ExtractionOracle
from moneymngr.utils.amount_parser import require_positive
from moneymngr.utils.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    """Transient message for the user."""

    level: str
    message: str
    error: Optional[DomainError] = None


class EntrySession:
    """A single magic-entry session.

    Only one draft is live at a time. Local parsing runs on every text
    update; the oracle only runs when ``request_oracle`` is called.
    """

    def __init__(
        self,
        ledger: LedgerService,
        accounts: AccountService,
        categories: CategoryService,
        oracle: Optional[ExtractionOracle] = None,
        default_account_id: Optional[str] = None,
        ticks: int = DEFAULT_COUNTDOWN_TICKS,
        tick_seconds: float = 1.0,
        commit_status: TransactionStatus = TransactionStatus.PENDING,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        """Initialize the session.

        Args:
            ledger: Ledger service used to commit drafts
            accounts: Account service used to pick the account for a draft
            categories: Category service used for category resolution
            oracle: Optional extraction oracle
            default_account_id: Account used when the draft names no known account
            ticks: Countdown length in ticks
            tick_seconds: Length of one countdown tick
            commit_status: Status given to committed drafts
            on_tick: Callback receiving the remaining countdown ticks
        """
        self.ledger = ledger
        self.accounts = accounts
        self.categories = categories
        self.default_account_id = default_account_id
        self.commit_status = commit_status
        self.text = ""
        self.notifications: list[Notification] = []

        if ledger.notifier is None:
            ledger.notifier = self.notify_error

        self.orchestrator = ParseOrchestrator(oracle=oracle, categories=categories, notifier=self.notify_error)
        self.machine = CommitStateMachine(
            committer=self._commit_draft,
            ticks=ticks,
            tick_seconds=tick_seconds,
            notifier=self.notify_error,
            on_tick=on_tick,
        )

    @property
    def state(self) -> CommitState:
        return self.machine.state

    @property
    def draft(self) -> Optional[ParsedDraft]:
        return self.machine.draft

    def notify(self, message: str, level: str = "info", error: Optional[DomainError] = None) -> None:
        self.notifications.append(Notification(level=level, message=message, error=error))

    def notify_error(self, error: DomainError) -> None:
        self.notify(str(error), level="error", error=error)

    def drain_notifications(self) -> list[Notification]:
        """Return and clear pending notifications."""
        pending, self.notifications = self.notifications, []
        return pending

    def update_text(self, text: str) -> Optional[ParsedDraft]:
        """Record new free text and parse it locally.

        Empty text resets the session. A successful parse replaces the live
        draft. Text that no longer parses discards the live draft and stops
        any countdown, so a draft for replaced text is never saved.
        """
        self.text = text or ""
        if not self.text.strip():
            self.reset()
            return None

        draft = self.orchestrator.parse_locally(self.text)
        if draft is None:
            if self.machine.draft is not None:
                log.info("draft_discarded", reason="text_changed", state=self.machine.state.value)
                self.reset()
            self.notify("No known bank format recognised; enter it manually or ask the AI parser")
            return None
        self.machine.load(draft)
        log.info("draft_loaded", provenance=draft.provenance.value, confidence=draft.confidence)
        return draft

    async def request_oracle(self) -> Optional[ParsedDraft]:
        """Parse the current text with the extraction oracle.

        Raises:
            ConflictError: If an oracle request is already in flight
        """
        if not self.text.strip():
            self.notify("Nothing to parse", level="warning")
            return None
        draft = await self.orchestrator.parse_with_oracle(self.text)
        if draft is None:
            return None
        state = self.machine.load(draft)
        log.info(
            "draft_loaded",
            provenance=draft.provenance.value,
            confidence=draft.confidence,
            state=state.value,
        )
        return draft

    def approve(self) -> Optional[Transaction]:
        return self.machine.approve()

    def hold(self) -> bool:
        return self.machine.hold()

    def reset(self) -> None:
        self.machine.reset()
        self.orchestrator.clear()

    async def wait_for_countdown(self) -> Optional[Transaction]:
        return await self.machine.wait_for_countdown()

    def accept_category_suggestion(self) -> str:
        """Create the suggested category and attach it to the live draft.

        Returns:
            ID of the new category

        Raises:
            ConflictError: If the draft carries no suggestion
        """
        draft = self.machine.draft
        if draft is None or not isinstance(draft.resolution, CategorySuggestion):
            raise ConflictError("The current draft has no category suggestion")
        category_id = self.categories.create_from_suggestion(draft.resolution)
        self.machine.amend(replace(draft, resolution=CategoryMatch(category_id=category_id)))
        return category_id

    def choose_account(self, draft: ParsedDraft) -> str:
        """Account a draft is booked against.

        The account whose number suffix matches the draft wins, then the
        session default, then the first account.

        Raises:
            ValidationError: If there are no accounts
        """
        if draft.account_suffix:
            account = self.accounts.find_by_suffix(draft.account_suffix)
            if account is not None:
                return account.id
        if self.default_account_id:
            return self.default_account_id
        accounts = self.accounts.list_accounts()
        if not accounts:
            raise ValidationError("No account to record the entry against")
        return accounts[0].id

    def _commit_draft(self, draft: ParsedDraft, commit_key: str) -> Transaction:
        amount = require_positive(draft.amount)
        if draft.kind == TransactionKind.TRANSFER:
            raise ValidationError("Transfers cannot be entered from a message")

        account_id = self.choose_account(draft)
        category_id = draft.resolution.category_id if isinstance(draft.resolution, CategoryMatch) else None
        transaction = Transaction(
            amount=amount,
            kind=draft.kind,
            from_account_id=account_id if draft.kind == TransactionKind.EXPENSE else None,
            to_account_id=account_id if draft.kind == TransactionKind.INCOME else None,
            category_id=category_id,
            description=draft.description,
            status=self.commit_status,
            source=TransactionSource.MAGIC,
            commit_key=commit_key,
        )
        return self.ledger.commit(transaction)

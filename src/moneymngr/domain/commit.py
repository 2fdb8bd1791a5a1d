"""Commit state machine for parsed drafts.

Decides when a draft becomes a transaction: on explicit approval, or
automatically after a short cancellable countdown for high-confidence oracle
drafts. Heuristic drafts never commit on their own.
"""

import asyncio
import uuid
from enum import Enum
from typing import Callable, Optional

from moneymngr.domain.entities import DraftProvenance, ParsedDraft, Transaction
from moneymngr.domain.errors import ConflictError, DomainError
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

AUTO_COMMIT_CONFIDENCE = 80
DEFAULT_COUNTDOWN_TICKS = 3

Committer = Callable[[ParsedDraft, str], Transaction]


class CommitState(str, Enum):
    """States of the commit state machine."""

    EMPTY = "EMPTY"
    DRAFTED = "DRAFTED"
    COUNTDOWN = "COUNTDOWN"
    HELD = "HELD"
    COMMITTED = "COMMITTED"


def eligible_for_auto_commit(draft: ParsedDraft) -> bool:
    """Only oracle drafts at or above the confidence threshold auto-commit."""
    return draft.provenance == DraftProvenance.ORACLE and draft.confidence >= AUTO_COMMIT_CONFIDENCE


class CommitStateMachine:
    """Holds the current draft and commits it exactly once.

    The countdown runs as an asyncio task. Each countdown gets a generation
    number; cancelling bumps the generation, and the task checks it before
    committing, so a tick that fires after ``hold`` or ``reset`` is a no-op.
    A held draft is flagged and never auto-commits again; only ``approve``
    can commit it.
    """

    def __init__(
        self,
        committer: Committer,
        ticks: int = DEFAULT_COUNTDOWN_TICKS,
        tick_seconds: float = 1.0,
        notifier: Optional[Callable[[DomainError], None]] = None,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        """Initialize the state machine.

        Args:
            committer: Callable turning (draft, commit_key) into a committed
                transaction
            ticks: Number of countdown ticks before auto-commit
            tick_seconds: Length of one tick
            notifier: Callback for commit failures
            on_tick: Callback receiving the remaining tick count
        """
        if ticks < 1:
            raise ValueError("Countdown needs at least one tick")
        self.committer = committer
        self.ticks = ticks
        self.tick_seconds = tick_seconds
        self.notifier = notifier
        self.on_tick = on_tick

        self.state = CommitState.EMPTY
        self.draft: Optional[ParsedDraft] = None
        self.commit_key: Optional[str] = None
        self.held = False
        self.remaining: Optional[int] = None
        self.last_committed: Optional[Transaction] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    def _transition(self, state: CommitState) -> None:
        log.debug("commit_state", previous=self.state.value, state=state.value)
        self.state = state

    def _cancel_countdown(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.remaining = None

    def load(self, draft: ParsedDraft) -> CommitState:
        """Replace the current draft, cancelling any running countdown.

        An eligible draft starts a countdown when an event loop is running;
        otherwise it waits for explicit approval.
        """
        self._cancel_countdown()
        self.draft = draft
        self.commit_key = str(uuid.uuid4())
        self.held = False
        self._transition(CommitState.DRAFTED)

        if eligible_for_auto_commit(draft):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                log.debug("countdown_unavailable", reason="no running event loop")
            else:
                self._start_countdown(loop)
        return self.state

    def amend(self, draft: ParsedDraft) -> None:
        """Swap in an edited version of the current draft without changing state."""
        if self.draft is None:
            raise ConflictError("No draft to amend")
        self.draft = draft

    def _start_countdown(self, loop: asyncio.AbstractEventLoop) -> None:
        self._generation += 1
        self.remaining = self.ticks
        self._transition(CommitState.COUNTDOWN)
        self._task = loop.create_task(self._run_countdown(self._generation))
        log.info("countdown_started", ticks=self.ticks, commit_key=self.commit_key)

    async def _run_countdown(self, generation: int) -> None:
        while self.remaining:
            await asyncio.sleep(self.tick_seconds)
            if generation != self._generation:
                return
            self.remaining -= 1
            if self.on_tick is not None:
                self.on_tick(self.remaining)

        if generation != self._generation or self.state != CommitState.COUNTDOWN:
            return
        self._task = None
        try:
            self._commit()
        except Exception as e:
            # Nothing awaits the task, so errors stop here
            log.exception("auto_commit_crashed", commit_key=self.commit_key)
            self._transition(CommitState.DRAFTED)
            if self.notifier is not None:
                self.notifier(DomainError(f"Could not save the entry: {e}"))

    def hold(self) -> bool:
        """Stop a running countdown. The draft stays, flagged as held.

        Returns:
            True if a countdown was stopped, False if none was running
        """
        if self.state != CommitState.COUNTDOWN:
            return False
        self._cancel_countdown()
        self.held = True
        self._transition(CommitState.HELD)
        self._transition(CommitState.DRAFTED)
        log.info("countdown_held")
        return True

    def approve(self) -> Optional[Transaction]:
        """Commit the current draft now.

        Returns:
            The committed transaction, or None if committing failed (the
            failure is reported through the notifier and the draft is kept)

        Raises:
            ConflictError: If there is no draft
        """
        if self.state not in (CommitState.DRAFTED, CommitState.COUNTDOWN):
            raise ConflictError(f"Nothing to approve in state {self.state.value}")
        self._cancel_countdown()
        return self._commit()

    def _commit(self) -> Optional[Transaction]:
        try:
            transaction = self.committer(self.draft, self.commit_key)
        except DomainError as e:
            log.warning("draft_commit_failed", error=str(e))
            self._transition(CommitState.DRAFTED)
            if self.notifier is not None:
                self.notifier(e)
            return None

        self._transition(CommitState.COMMITTED)
        self.last_committed = transaction
        self.draft = None
        self.commit_key = None
        self.held = False
        self._transition(CommitState.EMPTY)
        return transaction

    def reset(self) -> None:
        """Discard the draft and any countdown."""
        self._cancel_countdown()
        self.draft = None
        self.commit_key = None
        self.held = False
        self._transition(CommitState.EMPTY)

    async def wait_for_countdown(self) -> Optional[Transaction]:
        """Wait for a running countdown to finish.

        Returns:
            The auto-committed transaction, or None if the countdown was
            cancelled, failed to commit, or none was running
        """
        task = self._task
        if task is None:
            return None
        committed_before = self.last_committed
        try:
            await task
        except asyncio.CancelledError:
            # Only swallow cancellation of the countdown itself
            if not task.cancelled():
                raise
            return None
        if self.last_committed is committed_before:
            return None
        return self.last_committed

"""Tests for the commit state machine."""

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from moneymngr.domain.commit import CommitState, CommitStateMachine, eligible_for_auto_commit
from moneymngr.domain.entities import DraftProvenance, ParsedDraft, Transaction, TransactionKind
from moneymngr.domain.errors import ConflictError, DomainError, InvalidAmount

ORACLE_DRAFT = ParsedDraft(
    amount=Decimal("450"),
    kind=TransactionKind.EXPENSE,
    institution="ICICI",
    confidence=85,
    provenance=DraftProvenance.ORACLE,
)
HEURISTIC_DRAFT = replace(ORACLE_DRAFT, confidence=100, provenance=DraftProvenance.HEURISTIC)


class RecordingCommitter:
    """Committer stand-in that records what it was asked to commit."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def __call__(self, draft, commit_key):
        self.calls.append((draft, commit_key))
        if self.error is not None:
            raise self.error
        return Transaction(amount=draft.amount, kind=draft.kind, id=f"txn-{len(self.calls)}", commit_key=commit_key)


@pytest.fixture
def committer():
    return RecordingCommitter()


@pytest.fixture
def machine(committer):
    return CommitStateMachine(committer, ticks=3, tick_seconds=0)


def test_eligibility():
    assert eligible_for_auto_commit(ORACLE_DRAFT)
    assert eligible_for_auto_commit(replace(ORACLE_DRAFT, confidence=80))
    assert not eligible_for_auto_commit(replace(ORACLE_DRAFT, confidence=79))
    assert not eligible_for_auto_commit(HEURISTIC_DRAFT)


def test_starts_empty(machine):
    assert machine.state == CommitState.EMPTY
    assert machine.draft is None


def test_needs_at_least_one_tick(committer):
    with pytest.raises(ValueError):
        CommitStateMachine(committer, ticks=0)


@pytest.mark.asyncio
async def test_confident_oracle_draft_counts_down_and_commits(machine, committer):
    assert machine.load(ORACLE_DRAFT) == CommitState.COUNTDOWN

    txn = await machine.wait_for_countdown()

    assert txn is not None
    assert len(committer.calls) == 1
    assert machine.state == CommitState.EMPTY
    assert machine.draft is None
    assert machine.last_committed is txn


@pytest.mark.asyncio
async def test_ticks_are_reported(committer):
    ticks = []
    machine = CommitStateMachine(committer, ticks=3, tick_seconds=0, on_tick=ticks.append)

    machine.load(ORACLE_DRAFT)
    await machine.wait_for_countdown()

    assert ticks == [2, 1, 0]


@pytest.mark.asyncio
async def test_heuristic_draft_never_auto_commits(machine, committer):
    assert machine.load(HEURISTIC_DRAFT) == CommitState.DRAFTED

    await asyncio.sleep(0.01)

    assert committer.calls == []
    assert machine.state == CommitState.DRAFTED


@pytest.mark.asyncio
async def test_low_confidence_oracle_draft_waits(machine, committer):
    assert machine.load(replace(ORACLE_DRAFT, confidence=60)) == CommitState.DRAFTED
    await asyncio.sleep(0.01)
    assert committer.calls == []


@pytest.mark.asyncio
async def test_hold_prevents_commit(machine, committer):
    machine.load(ORACLE_DRAFT)

    assert machine.hold() is True

    assert machine.state == CommitState.DRAFTED
    assert machine.held
    assert machine.draft == ORACLE_DRAFT
    await asyncio.sleep(0.01)
    assert committer.calls == []
    assert await machine.wait_for_countdown() is None


@pytest.mark.asyncio
async def test_hold_mid_countdown_stops_late_tick(committer):
    """A hold issued between ticks prevents the commit."""
    machine = None

    def hold_on_second_tick(remaining):
        if remaining == 1:
            machine.hold()

    machine = CommitStateMachine(committer, ticks=3, tick_seconds=0, on_tick=hold_on_second_tick)
    machine.load(ORACLE_DRAFT)
    await machine.wait_for_countdown()
    await asyncio.sleep(0.01)

    assert committer.calls == []
    assert machine.state == CommitState.DRAFTED
    assert machine.held


@pytest.mark.asyncio
async def test_held_draft_can_be_approved(machine, committer):
    machine.load(ORACLE_DRAFT)
    machine.hold()

    txn = machine.approve()

    assert txn is not None
    assert len(committer.calls) == 1
    assert machine.state == CommitState.EMPTY


@pytest.mark.asyncio
async def test_hold_without_countdown_is_a_no_op(machine):
    machine.load(HEURISTIC_DRAFT)
    assert machine.hold() is False
    assert not machine.held


def test_approve_heuristic_draft(machine, committer):
    machine.load(HEURISTIC_DRAFT)

    txn = machine.approve()

    assert txn.id == "txn-1"
    assert committer.calls[0][0] == HEURISTIC_DRAFT
    assert machine.state == CommitState.EMPTY


def test_approve_without_draft_conflicts(machine):
    with pytest.raises(ConflictError):
        machine.approve()


@pytest.mark.asyncio
async def test_approve_during_countdown_commits_once(machine, committer):
    machine.load(ORACLE_DRAFT)

    machine.approve()
    await asyncio.sleep(0.01)

    assert len(committer.calls) == 1


def test_eligible_draft_without_event_loop_waits(machine, committer):
    assert machine.load(ORACLE_DRAFT) == CommitState.DRAFTED
    assert committer.calls == []


@pytest.mark.asyncio
async def test_new_draft_replaces_countdown(machine, committer):
    machine.load(ORACLE_DRAFT)
    second = replace(ORACLE_DRAFT, amount=Decimal("99"))

    machine.load(second)
    await machine.wait_for_countdown()
    await asyncio.sleep(0.01)

    assert len(committer.calls) == 1
    assert committer.calls[0][0] == second


@pytest.mark.asyncio
async def test_reset_cancels_countdown(machine, committer):
    machine.load(ORACLE_DRAFT)

    machine.reset()
    await asyncio.sleep(0.01)

    assert committer.calls == []
    assert machine.state == CommitState.EMPTY


def test_each_draft_gets_its_own_commit_key(machine, committer):
    machine.load(HEURISTIC_DRAFT)
    machine.approve()
    machine.load(HEURISTIC_DRAFT)
    machine.approve()

    keys = [key for _, key in committer.calls]
    assert len(set(keys)) == 2
    assert all(keys)


def test_failed_commit_keeps_draft():
    notifications = []
    committer = RecordingCommitter(error=InvalidAmount("Amount must be positive, got 0"))
    machine = CommitStateMachine(committer, notifier=notifications.append)
    machine.load(replace(HEURISTIC_DRAFT, amount=Decimal("0")))

    assert machine.approve() is None

    assert machine.state == CommitState.DRAFTED
    assert machine.draft is not None
    assert isinstance(notifications[0], InvalidAmount)


@pytest.mark.asyncio
async def test_failed_auto_commit_returns_to_drafted():
    notifications = []
    committer = RecordingCommitter(error=InvalidAmount("bad"))
    machine = CommitStateMachine(committer, tick_seconds=0, notifier=notifications.append)
    machine.load(ORACLE_DRAFT)

    assert await machine.wait_for_countdown() is None

    assert machine.state == CommitState.DRAFTED
    assert len(notifications) == 1


@pytest.mark.asyncio
async def test_storage_error_during_auto_commit_returns_to_drafted():
    notifications = []
    committer = RecordingCommitter(error=RuntimeError("database is locked"))
    machine = CommitStateMachine(committer, tick_seconds=0, notifier=notifications.append)
    machine.load(ORACLE_DRAFT)

    assert await machine.wait_for_countdown() is None

    assert machine.state == CommitState.DRAFTED
    assert machine.draft == ORACLE_DRAFT
    assert len(notifications) == 1
    assert isinstance(notifications[0], DomainError)
    assert "database is locked" in str(notifications[0])

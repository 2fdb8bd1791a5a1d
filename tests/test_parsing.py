"""Tests for the parse orchestrator."""

import asyncio

import pytest

from moneymngr.domain.entities import CategoryMatch, DraftProvenance
from moneymngr.domain.errors import ConflictError, ExtractionFailure
from moneymngr.domain.parsing import ParseOrchestrator

HDFC_TEXT = "HDFC Bank: Rs.1,250.00 debited from A/c XX1234"


def test_parse_locally_sets_draft():
    orchestrator = ParseOrchestrator()

    draft = orchestrator.parse_locally(HDFC_TEXT)

    assert draft.provenance == DraftProvenance.HEURISTIC
    assert orchestrator.draft is draft


def test_no_match_keeps_current_draft():
    orchestrator = ParseOrchestrator()
    draft = orchestrator.parse_locally(HDFC_TEXT)

    assert orchestrator.parse_locally("lunch with friends") is None
    assert orchestrator.draft is draft


def test_category_hint_is_resolved(category_service, sample_categories):
    orchestrator = ParseOrchestrator(categories=category_service)

    draft = orchestrator.parse_locally("HDFC: Rs.450 debited from A/c XX1234 at Swiggy")

    assert draft.category_hint == "Food"
    assert draft.resolution == CategoryMatch(category_id=sample_categories["Food & Dining"])


@pytest.mark.asyncio
async def test_oracle_replaces_local_draft(oracle, category_service, sample_categories):
    orchestrator = ParseOrchestrator(oracle=oracle, categories=category_service)
    orchestrator.parse_locally(HDFC_TEXT)

    draft = await orchestrator.parse_with_oracle(HDFC_TEXT)

    assert draft.provenance == DraftProvenance.ORACLE
    assert orchestrator.draft is draft
    # Replaced wholesale, not merged with the local account suffix
    assert draft.account_suffix is None
    assert draft.resolution == CategoryMatch(category_id=sample_categories["Food & Dining"])


@pytest.mark.asyncio
async def test_oracle_failure_is_recovered(failing_oracle):
    notifications = []
    orchestrator = ParseOrchestrator(oracle=failing_oracle, notifier=notifications.append)
    local = orchestrator.parse_locally(HDFC_TEXT)

    assert await orchestrator.parse_with_oracle(HDFC_TEXT) is None

    assert orchestrator.draft is local
    assert not orchestrator.oracle_pending
    assert len(notifications) == 1
    assert isinstance(notifications[0], ExtractionFailure)


@pytest.mark.asyncio
async def test_missing_oracle_is_reported():
    notifications = []
    orchestrator = ParseOrchestrator(notifier=notifications.append)

    assert await orchestrator.parse_with_oracle(HDFC_TEXT) is None
    assert isinstance(notifications[0], ExtractionFailure)


@pytest.mark.asyncio
async def test_second_oracle_call_while_in_flight_is_refused(fake_client, oracle):
    fake_client.gate = asyncio.Event()
    orchestrator = ParseOrchestrator(oracle=oracle)

    first = asyncio.create_task(orchestrator.parse_with_oracle("one"))
    await asyncio.sleep(0)
    assert orchestrator.oracle_pending

    with pytest.raises(ConflictError):
        await orchestrator.parse_with_oracle("two")

    fake_client.gate.set()
    assert (await first) is not None
    assert fake_client.calls == ["one"]
    assert not orchestrator.oracle_pending


@pytest.mark.asyncio
async def test_later_local_parse_beats_earlier_oracle(fake_client, oracle):
    """The most recently invoked successful parse wins."""
    fake_client.gate = asyncio.Event()
    orchestrator = ParseOrchestrator(oracle=oracle)

    pending = asyncio.create_task(orchestrator.parse_with_oracle("paid swiggy"))
    await asyncio.sleep(0)
    local = orchestrator.parse_locally(HDFC_TEXT)
    fake_client.gate.set()

    assert (await pending) is None
    assert orchestrator.draft is local


@pytest.mark.asyncio
async def test_failed_local_parse_does_not_block_oracle(fake_client, oracle):
    fake_client.gate = asyncio.Event()
    orchestrator = ParseOrchestrator(oracle=oracle)

    pending = asyncio.create_task(orchestrator.parse_with_oracle("paid swiggy"))
    await asyncio.sleep(0)
    assert orchestrator.parse_locally("paid swiggy 450") is None
    fake_client.gate.set()

    draft = await pending
    assert draft is not None
    assert orchestrator.draft is draft

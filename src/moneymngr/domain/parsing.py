"""Parse orchestration: local matcher first, extraction oracle on request."""

from dataclasses import replace
from typing import Callable, Optional

from moneymngr.domain.category import CategoryService
from moneymngr.domain.entities import ParsedDraft, TransactionKind
from moneymngr.domain.errors import ConflictError, DomainError, ExtractionFailure
from moneymngr.domain.matcher import match
from moneymngr.oracle.adapter import ExtractionOracle
from moneymngr.utils.category_resolver import resolve_category
from moneymngr.utils.log import get_logger

log = get_logger(__name__)


class ParseOrchestrator:
    """Runs one parse attempt per user action and tracks which result is current.

    Every invocation takes a sequence number. A successful result only
    replaces the current draft if no later invocation has produced one in the
    meantime, so an oracle answer arriving after a newer local parse is
    dropped. Results replace the draft wholesale; fields are never merged.
    """

    def __init__(
        self,
        oracle: Optional[ExtractionOracle] = None,
        categories: Optional[CategoryService] = None,
        notifier: Optional[Callable[[DomainError], None]] = None,
        matcher: Callable[[str], Optional[ParsedDraft]] = match,
    ):
        """Initialize the orchestrator.

        Args:
            oracle: Extraction oracle adapter; None disables oracle parsing
            categories: Category service used to resolve category hints
            notifier: Callback for recovered failures
            matcher: Local heuristic parser
        """
        self.oracle = oracle
        self.categories = categories
        self.notifier = notifier
        self.matcher = matcher
        self.draft: Optional[ParsedDraft] = None
        self._invocations = 0
        self._draft_invocation = 0
        self._oracle_in_flight = False

    @property
    def oracle_pending(self) -> bool:
        """True while an oracle request is in flight."""
        return self._oracle_in_flight

    def _next_invocation(self) -> int:
        self._invocations += 1
        return self._invocations

    def _notify(self, error: DomainError) -> None:
        if self.notifier is not None:
            self.notifier(error)

    def _resolve(self, draft: ParsedDraft) -> ParsedDraft:
        if not draft.category_hint or draft.kind == TransactionKind.TRANSFER or self.categories is None:
            return draft
        resolution = resolve_category(draft.kind, draft.category_hint, self.categories.list_categories())
        return replace(draft, resolution=resolution)

    def _accept(self, invocation: int, draft: ParsedDraft) -> Optional[ParsedDraft]:
        if invocation < self._draft_invocation:
            log.info("stale_draft_dropped", provenance=draft.provenance.value, invocation=invocation)
            return None
        draft = self._resolve(draft)
        self.draft = draft
        self._draft_invocation = invocation
        log.debug(
            "draft_accepted",
            provenance=draft.provenance.value,
            confidence=draft.confidence,
            institution=draft.institution,
        )
        return draft

    def parse_locally(self, text: str) -> Optional[ParsedDraft]:
        """Parse with the bank-pattern matcher only.

        Returns:
            The new draft, or None when nothing matched (the current draft is
            left as it was)
        """
        invocation = self._next_invocation()
        draft = self.matcher(text)
        if draft is None:
            log.debug("no_match", text_length=len(text or ""))
            return None
        return self._accept(invocation, draft)

    async def parse_with_oracle(self, text: str) -> Optional[ParsedDraft]:
        """Parse with the extraction oracle. Only call on an explicit user request.

        Returns:
            The new draft, or None when the oracle failed or a newer parse
            already replaced the draft

        Raises:
            ConflictError: If an oracle request is already in flight
        """
        if self._oracle_in_flight:
            raise ConflictError("An extraction request is already in progress")
        if self.oracle is None:
            self._notify(ExtractionFailure("No extraction service is configured"))
            return None

        invocation = self._next_invocation()
        self._oracle_in_flight = True
        try:
            draft = await self.oracle.suggest(text)
        except ExtractionFailure as e:
            log.warning("oracle_request_failed", error=str(e))
            self._notify(e)
            return None
        finally:
            self._oracle_in_flight = False

        return self._accept(invocation, draft)

    def clear(self) -> None:
        """Forget the current draft."""
        self.draft = None
        self._draft_invocation = self._invocations

"""Extraction oracle adapter.

Turns the oracle's JSON into the same ParsedDraft the bank-pattern matcher
produces. The response is validated here, at the boundary: values outside
the closed enums are rejected as ExtractionFailure.
"""

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from moneymngr.domain.entities import DraftProvenance, ParsedDraft, TransactionKind
from moneymngr.domain.errors import ExtractionFailure
from moneymngr.oracle.base import ExtractionClient
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

# Used when the oracle omits confidence or sends something unusable
DEFAULT_ORACLE_CONFIDENCE = 80

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "amount": {"type": "NUMBER", "description": "The transaction amount"},
        "type": {"type": "STRING", "description": "EXPENSE or INCOME"},
        "bankName": {"type": "STRING", "description": "Name of the bank"},
        "merchant": {"type": "STRING", "description": "Merchant name if mentioned"},
        "category": {
            "type": "STRING",
            "description": "Suggested category (e.g., Food, Transport, Salary)",
        },
        "confidence": {"type": "NUMBER", "description": "Confidence score from 0 to 100"},
    },
    "required": ["amount", "type", "bankName"],
}


class OracleExtraction(BaseModel):
    """Shape of a valid oracle response."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    amount: Decimal = Field(ge=0, allow_inf_nan=False)
    type: Literal["EXPENSE", "INCOME"]
    bank_name: str = Field(alias="bankName", min_length=1)
    merchant: Optional[str] = None
    category: Optional[str] = None
    confidence: int = DEFAULT_ORACLE_CONFIDENCE

    @field_validator("confidence", mode="before")
    @classmethod
    def default_malformed_confidence(cls, v: Any) -> int:
        """Missing, non-numeric or out-of-range confidence becomes the default."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return DEFAULT_ORACLE_CONFIDENCE
        if not 0 <= v <= 100:
            return DEFAULT_ORACLE_CONFIDENCE
        return round(v)

    @field_validator("merchant", "category", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_draft(self) -> ParsedDraft:
        return ParsedDraft(
            amount=self.amount,
            kind=TransactionKind(self.type),
            institution=self.bank_name,
            confidence=self.confidence,
            provenance=DraftProvenance.ORACLE,
            merchant=self.merchant,
            category_hint=self.category,
        )


class ExtractionOracle:
    """Adapter over an injected ExtractionClient."""

    def __init__(self, client: ExtractionClient):
        """Initialize the adapter.

        Args:
            client: Transport to the extraction service
        """
        self.client = client

    async def suggest(self, text: str) -> ParsedDraft:
        """Ask the oracle for a draft.

        Args:
            text: Raw message text

        Returns:
            ParsedDraft with ORACLE provenance

        Raises:
            ExtractionFailure: On transport failure or a response that does not
                fit the extraction schema
        """
        try:
            data = await self.client.extract(text, EXTRACTION_SCHEMA)
        except ExtractionFailure:
            raise
        except Exception as e:
            raise ExtractionFailure(f"Extraction service request failed: {e}") from e

        try:
            extraction = OracleExtraction.model_validate(data)
        except PydanticValidationError as e:
            log.warning("oracle_response_rejected", errors=e.error_count())
            raise ExtractionFailure(f"Extraction service response did not match schema: {e}") from e

        draft = extraction.to_draft()
        log.info(
            "oracle_draft",
            institution=draft.institution,
            kind=draft.kind.value,
            confidence=draft.confidence,
        )
        return draft

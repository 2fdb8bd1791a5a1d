"""Bank-pattern matcher.

Heuristic extraction of a transaction from a bank notification message.
Pure and deterministic; cheap enough to run on every edit of the text.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from moneymngr.domain.entities import DraftProvenance, ParsedDraft, TransactionKind
from moneymngr.domain.errors import InvalidAmount
from moneymngr.utils.amount_parser import parse_amount

INSTITUTION_SCORE = 30
AMOUNT_SCORE = 30
ACCOUNT_SCORE = 20
DIRECTION_SCORE = 20

# Below this the text is treated as unparseable
MIN_CONFIDENCE = 40


@dataclass(frozen=True)
class BankProfile:
    """Patterns recognising one institution's messages."""

    name: str
    debit: re.Pattern
    credit: re.Pattern
    amount: re.Pattern
    account: re.Pattern


BANK_PROFILES: tuple[BankProfile, ...] = (
    BankProfile(
        name="HDFC",
        debit=re.compile(r"debited|sent|withdrawn|payment", re.IGNORECASE),
        credit=re.compile(r"credited|received|deposited", re.IGNORECASE),
        amount=re.compile(r"Rs\.?\s?([\d,]+\.?\d*)", re.IGNORECASE),
        account=re.compile(r"A/c\s*[X*]*\d*(\d{4})", re.IGNORECASE),
    ),
    BankProfile(
        name="SBI",
        debit=re.compile(r"debited|transferred", re.IGNORECASE),
        credit=re.compile(r"credited|received", re.IGNORECASE),
        amount=re.compile(r"INR\s?([\d,]+\.?\d*)", re.IGNORECASE),
        account=re.compile(r"XX(\d{4})", re.IGNORECASE),
    ),
)

MERCHANT_CATEGORY_HINTS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\b(?:swiggy|zomato)\b", re.IGNORECASE), "Food"),
    (re.compile(r"\b(?:uber|ola)\b", re.IGNORECASE), "Transport"),
    (re.compile(r"\bsalary\b", re.IGNORECASE), "Salary"),
)


def suggest_category_hint(text: str) -> Optional[str]:
    """Return a category name hinted by a known merchant keyword, if any."""
    for pattern, category in MERCHANT_CATEGORY_HINTS:
        if pattern.search(text):
            return category
    return None


def _extract_amount(profile: BankProfile, text: str) -> Optional[Decimal]:
    amount_match = profile.amount.search(text)
    if amount_match is None:
        return None
    try:
        return parse_amount(amount_match.group(1))
    except InvalidAmount:
        return None


def match(text: str, profiles: Sequence[BankProfile] = BANK_PROFILES) -> Optional[ParsedDraft]:
    """Extract a draft transaction from a bank message.

    Profiles are tried in order and only the first one whose name appears in
    the text is scored; profiles are never merged.

    Args:
        text: Raw message text
        profiles: Institution profiles in priority order

    Returns:
        ParsedDraft with HEURISTIC provenance, or None when no profile matches
        or the confidence stays below MIN_CONFIDENCE
    """
    if not text or not text.strip():
        return None

    upper = text.upper()
    for profile in profiles:
        if profile.name.upper() not in upper:
            continue

        confidence = INSTITUTION_SCORE

        amount = _extract_amount(profile, text)
        if amount is not None:
            confidence += AMOUNT_SCORE

        account_suffix = None
        account_match = profile.account.search(text)
        if account_match:
            account_suffix = account_match.group(1)
            confidence += ACCOUNT_SCORE

        # Debit wins when both keywords appear
        kind = TransactionKind.EXPENSE
        if profile.debit.search(text):
            confidence += DIRECTION_SCORE
        elif profile.credit.search(text):
            kind = TransactionKind.INCOME
            confidence += DIRECTION_SCORE

        if confidence < MIN_CONFIDENCE:
            return None

        return ParsedDraft(
            amount=amount,
            kind=kind,
            institution=profile.name,
            confidence=confidence,
            provenance=DraftProvenance.HEURISTIC,
            account_suffix=account_suffix,
            category_hint=suggest_category_hint(text),
        )

    return None

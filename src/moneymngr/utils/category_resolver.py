"""Utility for resolving a category hint to an existing category."""

from typing import Iterable

from moneymngr.domain.entities import (
    Category,
    CategoryKind,
    CategoryMatch,
    CategoryResolution,
    CategorySuggestion,
    TransactionKind,
)
from moneymngr.domain.errors import ValidationError


def resolve_category(
    kind: TransactionKind | CategoryKind | str,
    hint: str,
    categories: Iterable[Category],
) -> CategoryResolution:
    """Resolve a free-text category hint against existing categories.

    A category matches when its kind equals ``kind`` and either name contains
    the other, ignoring case. The first match in iteration order wins. When
    nothing matches, the hint is proposed as a new category; nothing is
    created here.

    Args:
        kind: Kind of the draft (EXPENSE or INCOME)
        hint: Category name hint, e.g. "food"
        categories: Existing categories, in sort order

    Returns:
        CategoryMatch or CategorySuggestion

    Raises:
        ValidationError: If the hint is blank or the kind is TRANSFER
    """
    try:
        category_kind = CategoryKind(getattr(kind, "value", kind))
    except ValueError:
        raise ValidationError(f"Transactions of kind {kind} have no category")

    needle = (hint or "").strip()
    if not needle:
        raise ValidationError("Category hint is empty")
    lowered = needle.lower()

    for cat in categories:
        if cat.kind != category_kind:
            continue
        name = cat.name.lower()
        if lowered in name or name in lowered:
            return CategoryMatch(category_id=cat.id)

    return CategorySuggestion(name=needle, kind=category_kind)

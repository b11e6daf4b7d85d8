from __future__ import annotations

from enum import Enum
from typing import Optional

from common.errors import ValidationError
from common.models import CamelModel


class Category(str, Enum):
    FOOD_AND_DRINKS = "Food & Drinks"
    TRAVEL = "Travel"
    SHOPPING = "Shopping"
    BILLS_AND_UTILITIES = "Bills & Utilities"
    ENTERTAINMENT = "Entertainment"
    PERSONAL = "Personal"
    OTHER = "Other"


CATEGORY_NAMES: list[str] = [c.value for c in Category]


def parse_category(value: Optional[str]) -> Category:
    """
    Validate a free-text category label against the known set.
    Matching is exact and case-sensitive so budget and expense labels always line up.
    """
    if value is None or not str(value).strip():
        raise ValidationError("Category is required")
    try:
        return Category(value)
    except ValueError:
        raise ValidationError(
            f"Unknown category '{value}'. Expected one of: {', '.join(CATEGORY_NAMES)}",
            details={"category": value},
        ) from None


class SuggestIn(CamelModel):
    description: Optional[str] = None


class CategorySuggestion(CamelModel):
    category: Category
    confidence: float
    matched_keyword: Optional[str] = None

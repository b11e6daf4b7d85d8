from __future__ import annotations

from fastapi import APIRouter

from ai_services.categorization import RuleBasedCategorizer
from categories.category_model import CATEGORY_NAMES, CategorySuggestion, SuggestIn
from common.errors import ValidationError


router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("/")
async def list_categories() -> list[str]:
    return CATEGORY_NAMES


@router.post("/suggest", response_model=CategorySuggestion)
async def suggest_category(payload: SuggestIn) -> CategorySuggestion:
    if not payload.description:
        raise ValidationError("Description is required")
    return RuleBasedCategorizer().suggest(payload.description)

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ai_services.assistant import ChatAssistant
from ai_services.categorization import CategorizationService
from ai_services.llm import LLMClient, get_llm_client
from ai_services.spending import Insight, PredictionReport, build_prediction_report, generate_insights
from auth.auth import get_current_user
from categories.category_model import CategorySuggestion, SuggestIn
from common.dates import local_now, months_ago
from common.errors import ValidationError
from expenses.expense_repo import ExpenseRepo, get_expense_repo

router = APIRouter(prefix="/api/ai", tags=["ai"])


PREDICTION_MONTHS = 6
INSIGHT_HISTORY = 365
CHAT_HISTORY = 100


class ChatIn(BaseModel):
	message: Optional[str] = None


@router.post("/categorize", response_model=CategorySuggestion)
async def categorize(
	payload: SuggestIn,
	user_id: str = Depends(get_current_user),
	llm: Optional[LLMClient] = Depends(get_llm_client),
) -> CategorySuggestion:
	if not payload.description:
		raise ValidationError("Description is required")
	return await CategorizationService(llm=llm).categorize_description(payload.description)


@router.get("/predict", response_model=PredictionReport)
async def predict(
	user_id: str = Depends(get_current_user),
	repo: ExpenseRepo = Depends(get_expense_repo),
) -> PredictionReport:
	now = local_now()
	expenses = await repo.list_for_user(user_id, since=months_ago(now, PREDICTION_MONTHS))
	return build_prediction_report(expenses, now)


@router.get("/insights")
async def insights(
	user_id: str = Depends(get_current_user),
	repo: ExpenseRepo = Depends(get_expense_repo),
) -> Dict[str, List[Insight]]:
	expenses = await repo.list_for_user(user_id, limit=INSIGHT_HISTORY)
	return {"insights": generate_insights(expenses)}


@router.post("/chat")
async def chat(
	payload: ChatIn,
	user_id: str = Depends(get_current_user),
	repo: ExpenseRepo = Depends(get_expense_repo),
	llm: Optional[LLMClient] = Depends(get_llm_client),
) -> Dict[str, str]:
	if not payload.message or not payload.message.strip():
		raise ValidationError("Please provide a message.")
	expenses = await repo.list_for_user(user_id, limit=CHAT_HISTORY)
	response = await ChatAssistant(llm).reply(expenses, payload.message)
	return {"response": response}

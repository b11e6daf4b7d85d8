from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from ai_services.llm import LLMClient
from categories.category_model import CATEGORY_NAMES, Category, CategorySuggestion

logger = logging.getLogger(__name__)


# Keyword table behind /api/categories/suggest.
# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: Dict[Category, List[str]] = {
    Category.FOOD_AND_DRINKS: [
        "starbucks", "coffee", "restaurant", "food", "lunch", "dinner",
        "breakfast", "cafe", "pizza", "burger", "meal", "grocery",
        "groceries", "supermarket", "mcdonalds", "kfc", "subway",
        "dominos", "eat", "snack", "drink", "tea", "juice",
    ],
    Category.TRAVEL: [
        "uber", "lyft", "ola", "gas", "fuel", "flight", "hotel",
        "airbnb", "taxi", "train", "bus", "parking", "toll",
        "petrol", "diesel", "metro", "railway",
    ],
    Category.SHOPPING: [
        "amazon", "flipkart", "store", "clothes", "shopping", "mall",
        "purchase", "buy", "retail", "dress", "shoes", "bag",
        "myntra", "ajio", "shop",
    ],
    Category.BILLS_AND_UTILITIES: [
        "electric", "electricity", "water", "internet", "phone",
        "utility", "bill", "rent", "mortgage", "wifi", "broadband",
        "mobile", "recharge", "postpaid", "jio", "airtel",
    ],
    Category.ENTERTAINMENT: [
        "movie", "cinema", "netflix", "spotify", "concert", "game",
        "party", "club", "bar", "theater", "prime", "hotstar",
        "youtube", "subscription", "music", "pvr", "inox",
    ],
    Category.PERSONAL: [
        "gym", "fitness", "haircut", "salon", "pharmacy", "medicine",
        "doctor", "health", "hospital", "clinic", "medical",
        "cosmetic", "beauty", "spa",
    ],
}

# Shorter table tried before the LLM on /api/ai/categorize.
# Note "gym" is Entertainment here.
AI_CATEGORY_KEYWORDS: Dict[Category, List[str]] = {
    Category.FOOD_AND_DRINKS: ["restaurant", "coffee", "mcdonald", "lunch", "dinner", "grocery", "food", "pizza", "starbucks"],
    Category.TRAVEL: ["uber", "lyft", "taxi", "train", "flight", "hotel", "gas", "fuel", "airbnb"],
    Category.SHOPPING: ["amazon", "ebay", "store", "mall", "clothing", "electronics", "target", "walmart"],
    Category.BILLS_AND_UTILITIES: ["electric", "internet", "rent", "insurance", "utility", "water", "phone"],
    Category.ENTERTAINMENT: ["movie", "cinema", "concert", "netflix", "spotify", "gym", "theater"],
    Category.PERSONAL: ["haircut", "pharmacy", "medical", "dentist", "salon"],
}


KEYWORD_CONFIDENCE = 0.9
LLM_CONFIDENCE = 0.85
DEFAULT_CONFIDENCE = 0.5


class RuleBasedCategorizer:
    def __init__(self, rules: Optional[Dict[Category, List[str]]] = None) -> None:
        self.rules = rules or CATEGORY_KEYWORDS
        # Precompile one pattern per keyword, preserving table order
        self._patterns: List[Tuple[re.Pattern[str], Category, str]] = []
        for category, keywords in self.rules.items():
            for keyword in keywords:
                pattern = re.compile(re.escape(keyword), flags=re.IGNORECASE)
                self._patterns.append((pattern, category, keyword))

    def categorize(self, description: str) -> Optional[CategorySuggestion]:
        if not description:
            return None
        for pattern, category, keyword in self._patterns:
            if pattern.search(description):
                return CategorySuggestion(category=category, confidence=KEYWORD_CONFIDENCE, matched_keyword=keyword)
        return None

    def suggest(self, description: str) -> CategorySuggestion:
        return self.categorize(description) or CategorySuggestion(category=Category.OTHER, confidence=DEFAULT_CONFIDENCE)


def build_categorize_prompt(description: str) -> str:
    return (
        f"Categorize this expense into ONE of these categories: {', '.join(CATEGORY_NAMES)}.\n"
        f'Expense description: "{description}"\n'
        "Respond with ONLY the category name, nothing else."
    )


class CategorizationService:
    def __init__(self, llm: Optional[LLMClient] = None, rules: Optional[Dict[Category, List[str]]] = None) -> None:
        self.rule_based = RuleBasedCategorizer(rules or AI_CATEGORY_KEYWORDS)
        self.llm = llm

    async def categorize_description(self, description: str) -> CategorySuggestion:
        """
        Keywords first, then the LLM, then Other.
        An LLM answer outside the known categories is treated as Other.
        """
        suggestion = self.rule_based.categorize(description)
        if suggestion is not None:
            return suggestion
        if self.llm is not None:
            try:
                answer = (await self.llm.generate(build_categorize_prompt(description))).strip().strip('"').strip()
            except Exception:
                logger.exception("LLM categorization failed")
            else:
                if answer in CATEGORY_NAMES:
                    return CategorySuggestion(category=Category(answer), confidence=LLM_CONFIDENCE)
                logger.info("LLM suggested unknown category %r; using Other", answer)
        return CategorySuggestion(category=Category.OTHER, confidence=DEFAULT_CONFIDENCE)

from __future__ import annotations

import logging
from typing import Optional, Protocol

from openai import AsyncOpenAI

from settings.config import settings

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    async def generate(self, prompt: str) -> str: ...


class OpenAIChatClient:
    """Single-turn text generation on top of the OpenAI chat completions API."""

    def __init__(self, api_key: str, model: str, max_tokens: int = 400, temperature: float = 0.3) -> None:
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(self, prompt: str) -> str:
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return (resp.choices[0].message.content or "").strip()


def get_llm_client() -> Optional[LLMClient]:
    """
    FastAPI dependency. Returns None when no provider key is configured,
    in which case callers use their rule-based fallbacks.
    """
    if not settings.OPENAI_API_KEY:
        return None
    return OpenAIChatClient(api_key=settings.OPENAI_API_KEY, model=settings.OPENAI_MODEL)

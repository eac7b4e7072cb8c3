from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import openai
from dotenv import load_dotenv

from config import CAPABILITY_TIMEOUT, LLM_BASE_URL, LLM_MODEL_ID
from companion.defaults import (
    EXTRACTOR_MAX_TOKENS,
    EXTRACTOR_TEMPERATURE,
    REFINER_MAX_TOKENS,
    REFINER_TEMPERATURE,
)
from companion.llm.parser import CapabilityConfigError, CapabilityError, CapabilityTimeoutError

logger = logging.getLogger(__name__)


class CompanionLLMClient(Protocol):
    async def classify_emotion(self, system_prompt: str, message: str) -> str: ...

    async def extract_memories(self, system_prompt: str, message: str) -> str: ...


class MockLLMClient:
    """Offline client: every capability answers with nothing usable."""

    async def classify_emotion(self, system_prompt: str, message: str) -> str:
        return ""

    async def extract_memories(self, system_prompt: str, message: str) -> str:
        return "[]"


class OpenAICompanionClient:
    def __init__(
        self,
        *,
        api_key: str | None = None,
        model_id: str | None = None,
        base_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        load_dotenv()
        self.api_key = api_key or os.getenv("OPENAI_API_KEY", "")
        self.model_id = model_id or LLM_MODEL_ID
        self.base_url = base_url or LLM_BASE_URL

        if client is not None:
            self._client = client
            return

        if not self.api_key:
            logger.error("OpenAICompanionClient: OPENAI_API_KEY is not set")
            raise CapabilityConfigError("OPENAI_API_KEY is not set")

        # One attempt per call; the caller owns timeouts and fallbacks.
        self._client = openai.AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            max_retries=0,
            timeout=CAPABILITY_TIMEOUT,
        )

    async def classify_emotion(self, system_prompt: str, message: str) -> str:
        return await self._chat(
            system_prompt,
            message,
            max_tokens=REFINER_MAX_TOKENS,
            temperature=REFINER_TEMPERATURE,
            label="EmotionRefiner",
        )

    async def extract_memories(self, system_prompt: str, message: str) -> str:
        return await self._chat(
            system_prompt,
            message,
            max_tokens=EXTRACTOR_MAX_TOKENS,
            temperature=EXTRACTOR_TEMPERATURE,
            label="MemoryExtractor",
        )

    async def _chat(
        self,
        system_prompt: str,
        message: str,
        *,
        max_tokens: int,
        temperature: float,
        label: str,
    ) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model_id,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": message},
                ],
            )
        except openai.APITimeoutError as exc:
            raise CapabilityTimeoutError(f"{label} request timed out") from exc
        except openai.OpenAIError as exc:
            raise CapabilityError(f"{label} request failed: {exc}") from exc

        usage = getattr(completion, "usage", None)
        if usage:
            logger.info(
                "%s tokens: prompt=%s completion=%s total=%s",
                label,
                getattr(usage, "prompt_tokens", "?"),
                getattr(usage, "completion_tokens", "?"),
                getattr(usage, "total_tokens", "?"),
            )

        if not completion.choices:
            return ""

        content = completion.choices[0].message.content
        return content or ""

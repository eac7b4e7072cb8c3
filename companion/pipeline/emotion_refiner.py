"""Model-backed emotion refiner.

Second, richer opinion used when the keyword fast path is not decisive.
It asks the text-classification capability for a strict JSON object and
validates it locally. Every failure (timeout, transport error, non-JSON,
wrong shape, unknown enum) comes back as a failed ``CapabilityResult``;
nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from companion.defaults import CONFIDENCE_CAP, REFINER_DEFAULT_SCORE
from companion.llm.parser import (
    CapabilityError,
    CapabilityResponseError,
    CapabilityResult,
    CapabilityTimeoutError,
    parse_json_payload,
)
from companion.llm.prompts import build_emotion_refiner_prompt
from companion.llm_client import CompanionLLMClient
from companion.models import EMOTIONS, GRIEF_STAGES, EmotionAnalysis, GriefStage

logger = logging.getLogger(__name__)


class EmotionRefiner:
    def __init__(self, llm_client: CompanionLLMClient, *, timeout: float | None = None) -> None:
        self.llm_client = llm_client
        self.timeout = timeout

    async def refine(self, message: str, memorial_mode: bool = False) -> CapabilityResult[EmotionAnalysis]:
        prompt = build_emotion_refiner_prompt(memorial_mode)
        try:
            raw = await asyncio.wait_for(
                self.llm_client.classify_emotion(prompt, message),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return self._fail(CapabilityTimeoutError(f"no answer within {self.timeout}s"))
        except CapabilityError as exc:
            return self._fail(exc)
        except Exception as exc:
            return self._fail(CapabilityError(f"{type(exc).__name__}: {exc}"))

        try:
            analysis = parse_emotion_payload(raw, memorial_mode)
        except CapabilityResponseError as exc:
            return self._fail(exc)
        logger.debug("Refined emotion: %s", analysis.to_dict())
        return CapabilityResult.ok(analysis)

    @staticmethod
    def _fail(error: CapabilityError) -> CapabilityResult[EmotionAnalysis]:
        logger.warning("Emotion refiner failed: %s", error)
        return CapabilityResult.fail(error)


def parse_emotion_payload(raw: Any, memorial_mode: bool) -> EmotionAnalysis:
    """Validate a classification response. Raises ``CapabilityResponseError``."""
    data = parse_json_payload(raw)
    if not isinstance(data, dict):
        raise CapabilityResponseError("classification response is not an object")

    emotion = str(data.get("emotion") or "").strip().lower()
    if emotion not in EMOTIONS:
        raise CapabilityResponseError(f"unknown or missing emotion: {emotion!r}")

    grief_stage: GriefStage | None = None
    if memorial_mode:
        stage = str(data.get("griefStage") or "").strip().lower()
        # "unknown" carries no information; leave room for the keyword reading.
        if stage in GRIEF_STAGES and stage != "unknown":
            grief_stage = stage  # type: ignore[assignment]

    context = data.get("context")
    return EmotionAnalysis(
        emotion=emotion,  # type: ignore[arg-type]
        score=_clamp_score(data.get("score")),
        context=context.strip() if isinstance(context, str) else "",
        grief_stage=grief_stage,
        source="model",
    )


def _clamp_score(value: Any) -> float:
    if isinstance(value, bool):
        return REFINER_DEFAULT_SCORE
    try:
        score = float(value)
    except (TypeError, ValueError):
        return REFINER_DEFAULT_SCORE
    if score != score:  # NaN
        return REFINER_DEFAULT_SCORE
    return max(0.0, min(score, CONFIDENCE_CAP))

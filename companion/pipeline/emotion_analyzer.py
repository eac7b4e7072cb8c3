"""Hybrid emotion analyzer: keyword fast path first, model refiner on doubt.

The refiner is consulted only when the fast emotion confidence is below
``FAST_PATH_THRESHOLD``. A refiner failure never reaches the caller; the
fast-path reading is returned instead, flagged as degraded.
"""

from __future__ import annotations

import logging

from companion.defaults import FAST_PATH_THRESHOLD, GRIEF_ACCEPT_THRESHOLD
from companion.models import EmotionAnalysis, GriefStage
from companion.pipeline.emotion_refiner import EmotionRefiner
from companion.pipeline.fast_classifier import classify_emotion, classify_grief_stage

logger = logging.getLogger(__name__)


def accepted_grief_stage(message: str) -> tuple[GriefStage | None, float]:
    """Fast grief reading, or ``(None, confidence)`` when too weak to use."""
    stage, confidence = classify_grief_stage(message)
    if confidence > GRIEF_ACCEPT_THRESHOLD:
        return stage, confidence
    return None, confidence


class HybridEmotionAnalyzer:
    def __init__(self, refiner: EmotionRefiner | None = None) -> None:
        self.refiner = refiner

    async def analyze(
        self,
        message: str,
        memorial_mode: bool = False,
        *,
        allow_refiner: bool = True,
    ) -> EmotionAnalysis:
        emotion, confidence = classify_emotion(message)
        grief_stage: GriefStage | None = None
        if memorial_mode:
            grief_stage, _ = accepted_grief_stage(message)

        if confidence >= FAST_PATH_THRESHOLD:
            logger.debug("Fast path decisive: %s %.2f", emotion, confidence)
            return EmotionAnalysis(
                emotion=emotion,
                score=confidence,
                context="keyword-based",
                grief_stage=grief_stage,
                source="keyword",
            )

        if self.refiner is None or not allow_refiner:
            return EmotionAnalysis(
                emotion=emotion,
                score=confidence,
                context="keyword-only",
                grief_stage=grief_stage,
                source="keyword",
            )

        result = await self.refiner.refine(message, memorial_mode)
        if not result.success or result.value is None:
            logger.warning("Emotion analysis degraded to keywords: %s", result.error)
            return EmotionAnalysis(
                emotion=emotion,
                score=confidence,
                context="keyword-fallback",
                grief_stage=grief_stage,
                source="fallback",
                degraded=True,
            )

        refined = result.value
        return EmotionAnalysis(
            emotion=refined.emotion,
            score=refined.score,
            context=refined.context or "model-based",
            grief_stage=refined.grief_stage or grief_stage,
            source="model",
        )
